"""Publication name substitution before export."""

from __future__ import annotations

import msgspec.structs

from bibref.config import Preferences
from bibref.core.models import BibliographicRecord
from bibref.logs import LogService


class PublicationRewriter:
    """Replaces venue names using the ``export_replacement`` table.

    The table is a list of ``{"from": ..., "to": ...}`` pairs matched
    exactly against the record's publication. It is only applied while
    ``enable_export_replacement`` is set.
    """

    def __init__(
        self,
        preferences: Preferences | None = None,
        log_service: LogService | None = None,
    ):
        self.preferences = preferences or Preferences()
        self.log_service = log_service or LogService()

    def replacements(self) -> dict[str, str]:
        """Build the lookup table from preferences.

        Raises:
            TypeError: If the table is not a list of mappings
            KeyError: If a pair lacks ``from`` or ``to``
        """
        table = self.preferences.get("export_replacement")
        if not isinstance(table, list):
            raise TypeError(
                f"export_replacement must be a list, got {type(table).__name__}"
            )
        return {item["from"]: item["to"] for item in table}

    def rewrite(self, record: BibliographicRecord) -> BibliographicRecord:
        """Return a copy of ``record`` with its publication replaced.

        The record is returned unchanged when replacement is disabled, when
        no pair matches, or when the table is malformed.
        """
        try:
            if not self.preferences.get("enable_export_replacement"):
                return record

            replacements = self.replacements()
            if record.publication in replacements:
                return msgspec.structs.replace(
                    record, publication=str(replacements[record.publication])
                )
            return record
        except Exception as e:
            self.log_service.error(
                "Failed to abbreviate publication name.",
                e,
                True,
                "PublicationRewriter",
            )
            return record
