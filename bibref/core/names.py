"""Author name parsing for free-text author fields."""

import msgspec


class ParsedName(msgspec.Struct, frozen=True):
    """Given/family name pair in CSL order."""

    given: str = ""
    family: str = ""

    def is_empty(self) -> bool:
        """Check if name is empty."""
        return not (self.given or self.family)

    def to_csl(self) -> dict[str, str]:
        """Convert to a CSL-JSON name object."""
        return {"given": self.given, "family": self.family}


class NameParser:
    """Split author strings such as ``"Jane Doe; John A. Smith"``.

    The delimiter is chosen once per string: ``;`` when it appears anywhere,
    otherwise ``,``. Mixed delimiters are not supported.
    """

    @staticmethod
    def delimiter(text: str) -> str:
        """Return the delimiter used to split ``text``."""
        return ";" if ";" in text else ","

    @staticmethod
    def parse(text: str | None) -> list[ParsedName]:
        """Parse an author string into an ordered list of names.

        Each token is trimmed and split on single spaces. The last piece is
        the family name and the preceding pieces form the given name.

        Args:
            text: Free-text author string.

        Returns:
            Parsed names in input order. Empty input yields an empty list.
        """
        if not text or not text.strip():
            return []

        names = []
        for token in text.split(NameParser.delimiter(text)):
            names.append(NameParser.parse_name(token))
        return names

    @staticmethod
    def parse_name(token: str) -> ParsedName:
        """Parse a single author token."""
        parts = token.strip().split(" ")
        return ParsedName(given=" ".join(parts[:-1]), family=parts[-1])


def parse_authors(text: str | None) -> list[ParsedName]:
    """Parse an author string. See :meth:`NameParser.parse`."""
    return NameParser.parse(text)
