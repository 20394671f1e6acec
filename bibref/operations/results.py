"""Result types for export operations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class ResultStatus(Enum):
    """Status of an operation result."""

    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"

    def is_success(self) -> bool:
        """Check if status indicates success."""
        return self in [self.SUCCESS, self.EMPTY]

    def is_failure(self) -> bool:
        """Check if status indicates failure."""
        return not self.is_success()


@dataclass
class OperationResult:
    """Value-or-error result of a render or export."""

    status: ResultStatus
    message: str
    operation_id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=datetime.now)

    # Error information
    errors: list[str] | None = None

    # Additional data
    data: dict[str, Any] | None = None

    # Performance metrics
    duration_ms: int | None = None

    @property
    def success(self) -> bool:
        """Check if the operation succeeded."""
        return self.status.is_success()

    @property
    def output(self) -> str:
        """Rendered text, empty on failure."""
        if not self.data:
            return ""
        return self.data.get("output", "")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "status": self.status.value,
            "message": self.message,
            "operation_id": str(self.operation_id),
            "timestamp": self.timestamp.isoformat(),
        }

        if self.errors:
            result["errors"] = self.errors

        if self.data:
            result["data"] = self.data

        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms

        return result
