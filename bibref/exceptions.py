"""Exception classes for the conversion engine."""


class BibrefError(Exception):
    """Base exception for conversion errors."""

    pass


class RecordFormatError(BibrefError, ValueError):
    """Raised when a record cannot be normalised."""

    def __init__(self, message: str):
        """Initialize with message."""
        super().__init__(f"Invalid record: {message}")


class StyleLoadError(BibrefError):
    """Raised when a CSL style file cannot be loaded."""

    def __init__(self, key: str, reason: str):
        """Initialize with style key and reason."""
        self.key = key
        super().__init__(f"Cannot load style {key}: {reason}")


class UnsupportedFormatError(BibrefError, ValueError):
    """Raised for an unknown export format."""

    def __init__(self, value: str):
        """Initialize with the offending value."""
        self.value = value
        super().__init__(f"Unsupported format: {value}")
