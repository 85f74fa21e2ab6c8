"""Domain-specific errors for portlist."""


class PortlistError(Exception):
    """Base error for portlist."""


class FilterSyntaxError(PortlistError):
    """Raised when a filter token (bus, vendor or vendor:device) is malformed."""


class OptionConflictError(PortlistError):
    """Raised when mutually exclusive report options are combined."""


class PresetValidationError(PortlistError):
    """Raised when a preset file does not conform to schema or semantics."""


class PresetLoadError(PortlistError):
    """Raised when reading preset sources fails."""


class PresetNotFoundError(PortlistError):
    """Raised when a requested preset id is not defined."""


class EnumerationError(PortlistError):
    """Raised when the operating system device enumeration fails."""
