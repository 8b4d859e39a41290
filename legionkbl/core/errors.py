"""Domain-specific errors for legionkbl."""


class LegionKblError(Exception):
    """Base error for legionkbl."""


class ValidationError(LegionKblError):
    """Raised when lighting parameters are out of range or malformed."""


class ColorError(ValidationError):
    """Raised when a hex color triplet cannot be parsed."""


class InvalidCharacterError(ColorError):
    """Raised when a color string contains a non-hex character."""


class TooShortError(ColorError):
    """Raised when a color string ends before six hex digits were read."""


class TransportError(LegionKblError):
    """Base transport error."""


class DeviceNotFoundError(TransportError):
    """Raised when the keyboard lighting controller is not attached."""


class DriverQueryError(TransportError):
    """Raised when the kernel driver state of the interface cannot be queried."""


class DriverDetachError(TransportError):
    """Raised when an active kernel driver cannot be detached."""


class WriteError(TransportError):
    """Raised when the control transfer fails or times out."""


class SpawnError(LegionKblError):
    """Raised when a monitor's line-emitting process cannot be launched."""


class RuleParseError(LegionKblError):
    """Raised when a rule file does not conform to schema or semantics."""


class RuleLoadError(LegionKblError):
    """Raised when reading a rule file fails."""
