class TunesBridgeError(Exception):
    """Base class for errors raised by the facade itself (never for native call failures)."""


class InitializationError(TunesBridgeError):
    """No backend could be bound to this process. Fatal, raised before any entity exists."""


class UnsupportedPlatformError(InitializationError):
    """The host platform has no known automation interface for the media player."""

    def __init__(self, platform: str, message: str = "") -> None:
        super().__init__(message or f"No automation backend is known for platform '{platform}'")
        self.platform = platform


class BackendUnavailableError(InitializationError):
    """A backend library could not be loaded or could not attach to the running application."""

    def __init__(self, backend: str, message: str = "") -> None:
        super().__init__(message or f"Backend '{backend}' is not available")
        self.backend = backend


class SessionClosedError(TunesBridgeError):
    """The backend session was released and can no longer be used."""


class UnknownFieldError(TunesBridgeError, ValueError):
    """A bulk query asked for a field name outside the canonical track vocabulary."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Unknown track field: {field_name!r}")
        self.field_name = field_name


class ColumnMismatchError(TunesBridgeError):
    """Vectorised column reads returned columns of different lengths."""
