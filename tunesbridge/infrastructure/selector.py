import logging
import sys
from typing import Callable, Dict, List, Mapping, Optional

from tunesbridge.crosscutting.config import Settings, get_settings
from tunesbridge.crosscutting.logging import CorrelationContext, log_with_fields
from tunesbridge.domain.errors import (
    BackendUnavailableError,
    SessionClosedError,
    UnsupportedPlatformError,
)
from tunesbridge.domain.ports import Backend
from tunesbridge.domain.vocabulary import BackendTag
from tunesbridge.infrastructure.backends.appscript_backend import open_appscript_backend
from tunesbridge.infrastructure.backends.com_backend import open_com_backend
from tunesbridge.infrastructure.backends.scriptingbridge_backend import open_scriptingbridge_backend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[Settings], Backend]

BACKEND_FACTORIES: Dict[BackendTag, BackendFactory] = {
    BackendTag.APPSCRIPT: open_appscript_backend,
    BackendTag.SCRIPTING_BRIDGE: open_scriptingbridge_backend,
    BackendTag.COM: open_com_backend,
}

_WINDOWS_PLATFORMS = ('win32', 'cygwin')


class BackendSession:
    """Owned, process-wide native session bound to exactly one backend.

    Not safe for concurrent use from several threads without external
    serialization.
    """

    def __init__(self, backend: Backend):
        self._backend = backend
        self._closed = False

    @property
    def backend(self) -> Backend:
        if self._closed:
            raise SessionClosedError(f"{self._backend.tag.value} session has been closed")
        return self._backend

    @property
    def tag(self) -> BackendTag:
        return self._backend.tag

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the native root handle. Calling close twice is a no-op."""
        if self._closed:
            return
        self._backend.close()
        self._closed = True
        logger.info(f"Closed {self._backend.tag.value} session")

    def __enter__(self) -> 'BackendSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def candidate_backends(platform: str, settings: Settings) -> List[BackendTag]:
    """Backends to probe on ``platform``, in preferred order.

    Raises:
        UnsupportedPlatformError: no backend is known for the platform, or the
            forced backend does not belong to it
    """
    if platform.startswith('darwin'):
        if settings.prefer_appscript:
            order = [BackendTag.APPSCRIPT, BackendTag.SCRIPTING_BRIDGE]
        else:
            order = [BackendTag.SCRIPTING_BRIDGE, BackendTag.APPSCRIPT]
    elif platform in _WINDOWS_PLATFORMS:
        order = [BackendTag.COM]
    else:
        raise UnsupportedPlatformError(platform)

    if settings.backend is not None:
        if settings.backend not in order:
            raise UnsupportedPlatformError(
                platform,
                f"Backend '{settings.backend.value}' cannot run on platform '{platform}'",
            )
        return [settings.backend]
    return order


def open_session(settings: Optional[Settings] = None,
                 platform: Optional[str] = None,
                 factories: Optional[Mapping[BackendTag, BackendFactory]] = None) -> BackendSession:
    """Select the backend for this process and open its session.

    Each candidate is tried once, in order; a load failure (ImportError) or an
    attach failure moves on to the next one. There is no retry.

    Args:
        settings: Configuration, defaults to the global settings
        platform: Platform string, defaults to ``sys.platform``
        factories: Backend constructors keyed by tag

    Returns:
        A session bound to the first backend that could be opened

    Raises:
        UnsupportedPlatformError: the platform has no backend
        BackendUnavailableError: every candidate failed
    """
    settings = settings or get_settings()
    platform = platform or sys.platform
    factories = factories or BACKEND_FACTORIES

    candidates = candidate_backends(platform, settings)
    failures: List[str] = []

    for tag in candidates:
        with CorrelationContext(backend=tag.value, operation='select_backend'):
            try:
                backend = factories[tag](settings)
            except (ImportError, BackendUnavailableError) as e:
                log_with_fields(logger, 'WARNING', f"Backend {tag.value} unavailable on {platform}",
                                error_type=type(e).__name__, error_message=str(e))
                failures.append(f"{tag.value}: {e}")
                continue
            logger.info(f"Selected backend {tag.value} on {platform}")
        return BackendSession(backend)

    raise BackendUnavailableError(
        ', '.join(tag.value for tag in candidates),
        "No usable automation backend: " + '; '.join(failures),
    )
