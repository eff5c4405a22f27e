import os
import sys
import pytest


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()

from tunesbridge.tests.fakes import BUILDERS  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_tunesbridge_env():
    """Ensure TUNESBRIDGE_* variables from the developer's shell do not leak into tests.
    Cleared before each test and restored afterwards, so tests that set them
    explicitly stay deterministic.
    """
    backup = {k: v for k, v in os.environ.items() if k.startswith('TUNESBRIDGE_')}
    for k in backup:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k in [k for k in os.environ if k.startswith('TUNESBRIDGE_')]:
            os.environ.pop(k, None)
        os.environ.update(backup)


@pytest.fixture(params=sorted(BUILDERS))
def backend_name(request):
    """Name of each fake backend in turn."""
    return request.param


@pytest.fixture
def build(backend_name):
    """Builder for the current fake backend: ``build(library) -> (backend, app)``."""
    return BUILDERS[backend_name]
