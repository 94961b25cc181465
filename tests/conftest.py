# File: tests/conftest.py
import pytest

from page_dumper.capture.store import CaptureStore
from page_dumper.models import SessionContext
from page_dumper.paths import PathPolicy

from fakes import TARGET_URL


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture()
def context() -> SessionContext:
    """
    Session for https://example.com/game/index.html, preserve policy, cross-origin allowed.
    """
    return SessionContext.for_target(TARGET_URL)


@pytest.fixture()
def same_origin_context() -> SessionContext:
    return SessionContext.for_target(TARGET_URL, cross_origin=False)


@pytest.fixture()
def anonymize_context() -> SessionContext:
    return SessionContext.for_target(TARGET_URL, path_policy=PathPolicy.ANONYMIZE)


@pytest.fixture()
def store(context) -> CaptureStore:
    return CaptureStore(context)
