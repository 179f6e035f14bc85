# ABOUTME: pytest configuration and shared fixtures for gatehouse tests
# ABOUTME: Configures timeouts per test type and provides a controllable clock and signing secrets

import pytest

SIGNING_SECRET = "s" * 32 + "-current-signing-secret"
PREVIOUS_SECRET = "p" * 32 + "-previous-signing-secret"
START_TIME = 1_704_110_400.0  # 2024-01-01 12:00:00 UTC


class FakeClock:
    """Manually advanced clock injected into components that accept ``clock``."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def pytest_configure(config):
    """Configure pytest for gatehouse tests."""
    config.addinivalue_line("markers", "unit: Unit tests with 20-second timeout")
    config.addinivalue_line("markers", "integration: Integration tests with 60-second timeout")
    config.addinivalue_line("markers", "contract: Contract tests with 60-second timeout")


def pytest_collection_modifyitems(config, items):
    """Modify test items to add appropriate timeouts based on test type."""
    for item in items:
        # Respect an explicit timeout marker
        if item.get_closest_marker("timeout"):
            continue

        if item.get_closest_marker("unit"):
            item.add_marker(pytest.mark.timeout(20))
        elif any(item.get_closest_marker(mark) for mark in ["integration", "contract"]):
            item.add_marker(pytest.mark.timeout(60))


@pytest.fixture
def clock():
    """A fake clock starting at 2024-01-01 12:00:00 UTC."""
    return FakeClock()


@pytest.fixture
def signing_secret():
    return SIGNING_SECRET


@pytest.fixture
def previous_secret():
    return PREVIOUS_SECRET
