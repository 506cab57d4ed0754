"""
Stable Stakes - Test Configuration and Fixtures

Common fixtures for all test modules.
"""

import pytest

from src.realtime.scheduler import ManualScheduler
from tests.helpers import ScriptedPolicy


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock; nothing fires until advanced."""
    return ManualScheduler()


@pytest.fixture
def quiet_policy() -> ScriptedPolicy:
    """AI seats neither list nor buy."""
    return ScriptedPolicy()
