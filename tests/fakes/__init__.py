"""Shared Fake collaborators for testing without unittest.mock.

Real Python classes with controllable behaviour, no MagicMock.
"""

from tests.fakes.clock import FakeClock

__all__ = [
    "FakeClock",
]
