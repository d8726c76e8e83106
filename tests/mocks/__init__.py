"""
Jito Bundler Test Mocks
=======================
Reusable fakes for isolated testing.
"""

from tests.mocks.mock_relay import MockRelay
from tests.mocks.mock_rpc import MockLedger

__all__ = [
    "MockRelay",
    "MockLedger",
]
