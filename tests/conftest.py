"""
Jito Bundler Test Configuration
===============================
Shared fixtures and pytest markers for the test suite.
"""

import os
import sys
import tempfile

import pytest
import pytest_asyncio

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Session logs go to a temp dir, not the working tree
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "jito_bundler_test_logs"))


# ============================================================================
# PYTEST MARKERS
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "network: marks tests that require network access"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture
def main_wallet():
    from jito_bundler.shared.execution.schemas import SigningIdentity
    return SigningIdentity.generate()


@pytest.fixture
def ledger():
    from tests.mocks.mock_rpc import MockLedger
    return MockLedger()


@pytest.fixture
def relay():
    from tests.mocks.mock_relay import MockRelay
    return MockRelay()


@pytest.fixture
def fast_config():
    """Bundle options with millisecond-scale polling."""
    from jito_bundler.shared.execution.schemas import BundleConfig
    return BundleConfig(timeout_ms=200, poll_interval_ms=1, wait_before_poll_ms=0)


@pytest_asyncio.fixture
async def engine(relay, ledger, main_wallet, fast_config):
    """Initialized BundleSubmissionEngine over the mock relay and ledger."""
    from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine

    engine = BundleSubmissionEngine(relay, ledger, main_wallet, default_config=fast_config)
    await engine.initialize()
    yield engine
    await engine.close()


@pytest.fixture
def fast_funds_config():
    from jito_bundler.modules.funds.config import FundsConfig
    return FundsConfig(POLL_TIMEOUT_MS=200, POLL_INTERVAL_MS=1, WAIT_BEFORE_POLL_MS=0)
