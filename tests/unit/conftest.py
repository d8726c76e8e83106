"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (relay, ledger RPC)
- File system (except tmp_path)

httpx.MockTransport is still allowed; only the real transports are blocked.
"""

import pytest


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable real network I/O for unit tests.
    Any test that accidentally tries to make a network call will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must be pure logic with no external dependencies. "
            "Use httpx.MockTransport or the fakes in tests/mocks."
        )

    monkeypatch.setattr("httpx.AsyncHTTPTransport.handle_async_request", block_network)
    monkeypatch.setattr("httpx.HTTPTransport.handle_request", block_network)


# ============================================================================
# SAMPLE RELAY RESPONSES
# ============================================================================


@pytest.fixture
def tip_accounts():
    """The eight mainnet tip accounts."""
    return [
        "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
        "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
        "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
        "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
        "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
        "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
        "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
        "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
    ]


@pytest.fixture
def failed_simulation():
    return {
        "summary": {
            "failed": {
                "error": {"TransactionFailure": [[1, 2, 3], "insufficient funds for fee"]},
                "tx_signature": "5xFailingSig",
            }
        },
        "transactionResults": [],
    }
