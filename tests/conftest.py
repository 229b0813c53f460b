# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for XLEG tests.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# SHARED FIXTURES
# =============================================================================

import pytest  # noqa: E402

USER = "0x1111111111111111111111111111111111111111"


def tx_step(request_id="0xreq1", chain_id=8453, value="100000000000000000", step_id="deposit", items=1):
    """A Relay transaction step with `items` items."""
    return {
        "id": step_id,
        "kind": "transaction",
        "requestId": request_id,
        "items": [
            {
                "status": "incomplete",
                "data": {
                    "to": "0x2222222222222222222222222222222222222222",
                    "data": "0xabcdef",
                    "value": value,
                    "chainId": chain_id,
                },
            }
            for _ in range(items)
        ],
    }


def sig_step(request_id="0xreq1", message="authorize", step_id="authorize"):
    """A Relay signature step."""
    return {
        "id": step_id,
        "kind": "signature",
        "requestId": request_id,
        "items": [{"status": "incomplete", "data": {"sign": {"message": message}}}],
    }


def build_quote_payload(
    steps=None,
    input_usd="100",
    output_usd="99.5",
    fee_usd="0.2",
    rate="0.995",
    eta=30,
):
    """A Relay /quote/v2 response body."""
    return {
        "steps": [tx_step()] if steps is None else steps,
        "fees": {"relayer": {"amountUsd": fee_usd}},
        "details": {
            "currencyIn": {"amountUsd": input_usd},
            "currencyOut": {"amountUsd": output_usd},
            "rate": rate,
            "timeEstimate": eta,
        },
    }


class FakeSigner:
    """In-memory wallet. Fails with `fail_with` on call number `fail_on_call` (1-based, None = every call)."""

    def __init__(self, address=USER, chain_id=None, fail_with=None, fail_on_call=None):
        self.address = address
        self.chain_id = chain_id
        self.fail_with = fail_with
        self.fail_on_call = fail_on_call
        self.calls = 0
        self.sent = []
        self.signed = []
        self.switches = []

    def _maybe_fail(self):
        self.calls += 1
        if self.fail_with is not None and self.fail_on_call in (None, self.calls):
            raise self.fail_with

    async def send_transaction(self, tx):
        self._maybe_fail()
        self.sent.append(tx)
        return f"0xhash{len(self.sent)}"

    async def sign_message(self, message):
        self._maybe_fail()
        self.signed.append(message)
        return "0xsignature"

    async def switch_network(self, chain_id):
        self.switches.append(chain_id)
        self.chain_id = chain_id


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def quote_payload():
    return build_quote_payload


@pytest.fixture
def make_tx_step():
    return tx_step


@pytest.fixture
def make_sig_step():
    return sig_step


@pytest.fixture
def make_signer():
    return FakeSigner
