# PATH: tests/unit/test_error_contract.py
"""
Error and money contracts.

A) Every XlegError carries an ErrorCode and serializes to a flat dict
B) Leg and scan dicts never carry float money values
C) Every ErrorCode referenced in the source tree exists
"""

import ast
import os
import unittest
from decimal import Decimal
from pathlib import Path
from typing import Any

from core.constants import ExecutionStatus, ZERO_ADDRESS
from core.exceptions import (
    ErrorCode,
    ExecutionError,
    QuoteError,
    RelayError,
    SignerError,
    StatusError,
    UserRejectedError,
    ValidationError,
    XlegError,
)
from core.models import LegOutcome, Quote, ScanCandidate, ScanResult

PROJECT_ROOT = Path(__file__).parent.parent.parent


def _floats(value: Any, path: str = "") -> list[str]:
    """Paths of float leaves in a nested dict/list."""
    found = []
    if isinstance(value, dict):
        for k, v in value.items():
            found.extend(_floats(v, f"{path}.{k}"))
    elif isinstance(value, list):
        for i, v in enumerate(value):
            found.extend(_floats(v, f"{path}[{i}]"))
    elif isinstance(value, float):
        found.append(path)
    return found


class TestErrorCodes(unittest.TestCase):

    def test_default_codes(self):
        self.assertEqual(QuoteError("x").code, ErrorCode.QUOTE_UNAVAILABLE)
        self.assertEqual(StatusError("x").code, ErrorCode.STATUS_POLL_TRANSIENT)
        self.assertEqual(RelayError("x").code, ErrorCode.INFRA_HTTP_ERROR)
        self.assertEqual(SignerError("x").code, ErrorCode.SIGNER_FAILURE)
        self.assertEqual(UserRejectedError("x").code, ErrorCode.USER_CANCELLED)
        self.assertEqual(ValidationError("x").code, ErrorCode.VALIDATION_ERROR)
        self.assertEqual(ExecutionError("x").code, ErrorCode.UNKNOWN)

    def test_explicit_code_wins(self):
        err = ExecutionError("busy", code=ErrorCode.SEQUENCER_BUSY)
        self.assertEqual(err.code, ErrorCode.SEQUENCER_BUSY)

    def test_user_rejection_is_signer_error(self):
        self.assertIsInstance(UserRejectedError("x"), SignerError)
        self.assertIsInstance(SignerError("x"), XlegError)

    def test_str_and_dict(self):
        err = QuoteError("No routes found", details={"intent_id": "leg-1"})

        self.assertEqual(str(err), "[QUOTE_UNAVAILABLE] No routes found")
        self.assertEqual(err.to_dict(), {
            "code": "QUOTE_UNAVAILABLE",
            "message": "No routes found",
            "details": {"intent_id": "leg-1"},
        })

    def test_codes_are_strings(self):
        for code in ErrorCode:
            self.assertIsInstance(code.value, str)
            self.assertEqual(code.value, code.name)


class TestNoFloatMoney(unittest.TestCase):

    def test_scan_result_dict(self):
        candidate = ScanCandidate(
            token="ETH",
            origin_chain_id=1,
            origin_chain_name="Ethereum",
            origin_currency=ZERO_ADDRESS,
            destination_chain_id=8453,
            destination_chain_name="Base",
            destination_currency=ZERO_ADDRESS,
            amount="100000000000000000",
            decimals=18,
        )
        result = ScanResult(
            candidate=candidate,
            input_usd=Decimal("300.12"),
            output_usd=Decimal("299.9"),
            fee_usd=Decimal("0.05"),
            spread_percent=Decimal("-0.07"),
            net_profit_usd=Decimal("-0.27"),
            net_profit_percent=Decimal("-0.09"),
            rate=Decimal("0.999"),
            eta_seconds=8,
        )
        self.assertEqual(_floats(result.to_dict()), [])

    def test_leg_outcome_dict(self):
        quote = Quote.from_api({
            "steps": [],
            "fees": {"relayer": {"amountUsd": 0.2}},
            "details": {
                "currencyIn": {"amountUsd": 100.5},
                "currencyOut": {"amountUsd": 99.25},
                "rate": 0.99,
                "timeEstimate": 12,
            },
        })
        outcome = LegOutcome(leg_id="leg-1", status=ExecutionStatus.COMPLETE, quote=quote)

        data = outcome.to_dict()

        self.assertEqual(_floats(data), [])
        self.assertEqual(data["quote"]["valuation"]["output_usd"], "99.25")


class TestErrorCodeReferences(unittest.TestCase):
    """ErrorCode.X attributes used in the source tree must exist."""

    def test_referenced_codes_exist(self):
        valid = {code.name for code in ErrorCode}
        missing = []

        for package in ("core", "config", "relay", "execution", "strategy", "monitoring"):
            for root, dirs, files in os.walk(PROJECT_ROOT / package):
                dirs[:] = [d for d in dirs if d != "__pycache__"]
                for name in files:
                    if not name.endswith(".py"):
                        continue
                    path = Path(root) / name
                    tree = ast.parse(path.read_text(encoding="utf-8"))
                    for node in ast.walk(tree):
                        if (
                            isinstance(node, ast.Attribute)
                            and isinstance(node.value, ast.Name)
                            and node.value.id == "ErrorCode"
                            and node.attr not in valid
                        ):
                            missing.append(f"{path.relative_to(PROJECT_ROOT)}:{node.lineno} {node.attr}")

        self.assertEqual(missing, [])


if __name__ == "__main__":
    unittest.main()
