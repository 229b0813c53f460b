"""
tests/unit/test_session_report.py - Execution and scan report tests.
"""

import json
from decimal import Decimal

from core.constants import ExecutionStatus, ZERO_ADDRESS
from core.exceptions import ErrorCode
from core.models import LegOutcome, LegResult, ScanCandidate, ScanResult, TradeIntent
from monitoring.session_report import (
    SCHEMA_VERSION,
    ExecutionReport,
    ScanReport,
    build_execution_report,
    build_scan_report,
    print_execution_report,
    print_scan_report,
)

S = ExecutionStatus


def _leg_result(i, status, message="", error_code=None, tx_hashes=()):
    leg = TradeIntent(
        id=f"leg-{i}",
        origin_chain_id=8453,
        origin_currency=ZERO_ADDRESS,
        destination_chain_id=42161,
        destination_currency=ZERO_ADDRESS,
        amount="1000",
    )
    outcome = LegOutcome(
        leg_id=leg.id,
        status=status,
        message=message,
        error_code=error_code,
        tx_hashes=list(tx_hashes),
    )
    return LegResult(leg=leg, outcome=outcome)


def _scan_result(net, token="USDC"):
    candidate = ScanCandidate(
        token=token,
        origin_chain_id=8453,
        origin_chain_name="Base",
        origin_currency="0xa",
        destination_chain_id=10,
        destination_chain_name="Optimism",
        destination_currency="0xb",
        amount="100000000",
        decimals=6,
    )
    return ScanResult(
        candidate=candidate,
        input_usd=Decimal("100"),
        output_usd=Decimal("100") + Decimal(net),
        fee_usd=Decimal("0.1"),
        spread_percent=Decimal(net),
        net_profit_usd=Decimal(net) - Decimal("0.1"),
        net_profit_percent=Decimal(net) - Decimal("0.1"),
        rate=Decimal("1"),
        eta_seconds=12,
    )


class TestExecutionReport:

    def test_all_complete(self):
        results = [_leg_result(1, S.COMPLETE, tx_hashes=["0xa"]), _leg_result(2, S.COMPLETE)]

        report = build_execution_report(results)

        assert report.total_legs == 2
        assert report.attempted_legs == 2
        assert report.completed_legs == 2
        assert report.status_counts == {"complete": 2}
        assert not report.stopped_early
        assert report.legs[0]["tx_hashes"] == ["0xa"]
        assert report.legs[0]["route"] == "8453->42161"

    def test_stopped_early(self):
        results = [
            _leg_result(1, S.COMPLETE),
            _leg_result(2, S.ERROR, "Transaction cancelled in wallet", ErrorCode.USER_CANCELLED),
        ]

        report = build_execution_report(results, total_legs=3)
        data = report.to_dict()

        assert data["schema_version"] == SCHEMA_VERSION
        assert data["kind"] == "execution"
        assert data["stopped_early"] is True
        assert data["attempted_legs"] == 2
        assert data["completed_legs"] == 1
        assert data["legs"][1]["error_code"] == "USER_CANCELLED"

    def test_last_leg_failure_counts_as_stopped(self):
        report = build_execution_report([_leg_result(1, S.TIMEOUT)])
        assert report.stopped_early

    def test_empty(self):
        report = build_execution_report([])
        assert report.attempted_legs == 0
        assert not report.stopped_early

    def test_save(self, tmp_path):
        report = build_execution_report([_leg_result(1, S.COMPLETE)])
        path = tmp_path / "nested" / "execution.json"

        report.save(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["kind"] == "execution"
        assert data["timestamp"] == report.timestamp

    def test_print(self, capsys):
        report = build_execution_report(
            [_leg_result(1, S.FAILED, "Settlement refunded", tx_hashes=["0xdead"])],
            total_legs=2,
        )

        print_execution_report(report)

        out = capsys.readouterr().out
        assert "EXECUTION REPORT" in out
        assert "0/2 complete" in out
        assert "Stopped early: yes" in out
        assert "[failed] Settlement refunded" in out
        assert "tx: 0xdead" in out

    def test_timestamp_kept_when_given(self):
        assert ExecutionReport(timestamp="2026-01-01T00:00:00Z").timestamp == "2026-01-01T00:00:00Z"


class TestScanReport:

    def test_stats_and_top_n(self):
        results = [_scan_result("2"), _scan_result("0.05"), _scan_result("-1")]

        report = build_scan_report(
            results, top_n=2, scan_stats={"candidates": 5, "quote_errors": 1, "unpriced": 1}
        )

        assert report.stats == {
            "candidates": 5,
            "results": 3,
            "profitable": 1,
            "quote_errors": 1,
            "unpriced": 1,
        }
        assert [o["rank"] for o in report.top_opportunities] == [1, 2]

    def test_row_values_are_strings(self):
        report = build_scan_report([_scan_result("-0.5")])
        row = report.top_opportunities[0]

        assert row["route"] == "Base->Optimism"
        assert row["amount_display"] == "100.000"
        assert row["net_profit_usd"] == "-0.600000"
        assert row["net_profit_percent"] == "-0.6000"
        assert row["spread_percent"] == "-0.5000"
        for key in ("input_usd", "output_usd", "fee_usd", "net_profit_usd"):
            assert isinstance(row[key], str)

    def test_json_has_no_floats(self):
        data = json.loads(build_scan_report([_scan_result("1")]).to_json())

        def walk(value):
            if isinstance(value, dict):
                for v in value.values():
                    walk(v)
            elif isinstance(value, list):
                for v in value:
                    walk(v)
            else:
                assert not isinstance(value, float)

        walk(data)

    def test_defaults_without_stats(self):
        report = build_scan_report([_scan_result("1")])
        assert report.stats["candidates"] == 1
        assert report.stats["quote_errors"] == 0

    def test_print(self, capsys):
        print_scan_report(build_scan_report([_scan_result("-0.5")]))

        out = capsys.readouterr().out
        assert "SCAN REPORT" in out
        assert "1. 100.000 USDC Base->Optimism: net $-0.60" in out
        assert "fee $0.10" in out

    def test_print_empty(self, capsys):
        print_scan_report(ScanReport())
        assert "(none)" in capsys.readouterr().out
