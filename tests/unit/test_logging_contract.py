# PATH: tests/unit/test_logging_contract.py
"""
Tests for logging contract enforcement.

No kwargs to logger; only extra={"context": {...}} allowed.
"""

import ast
import json
import logging
import os
import unittest
from pathlib import Path
from typing import Any, Dict, List

from core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    clear_global_context,
    get_logger,
    log_leg_event,
    set_global_context,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent
SOURCE_PACKAGES = ("core", "config", "relay", "execution", "strategy", "monitoring")


class TestLoggingContractEnforcement(unittest.TestCase):
    """AST-based tests for logging contract."""

    ALLOWED_KWARGS = {"exc_info", "extra", "stack_info", "stacklevel"}

    def _find_logger_violations(self, source_code: str) -> List[Dict[str, Any]]:
        """Find logger calls with invalid kwargs using AST."""
        violations = []
        tree = ast.parse(source_code)

        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
                continue

            method_name = node.func.attr
            if method_name not in ("debug", "info", "warning", "error", "critical", "exception"):
                continue

            obj = node.func.value
            if isinstance(obj, ast.Name):
                is_logger = "log" in obj.id.lower()
            elif isinstance(obj, ast.Attribute):
                is_logger = "log" in obj.attr.lower()
            else:
                is_logger = False
            if not is_logger:
                continue

            for kw in node.keywords:
                if kw.arg and kw.arg not in self.ALLOWED_KWARGS:
                    violations.append({
                        "line": node.lineno,
                        "method": method_name,
                        "invalid_kwarg": kw.arg,
                    })

        return violations

    def _source_files(self) -> List[Path]:
        files = []
        for package in SOURCE_PACKAGES:
            for root, dirs, names in os.walk(PROJECT_ROOT / package):
                dirs[:] = [d for d in dirs if d != "__pycache__"]
                files.extend(Path(root) / n for n in names if n.endswith(".py"))
        return files

    def test_source_tree_has_no_invalid_kwargs(self):
        files = self._source_files()
        self.assertTrue(files)

        msg = ""
        for path in files:
            for v in self._find_logger_violations(path.read_text(encoding="utf-8")):
                msg += f"  {path.relative_to(PROJECT_ROOT)}:{v['line']}: logger.{v['method']}(..., {v['invalid_kwarg']}=...)\n"
        if msg:
            self.fail(f"Logging violations:\n{msg}")

    def test_detector_flags_bad_call(self):
        violations = self._find_logger_violations('logger.info("x", leg_id="leg-1")')
        self.assertEqual(violations[0]["invalid_kwarg"], "leg_id")

    def test_detector_accepts_extra_context(self):
        source = 'logger.info("x", extra={"context": {"leg_id": "leg-1"}}, exc_info=True)'
        self.assertEqual(self._find_logger_violations(source), [])


class _CapturingHandler(logging.Handler):
    def __init__(self, records_list):
        super().__init__()
        self.records = records_list

    def emit(self, record):
        self.records.append(record)


class TestLoggingContextCapture(unittest.TestCase):
    """Tests that context is properly captured in log records."""

    def setUp(self):
        self.captured_records = []
        self.base_logger = logging.getLogger(f"test_capture_{id(self)}")
        self.base_logger.setLevel(logging.DEBUG)
        self.base_logger.handlers = []
        self.base_logger.propagate = False
        self.base_logger.addHandler(_CapturingHandler(self.captured_records))

    def tearDown(self):
        clear_global_context()

    def test_adapter_merges_default_context(self):
        logger = get_logger(self.base_logger.name, leg_id="leg-1")

        logger.info("Leg status", extra={"context": {"status": "executing"}})

        record = self.captured_records[0]
        self.assertEqual(record.context, {"leg_id": "leg-1", "status": "executing"})

    def test_call_context_overrides_default(self):
        logger = get_logger(self.base_logger.name, leg_id="leg-1")

        logger.info("Leg status", extra={"context": {"leg_id": "leg-2"}})

        self.assertEqual(self.captured_records[0].context["leg_id"], "leg-2")

    def test_log_leg_event(self):
        logger = get_logger(self.base_logger.name)

        log_leg_event(logger, "leg-1", "executing", "Transaction submitted", tx_hash="0xabc")

        record = self.captured_records[0]
        self.assertEqual(record.getMessage(), "Leg leg-1 | executing | Transaction submitted")
        self.assertEqual(record.context["tx_hash"], "0xabc")
        self.assertIsNone(record.context["request_id"])

    def test_exc_info_with_context(self):
        logger = get_logger(self.base_logger.name)
        try:
            raise ValueError("Test error")
        except ValueError:
            logger.error("Caught error", exc_info=True, extra={"context": {"operation": "test"}})

        record = self.captured_records[0]
        self.assertIsNotNone(record.exc_info)
        self.assertEqual(record.context["operation"], "test")


class TestFormatters(unittest.TestCase):

    def setUp(self):
        clear_global_context()

    def tearDown(self):
        clear_global_context()

    def _record(self, context=None):
        record = logging.LogRecord("xleg.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        if context is not None:
            record.context = context
        return record

    def test_json_formatter(self):
        set_global_context(service="xleg-scan")

        entry = json.loads(JSONFormatter().format(self._record({"leg_id": "leg-1"})))

        self.assertEqual(entry["level"], "INFO")
        self.assertEqual(entry["logger"], "xleg.test")
        self.assertEqual(entry["message"], "hello world")
        self.assertEqual(entry["context"], {"service": "xleg-scan", "leg_id": "leg-1"})

    def test_json_formatter_without_context(self):
        entry = json.loads(JSONFormatter().format(self._record()))
        self.assertNotIn("context", entry)

    def test_console_formatter_truncates_context(self):
        line = ConsoleFormatter().format(self._record({f"k{i}": i for i in range(6)}))

        self.assertIn("| INFO     | xleg.test | hello world | k0=0, k1=1, k2=2, k3=3", line)
        self.assertTrue(line.endswith("(+2 more)"))


if __name__ == "__main__":
    unittest.main()
