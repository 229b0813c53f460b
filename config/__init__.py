# PATH: config/__init__.py
"""
Configuration loading for XLEG.

Settings come from config/xleg.yaml (or an explicit path), then
environment variables override the Relay section:

  RELAY_API_BASE            relay.base_url
  RELAY_APP_FEE_RECIPIENT   relay.app_fee_recipient
  RELAY_APP_FEE_BPS         relay.app_fee_bps

A .env file in the working directory is loaded first.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from core.constants import (
    DEFAULT_APP_FEE_BPS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RELAY_API_BASE,
    DEFAULT_SCAN_BATCH_DELAY_MS,
    DEFAULT_SCAN_BATCH_SIZE,
    SCAN_AMOUNT_ETH,
    SCAN_AMOUNT_STABLE,
    ZERO_ADDRESS,
)
from core.exceptions import ValidationError

CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = CONFIG_DIR / "xleg.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass
class RelaySettings:
    """Relay API connection and app fee."""
    base_url: str = DEFAULT_RELAY_API_BASE
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    app_fee_recipient: str = ZERO_ADDRESS
    app_fee_bps: str = DEFAULT_APP_FEE_BPS

    @property
    def app_fees(self) -> Optional[list[dict[str, str]]]:
        """Relay appFees field, or None when no recipient is configured."""
        if not self.app_fee_recipient or self.app_fee_recipient.lower() == ZERO_ADDRESS:
            return None
        return [{"recipient": self.app_fee_recipient, "fee": str(self.app_fee_bps)}]


@dataclass
class ExecutionSettings:
    """Settlement polling for executed legs."""
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS


@dataclass
class ScanSettings:
    """Opportunity scanner batching and notional amounts."""
    batch_size: int = DEFAULT_SCAN_BATCH_SIZE
    batch_delay_ms: int = DEFAULT_SCAN_BATCH_DELAY_MS
    eth_amount_wei: str = SCAN_AMOUNT_ETH
    stable_amount: str = SCAN_AMOUNT_STABLE

    @property
    def batch_delay_seconds(self) -> float:
        return self.batch_delay_ms / 1000


@dataclass
class XlegConfig:
    """Full XLEG configuration."""
    relay: RelaySettings = field(default_factory=RelaySettings)
    execution: ExecutionSettings = field(default_factory=ExecutionSettings)
    scan: ScanSettings = field(default_factory=ScanSettings)


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValidationError(f"Config section '{key}' must be a mapping")
    return value


def _validate(config: XlegConfig) -> None:
    if config.execution.max_poll_attempts < 1:
        raise ValidationError("execution.max_poll_attempts must be >= 1")
    if config.execution.poll_interval_seconds < 0:
        raise ValidationError("execution.poll_interval_seconds must be >= 0")
    if config.scan.batch_size < 1:
        raise ValidationError("scan.batch_size must be >= 1")
    if config.scan.batch_delay_ms < 0:
        raise ValidationError("scan.batch_delay_ms must be >= 0")
    for name in ("eth_amount_wei", "stable_amount"):
        value = getattr(config.scan, name)
        if not value.isdigit() or int(value) <= 0:
            raise ValidationError(f"scan.{name} must be a positive integer string")


def load_config(config_path: Path | None = None) -> XlegConfig:
    """
    Load XLEG configuration.

    Args:
        config_path: YAML file (default: config/xleg.yaml). A missing
            file yields defaults.

    Returns:
        XlegConfig with environment overrides applied
    """
    load_dotenv()

    path = config_path or DEFAULT_CONFIG_PATH
    data = load_yaml(path) if path.exists() else {}

    relay_data = _section(data, "relay")
    execution_data = _section(data, "execution")
    scan_data = _section(data, "scan")

    relay = RelaySettings(
        base_url=os.getenv("RELAY_API_BASE") or relay_data.get("base_url", DEFAULT_RELAY_API_BASE),
        timeout_seconds=float(relay_data.get("timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS)),
        app_fee_recipient=os.getenv("RELAY_APP_FEE_RECIPIENT") or relay_data.get("app_fee_recipient", ZERO_ADDRESS),
        app_fee_bps=str(os.getenv("RELAY_APP_FEE_BPS") or relay_data.get("app_fee_bps", DEFAULT_APP_FEE_BPS)),
    )
    execution = ExecutionSettings(
        poll_interval_seconds=float(execution_data.get("poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS)),
        max_poll_attempts=int(execution_data.get("max_poll_attempts", DEFAULT_MAX_POLL_ATTEMPTS)),
    )
    scan = ScanSettings(
        batch_size=int(scan_data.get("batch_size", DEFAULT_SCAN_BATCH_SIZE)),
        batch_delay_ms=int(scan_data.get("batch_delay_ms", DEFAULT_SCAN_BATCH_DELAY_MS)),
        eth_amount_wei=str(scan_data.get("eth_amount_wei", SCAN_AMOUNT_ETH)),
        stable_amount=str(scan_data.get("stable_amount", SCAN_AMOUNT_STABLE)),
    )

    config = XlegConfig(relay=relay, execution=execution, scan=scan)
    _validate(config)
    return config
