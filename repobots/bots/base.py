"""Helpers shared by the bot entry points."""

from typing import Any

from repobots.config import BotConfig
from repobots.logging import configure_logging


def normalize_payload(payload: Any) -> dict[str, Any]:
    """Treat anything but a JSON object as an empty payload."""
    return payload if isinstance(payload, dict) else {}


def is_dry_run(payload: dict[str, Any]) -> bool:
    return payload.get("dryRun") is True


def load_config() -> BotConfig:
    """Read the configuration from the environment and set up logging."""
    config = BotConfig.from_env()
    configure_logging(level=config.log_level)
    return config
