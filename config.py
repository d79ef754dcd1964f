"""Global configuration — loads operator whitelists from .env and an optional YAML file."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

from engine.identity import normalize_identifier
from models.schemas import Channel, SecurityConfig

# ---------------------------------------------------------------------------
# Bootstrap: load .env from project root
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent
load_dotenv(_PROJECT_ROOT / ".env")

logger = logging.getLogger("config")

# Env var holding the comma-separated whitelist for each channel
OPERATOR_ENV = {
    Channel.discord: "OPERATOR_DISCORD_IDS",
    Channel.slack: "OPERATOR_SLACK_IDS",
    Channel.email: "OPERATOR_EMAILS",
    Channel.whatsapp: "OPERATOR_PHONES",
}

# Channels whose transport can prove the sender; whitelist alone is not enough
_AUTH_REQUIRED = {Channel.email}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _mask_id(raw: str) -> str:
    """Mask an identifier for safe logging: alice@example.com → al****.com"""
    if len(raw) <= 6:
        return "****"
    return f"{raw[:2]}****{raw[-4:]}"


def _optional_env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


def _list_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _load_yaml_operators(path: Path) -> dict[str, list[str]]:
    """Read the ``operators:`` mapping from a YAML security file.

    Raises ValueError on unreadable or malformed files so the gateway refuses
    to start rather than running with a partial whitelist.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ValueError(f"Cannot load security config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Security config {path} must be a mapping")
    operators = data.get("operators") or {}
    if not isinstance(operators, dict):
        raise ValueError(f"'operators' in {path} must map channel → list of ids")

    result: dict[str, list[str]] = {}
    for channel, ids in operators.items():
        try:
            Channel(channel)
        except ValueError as exc:
            raise ValueError(f"Unknown channel {channel!r} in {path}") from exc
        if ids is None:
            ids = []
        if not isinstance(ids, list):
            raise ValueError(f"operators.{channel} in {path} must be a list")
        result[str(channel)] = [str(i) for i in ids]
    return result


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded once from environment."""

    operator_ids: dict[Channel, tuple[str, ...]]
    security_config_path: Path | None = None
    log_level: str = "INFO"

    # --- safe logging ---------------------------------------------------
    def log_summary(self) -> str:
        lines = ["Settings("]
        for channel in Channel:
            ids = self.operator_ids.get(channel, ())
            masked = ", ".join(_mask_id(i) for i in ids) or "<none>"
            lines.append(f"  {channel.value}_operators=[{masked}],")
        lines.append(f"  security_config_path={self.security_config_path},")
        lines.append(f"  log_level={self.log_level},")
        lines.append(")")
        return "\n".join(lines)


def load_settings() -> Settings:
    """Build a *Settings* instance from the current environment."""
    operator_ids: dict[Channel, list[str]] = {
        channel: list(_list_env(env)) for channel, env in OPERATOR_ENV.items()
    }

    path_raw = _optional_env("SECURITY_CONFIG_PATH")
    path = Path(path_raw).expanduser() if path_raw else None
    if path is not None:
        for channel, ids in _load_yaml_operators(path).items():
            operator_ids[Channel(channel)].extend(ids)

    return Settings(
        operator_ids={c: tuple(ids) for c, ids in operator_ids.items()},
        security_config_path=path,
        log_level=_optional_env("LOG_LEVEL", "INFO").upper(),
    )


def build_security_config(channel: Channel, ids: list[str] | tuple[str, ...]) -> SecurityConfig:
    """Normalize *ids* for *channel* and freeze them into a snapshot."""
    normalized = []
    for raw in ids:
        canonical = normalize_identifier(channel, raw)
        if canonical:
            normalized.append(canonical)
        else:
            logger.warning("Ignoring unusable %s operator id %r", channel.value, raw)
    return SecurityConfig(
        trusted_ids=normalized,
        requires_auth=channel in _AUTH_REQUIRED,
    )


def load_security_config(channel: Channel, settings: Settings | None = None) -> SecurityConfig:
    settings = settings or load_settings()
    return build_security_config(channel, settings.operator_ids.get(channel, ()))


# ---------------------------------------------------------------------------
# Runtime snapshot store
# ---------------------------------------------------------------------------

class SecurityConfigStore:
    """Current whitelist snapshot per channel.

    Snapshots are never mutated. :meth:`replace` builds a new one and swaps
    the reference, so a message already holding the old snapshot finishes
    with it. Writers are serialized by a lock; readers never block.
    """

    def __init__(self, settings: Settings) -> None:
        self._configs: dict[Channel, SecurityConfig] = {
            channel: load_security_config(channel, settings) for channel in Channel
        }
        self._lock = threading.Lock()

    def get(self, channel: Channel) -> SecurityConfig:
        return self._configs[channel]

    def replace(self, channel: Channel, ids: list[str]) -> SecurityConfig:
        snapshot = build_security_config(channel, ids)
        with self._lock:
            configs = dict(self._configs)
            configs[channel] = snapshot
            self._configs = configs
        logger.info("Replaced %s whitelist (%d id(s))", channel.value, len(snapshot.trusted_ids))
        return snapshot
