"""Slack facade: sanitizes Socket Mode message events."""

from __future__ import annotations

from engine.identity import normalize_identifier
from engine.sanitizer import sanitize_message
from models.schemas import Channel, Provenance, SanitizedMessage, SecurityConfig


def sanitize_slack_message(
    text: str,
    slack_user_id: str,
    display_name: str,
    config: SecurityConfig,
) -> SanitizedMessage:
    user_id = normalize_identifier(Channel.slack, slack_user_id)
    provenance = Provenance(
        channel=Channel.slack,
        sender=display_name or "",
        user_id=user_id,
    )
    return sanitize_message(text, user_id, config, provenance, subject="Slack user")
