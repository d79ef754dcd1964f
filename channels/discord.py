"""Discord facade: sanitizes messageCreate text before agent routing."""

from __future__ import annotations

import re

from engine.identity import normalize_identifier
from engine.sanitizer import sanitize_message
from models.schemas import Channel, Provenance, SanitizedMessage, SecurityConfig


def strip_bot_mention(text: str, bot_id: str) -> str:
    """Remove ``<@BOT_ID>`` / ``<@!BOT_ID>`` mentions of the bot."""
    return re.sub(rf"<@!?{re.escape(bot_id)}>", "", text).strip()


def sanitize_discord_message(
    text: str,
    discord_user_id: str,
    display_name: str,
    config: SecurityConfig,
) -> SanitizedMessage:
    user_id = normalize_identifier(Channel.discord, discord_user_id)
    provenance = Provenance(
        channel=Channel.discord,
        sender=display_name or "",
        user_id=user_id,
    )
    return sanitize_message(text, user_id, config, provenance, subject="Discord user")
