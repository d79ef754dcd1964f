"""MCP Tool: mcp_sanitize_message — run one inbound message through the pipeline.

Pipeline: channel facade → trust resolver → scanner (non-operator only)
         → wrapper → security log
"""

from __future__ import annotations

import logging

from channels.discord import sanitize_discord_message, strip_bot_mention
from channels.email import sanitize_email
from channels.slack import sanitize_slack_message
from channels.whatsapp import sanitize_whatsapp_message
from config import SecurityConfigStore
from engine.sanitizer import VERSION
from models.schemas import (
    Channel,
    EmailAuthResult,
    InboundEmail,
    InjectionFlag,
    SanitizeRequest,
    SanitizeResponse,
    TrustTier,
)

logger = logging.getLogger("tools.sanitize")


def _report(
    channel: Channel,
    sender: str,
    trust: TrustTier,
    flags: list[InjectionFlag],
) -> None:
    if flags:
        logger.warning(
            "[SECURITY] %d injection pattern(s) flagged from %s via %s (trust: %s)",
            len(flags), sender, channel.value, trust.value,
        )
        for flag in flags:
            logger.warning('    - %s: "%s"', flag.category, flag.matched_text)
    elif trust != TrustTier.operator:
        logger.info("[SECURITY] Content wrapped from %s via %s (trust: %s)",
                    sender, channel.value, trust.value)


def _execute_email(request: SanitizeRequest, store: SecurityConfigStore) -> SanitizeResponse:
    email = InboundEmail(
        from_email=request.sender_id,
        from_name=request.display_name,
        subject=request.subject or "",
        text=request.text or None,
        html=request.html,
    )
    auth = EmailAuthResult.from_webhook(request.auth or {})
    result = sanitize_email(email, store.get(Channel.email), auth)
    _report(Channel.email, request.sender_id, result.trust.tier, result.flags)
    return SanitizeResponse(
        channel=Channel.email,
        trust=result.trust.tier,
        trust_reason=result.trust.reason,
        sanitized=result.text_body,
        subject=result.subject,
        html_body=result.html_body,
        flags=result.flags,
        sanitizer_version=VERSION,
    )


def execute(request: SanitizeRequest, store: SecurityConfigStore) -> SanitizeResponse:
    """Sanitize one message against the store's current snapshot for its channel."""
    if request.channel == Channel.email:
        return _execute_email(request, store)

    config = store.get(request.channel)
    display_name = request.display_name or request.sender_id

    if request.channel == Channel.discord:
        text = strip_bot_mention(request.text, request.bot_id) if request.bot_id else request.text
        result = sanitize_discord_message(text, request.sender_id, display_name, config)
    elif request.channel == Channel.slack:
        result = sanitize_slack_message(request.text, request.sender_id, display_name, config)
    else:
        result = sanitize_whatsapp_message(
            request.text, request.sender_id, config,
            sender_name=request.display_name, quoted=request.quoted,
        )

    _report(request.channel, display_name, result.trust.tier, result.flags)
    return SanitizeResponse(
        channel=request.channel,
        trust=result.trust.tier,
        trust_reason=result.trust.reason,
        sanitized=result.text,
        flags=result.flags,
        sanitizer_version=VERSION,
    )
