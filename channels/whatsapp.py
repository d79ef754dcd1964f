"""WhatsApp facade: sanitizes inbound linked-device messages.

Senders arrive as JIDs or phone numbers and are canonicalized to E.164
before the whitelist lookup. A quoted reply is part of what the agent will
read, so it is folded into the text before scanning.
"""

from __future__ import annotations

from engine.identity import normalize_identifier
from engine.sanitizer import sanitize_message
from models.schemas import (
    Channel,
    Provenance,
    QuotedMessage,
    SanitizedMessage,
    SecurityConfig,
)


def format_body(text: str, quoted: QuotedMessage | None = None) -> str:
    body = text or ""
    if quoted:
        body += (
            f"\n\n[Replying to {quoted.sender} id:{quoted.id}]\n"
            f"{quoted.body}\n[/Replying]"
        )
    return body


def sanitize_whatsapp_message(
    text: str,
    sender: str,
    config: SecurityConfig,
    *,
    sender_name: str | None = None,
    quoted: QuotedMessage | None = None,
) -> SanitizedMessage:
    phone = normalize_identifier(Channel.whatsapp, sender)
    provenance = Provenance(
        channel=Channel.whatsapp,
        sender=sender_name or phone,
        user_id=phone,
    )
    return sanitize_message(
        format_body(text, quoted), phone, config, provenance, subject="WhatsApp sender",
    )
