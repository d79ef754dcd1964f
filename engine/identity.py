"""Sender identifier canonicalization, one scheme per channel.

Whitelist entries and inbound senders go through the same function so that
membership checks compare like with like.
"""

from __future__ import annotations

import re

from models.schemas import Channel

# "1234567890@s.whatsapp.net" or "1234567890:0@s.whatsapp.net"
_USER_JID_RE = re.compile(r"^(\d+)(?::\d+)?@s\.whatsapp\.net$", re.IGNORECASE)
_NON_DIGIT_RE = re.compile(r"[^0-9]")


def jid_to_phone(jid: str) -> str | None:
    """Extract an E.164 phone number from a WhatsApp user JID."""
    match = _USER_JID_RE.match(jid.strip())
    if not match:
        return None
    return f"+{match.group(1)}"


def normalize_phone(raw: str) -> str | None:
    """Strip everything but digits and prefix ``+``; 7–15 digits or None."""
    digits = _NON_DIGIT_RE.sub("", raw)
    if len(digits) < 7 or len(digits) > 15:
        return None
    return f"+{digits}"


def normalize_email(raw: str) -> str:
    return raw.strip().lower()


def normalize_identifier(channel: Channel, raw: str | None) -> str:
    """Return the canonical form of *raw* for *channel*, or ``""`` if unusable."""
    if not raw:
        return ""
    raw = str(raw)
    if channel == Channel.email:
        return normalize_email(raw)
    if channel == Channel.whatsapp:
        if "@" in raw:
            return jid_to_phone(raw) or ""
        return normalize_phone(raw) or ""
    return raw.strip()
