"""Input sanitizer — trust resolution + injection scan + envelope isolation.

Every inbound message from every channel passes through
:func:`sanitize_message` before it is forwarded to an agent. Channel
modules under ``channels/`` are thin wrappers that build the provenance and
canonical sender id, then delegate here.
"""

from __future__ import annotations

import logging

from engine.scanner import scan
from engine.trust import resolve_trust
from engine.wrapper import wrap
from models.schemas import (
    AuthEvidence,
    Provenance,
    SanitizedMessage,
    SecurityConfig,
    TrustTier,
)

# ---------------------------------------------------------------------------
# Version (reported in tool responses as sanitizer_version)
# ---------------------------------------------------------------------------
VERSION = "v0.2.0"

logger = logging.getLogger("engine.sanitizer")


def sanitize_message(
    text: str | None,
    sender_id: str | None,
    config: SecurityConfig,
    provenance: Provenance,
    auth: AuthEvidence | None = None,
    *,
    subject: str = "sender",
) -> SanitizedMessage:
    """Full pipeline for one message.

    Operator messages are returned verbatim and are never scanned. Everything
    else is scanned and wrapped; the raw text is not returned separately.
    """
    trust = resolve_trust(sender_id, config, auth, subject=subject)
    raw = text or ""

    if trust.tier == TrustTier.operator:
        return SanitizedMessage(text=raw, trust=trust, flags=[])

    flags = scan(raw)
    if flags:
        logger.debug(
            "%d pattern(s) matched for %s sender %r",
            len(flags), provenance.channel.value, sender_id,
        )
    return SanitizedMessage(
        text=wrap(raw, trust, flags, provenance),
        trust=trust,
        flags=flags,
    )
