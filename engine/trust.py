"""Sender trust resolution.

Classifies one sender into a trust tier from the whitelist snapshot and,
where the channel provides it, transport authentication evidence. A
whitelist match alone is not enough when the evidence is present and fails,
or when the channel requires evidence and none arrived.
"""

from __future__ import annotations

import logging

from models.schemas import AuthEvidence, SecurityConfig, TrustResult, TrustTier

logger = logging.getLogger("engine.trust")


def resolve_trust(
    sender_id: str | None,
    config: SecurityConfig,
    auth: AuthEvidence | None = None,
    *,
    subject: str = "sender",
) -> TrustResult:
    """Return the trust tier for *sender_id*.

    Args:
        sender_id: Canonical channel identifier (already normalized).
        config: Whitelist snapshot for this gateway.
        auth: Authentication evidence, for channels that carry it.
        subject: Noun used in the audit reason, e.g. ``"Slack user"``.
    """
    if not sender_id:
        return TrustResult(tier=TrustTier.external, reason="no sender identifier")

    if not config.is_trusted(sender_id):
        return TrustResult(
            tier=TrustTier.external,
            reason=f"{subject} {sender_id} is not recognized",
        )

    if auth is None and config.requires_auth:
        auth = AuthEvidence()

    if auth is not None:
        if not auth.passed:
            logger.debug("Whitelisted %s %s failed authentication", subject, sender_id)
            return TrustResult(
                tier=TrustTier.external,
                reason=(
                    f"{subject} {sender_id} matches operator whitelist but failed "
                    f"authentication ({auth.describe()})"
                ),
            )
        return TrustResult(
            tier=TrustTier.operator,
            reason=f"{subject} {sender_id} is in operator whitelist with valid authentication",
        )

    return TrustResult(
        tier=TrustTier.operator,
        reason=f"{subject} {sender_id} is in operator whitelist",
    )
