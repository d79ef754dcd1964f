"""Email facade: sanitizes inbound webhook messages.

Sender addresses are not bound to the transport, so operator trust needs
both a whitelist match and passing SPF + DKIM. Subject, text and HTML
bodies are scanned together and each is wrapped with the same warnings.
"""

from __future__ import annotations

from engine.identity import normalize_identifier
from engine.scanner import scan
from engine.trust import resolve_trust
from engine.wrapper import wrap
from models.schemas import (
    Channel,
    EmailAuthResult,
    InboundEmail,
    Provenance,
    SanitizedEmail,
    SecurityConfig,
    TrustTier,
)


def sender_info(email: InboundEmail) -> str:
    if email.from_name:
        return f"{email.from_name} <{email.from_email}>"
    return email.from_email


def sanitize_email(
    email: InboundEmail,
    config: SecurityConfig,
    auth: EmailAuthResult | None = None,
) -> SanitizedEmail:
    # Missing auth results count as a failed check for whitelisted senders.
    if auth is None:
        auth = EmailAuthResult()
    address = normalize_identifier(Channel.email, email.from_email)
    trust = resolve_trust(address, config, auth, subject="sender")

    if trust.tier == TrustTier.operator:
        return SanitizedEmail(
            trust=trust,
            flags=[],
            subject=email.subject,
            text_body=email.text,
            html_body=email.html,
        )

    flags = scan("\n".join(part for part in (email.subject, email.text, email.html) if part))
    provenance = Provenance(channel=Channel.email, sender=sender_info(email))

    return SanitizedEmail(
        trust=trust,
        flags=flags,
        subject=wrap(email.subject, trust, flags, provenance),
        text_body=wrap(email.text, trust, flags, provenance) if email.text else None,
        html_body=wrap(email.html, trust, flags, provenance) if email.html else None,
    )
