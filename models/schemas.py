"""Pydantic v2 models for the content security pipeline and its MCP tools."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Channel(str, Enum):
    discord = "discord"
    slack = "slack"
    email = "email"
    whatsapp = "whatsapp"


class TrustTier(str, Enum):
    operator = "operator"
    trusted_agent = "trusted-agent"  # agent-to-agent handshake channels only
    external = "external"


# ---------------------------------------------------------------------------
# Trust
# ---------------------------------------------------------------------------

class TrustResult(BaseModel):
    """Outcome of one trust classification. *reason* is audit text only."""
    model_config = ConfigDict(frozen=True)

    tier: TrustTier
    reason: str


class SecurityConfig(BaseModel):
    """Immutable whitelist snapshot for one gateway instance."""
    model_config = ConfigDict(frozen=True)

    trusted_ids: tuple[str, ...] = ()
    requires_auth: bool = False

    @field_validator("trusted_ids", mode="before")
    @classmethod
    def _dedupe(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        seen: list[str] = []
        for item in value:
            item = str(item).strip()
            if item and item not in seen:
                seen.append(item)
        return tuple(seen)

    def is_trusted(self, sender_id: str) -> bool:
        return sender_id in self.trusted_ids


_SPF_VERDICTS = {"pass", "fail", "softfail", "neutral", "none"}
_DMARC_VERDICTS = {"pass", "fail", "none"}


class AuthEvidence(BaseModel):
    """Transport-level authentication results for one inbound message."""
    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> bool:
        return False

    def describe(self) -> str:
        return "no authentication results"


class EmailAuthResult(AuthEvidence):
    """SPF / DKIM / DMARC verdicts reported by the inbound email provider.

    Operator trust needs SPF ``pass`` and a valid DKIM signature. DMARC is
    recorded for auditing but does not take part in the decision.
    """

    spf: str = "none"
    dkim_valid: bool | None = None
    dmarc: str = "none"

    @field_validator("spf", mode="before")
    @classmethod
    def _coerce_spf(cls, value: Any) -> str:
        value = str(value or "none").strip().lower()
        return value if value in _SPF_VERDICTS else "none"

    @field_validator("dmarc", mode="before")
    @classmethod
    def _coerce_dmarc(cls, value: Any) -> str:
        value = str(value or "none").strip().lower()
        return value if value in _DMARC_VERDICTS else "none"

    @field_validator("dkim_valid", mode="before")
    @classmethod
    def _coerce_dkim(cls, value: Any) -> bool | None:
        # Only an explicit true/"true"/"pass" counts; anything unparseable is None.
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            verdict = value.strip().lower()
            if verdict in ("true", "pass"):
                return True
            if verdict in ("false", "fail"):
                return False
        return None

    @property
    def passed(self) -> bool:
        return self.spf == "pass" and self.dkim_valid is True

    def describe(self) -> str:
        dkim = "none" if self.dkim_valid is None else str(self.dkim_valid).lower()
        return f"SPF: {self.spf}, DKIM: {dkim}"

    @classmethod
    def from_webhook(cls, msg: Any) -> EmailAuthResult:
        """Read ``spf.result``, ``dkim.valid`` and ``dmarc.result`` from a webhook msg."""
        if not isinstance(msg, dict):
            return cls()
        spf = msg.get("spf")
        dkim = msg.get("dkim")
        dmarc = msg.get("dmarc")
        return cls(
            spf=spf.get("result") if isinstance(spf, dict) else None,
            dkim_valid=dkim.get("valid") if isinstance(dkim, dict) else None,
            dmarc=dmarc.get("result") if isinstance(dmarc, dict) else None,
        )


# ---------------------------------------------------------------------------
# Scanning / wrapping
# ---------------------------------------------------------------------------

class InjectionFlag(BaseModel):
    """A single catalog match found while scanning."""
    model_config = ConfigDict(frozen=True)

    category: str
    label: str
    matched_text: str


class Provenance(BaseModel):
    """Where a message came from; rendered as envelope attributes."""
    model_config = ConfigDict(frozen=True)

    channel: Channel
    sender: str = ""
    user_id: str | None = None


class SanitizedMessage(BaseModel):
    """The only artifact that leaves the pipeline."""
    text: str
    trust: TrustResult
    flags: list[InjectionFlag] = Field(default_factory=list)


class QuotedMessage(BaseModel):
    """The message a WhatsApp reply quotes."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    sender: str = ""
    body: str = ""


# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------

class InboundEmail(BaseModel):
    from_email: str = ""
    from_name: str | None = None
    subject: str = ""
    text: str | None = None
    html: str | None = None


class SanitizedEmail(BaseModel):
    trust: TrustResult
    flags: list[InjectionFlag] = Field(default_factory=list)
    subject: str = ""
    text_body: str | None = None
    html_body: str | None = None


# ---------------------------------------------------------------------------
# Tool I/O: mcp_sanitize_message
# ---------------------------------------------------------------------------

class SanitizeRequest(BaseModel):
    """Input for mcp_sanitize_message."""
    channel: Channel
    text: str = Field(default="", description="Raw inbound message text (email: text body)")
    sender_id: str = Field(default="", description="Channel-native sender identifier")
    display_name: str | None = Field(default=None, description="Sender display name")
    subject: str | None = Field(default=None, description="Email subject")
    html: str | None = Field(default=None, description="Email HTML body")
    auth: dict[str, Any] | None = Field(
        default=None,
        description="Email webhook auth block: {spf: {result}, dkim: {valid}, dmarc: {result}}",
    )
    bot_id: str | None = Field(default=None, description="Discord bot user id; its mention is stripped")
    quoted: QuotedMessage | None = Field(default=None, description="WhatsApp quoted reply")


class SanitizeResponse(BaseModel):
    """Output of mcp_sanitize_message."""
    channel: Channel
    trust: TrustTier
    trust_reason: str
    sanitized: str | None = None
    subject: str | None = None
    html_body: str | None = None
    flags: list[InjectionFlag] = Field(default_factory=list)
    sanitizer_version: str = ""


# ---------------------------------------------------------------------------
# Tool I/O: mcp_scan_text
# ---------------------------------------------------------------------------

class ScanRequest(BaseModel):
    text: str = ""


class ScanResponse(BaseModel):
    flags: list[InjectionFlag] = Field(default_factory=list)
    scanned_chars: int = 0
    truncated: bool = False
