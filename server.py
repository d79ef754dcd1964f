"""Gateway content security — MCP server.

Registers two tools:
  - mcp_sanitize_message: trust + scan + isolation envelope for one inbound message
  - mcp_scan_text: injection signature scan only
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

# Ensure project root is on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from mcp.server.fastmcp import FastMCP

from config import SecurityConfigStore, load_settings
from models.schemas import Channel, SanitizeRequest, ScanRequest
from tools.sanitize import execute as sanitize_execute
from tools.scan import execute as scan_execute

# ---------------------------------------------------------------------------
# Logging setup (operator ids masked via config)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("server")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "gateway-content-security",
    json_response=True,
)

_store: SecurityConfigStore | None = None


def _get_store() -> SecurityConfigStore:
    global _store
    if _store is None:
        _store = SecurityConfigStore(load_settings())
    return _store


@mcp.tool()
def mcp_sanitize_message(
    channel: str,
    text: str,
    sender_id: str,
    display_name: str | None = None,
    subject: str | None = None,
    html: str | None = None,
    auth: dict[str, Any] | None = None,
    bot_id: str | None = None,
    quoted: dict[str, Any] | None = None,
) -> dict:
    """Sanitize one inbound message before it is forwarded to an agent.

    Args:
        channel: One of: discord, slack, email, whatsapp.
        text: Raw message text (email: plain-text body).
        sender_id: Discord/Slack user id, email address, or phone/JID.
        display_name: Sender display name shown in the envelope.
        subject: Email subject (email only).
        html: Email HTML body (email only).
        auth: Email auth block, e.g. {"spf": {"result": "pass"}, "dkim": {"valid": true}}.
        bot_id: Discord bot user id; mentions of the bot are removed first.
        quoted: WhatsApp quoted reply, {"id", "sender", "body"}; folded into the text.

    Returns:
        Trust tier and reason, the sanitized text (verbatim for operators,
        wrapped in <external-content> otherwise) and any injection flags.
    """
    request = SanitizeRequest(
        channel=Channel(channel),
        text=text,
        sender_id=sender_id,
        display_name=display_name,
        subject=subject,
        html=html,
        auth=auth,
        bot_id=bot_id,
        quoted=quoted,
    )
    result = sanitize_execute(request, _get_store())
    return result.model_dump(mode="json")


@mcp.tool()
def mcp_scan_text(text: str) -> dict:
    """Scan text for prompt-injection signatures without wrapping it.

    Args:
        text: Text to scan. Only the first 10,000 normalized characters are examined.

    Returns:
        Up to five flags (category, label, matched_text) and scan bounds.
    """
    result = scan_execute(ScanRequest(text=text))
    return result.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main():
    """Entry point for uvx / console_scripts."""
    global _store
    # A broken whitelist must stop the server, not start it open.
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    _store = SecurityConfigStore(settings)
    logger.info("Starting gateway-content-security server")
    logger.info(settings.log_summary())

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
