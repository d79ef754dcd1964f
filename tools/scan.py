"""MCP Tool: mcp_scan_text — signature scan without trust or wrapping."""

from __future__ import annotations

from engine.scanner import MAX_SCAN_LENGTH, normalize_text, scan
from models.schemas import ScanRequest, ScanResponse


def execute(request: ScanRequest) -> ScanResponse:
    normalized_len = len(normalize_text(request.text))
    return ScanResponse(
        flags=scan(request.text),
        scanned_chars=min(normalized_len, MAX_SCAN_LENGTH),
        truncated=normalized_len > MAX_SCAN_LENGTH,
    )
