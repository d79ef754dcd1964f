"""Bounded signature matching over normalized text.

The normalized copy exists only for matching; the wrapper always embeds the
original text.
"""

from __future__ import annotations

import re
import unicodedata

from engine.patterns import INJECTION_PATTERNS, PatternRule
from models.schemas import InjectionFlag

MAX_SCAN_LENGTH = 10_000
MAX_FLAGS = 5

# Zero-width and other invisible code points used to split trigger words:
# soft hyphen, Mongolian vowel separator, ZWSP..RLM, bidi embeddings,
# word joiner..invisible plus, bidi isolates, BOM.
_INVISIBLE_RE = re.compile(
    "[\u00ad\u180e\u200b-\u200f\u202a-\u202e\u2060-\u2064\u2066-\u2069\ufeff]"
)
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Strip invisibles, apply NFKD, collapse whitespace runs to one space."""
    normalized = _INVISIBLE_RE.sub("", text)
    normalized = unicodedata.normalize("NFKD", normalized)
    return _WHITESPACE_RE.sub(" ", normalized)


def scan(text: str | None, rules: tuple[PatternRule, ...] = INJECTION_PATTERNS) -> list[InjectionFlag]:
    """Scan *text* for injection signatures.

    Only the first ``MAX_SCAN_LENGTH`` normalized characters are examined and
    at most ``MAX_FLAGS`` flags are returned, one per matching rule, in
    catalog order.
    """
    if not text:
        return []

    scan_text = normalize_text(text)[:MAX_SCAN_LENGTH]

    flags: list[InjectionFlag] = []
    for rule in rules:
        if len(flags) >= MAX_FLAGS:
            break
        match = rule.regex.search(scan_text)
        if match:
            flags.append(InjectionFlag(
                category=rule.category,
                label=rule.label,
                matched_text=match.group(0),
            ))
    return flags
