"""Prompt-injection signature catalog.

An ordered table of (category, label, pattern) rules. Order matters: the
scanner walks it top to bottom and stops after ``MAX_FLAGS`` hits, so the
highest-signal rules come first. All patterns are compiled case-insensitive
and run against NFKD-normalized, whitespace-collapsed text, which means
accented letters appear as base letter + combining mark (match them with
``\\S``, not literal accents).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

INSTRUCTION_OVERRIDE = "instruction_override"
SYSTEM_PROMPT_EXTRACTION = "system_prompt_extraction"
COMMAND_INJECTION = "command_injection"
DATA_EXFILTRATION = "data_exfiltration"
ROLE_MANIPULATION = "role_manipulation"

CATEGORIES = (
    INSTRUCTION_OVERRIDE,
    SYSTEM_PROMPT_EXTRACTION,
    COMMAND_INJECTION,
    DATA_EXFILTRATION,
    ROLE_MANIPULATION,
)


@dataclass(frozen=True)
class PatternRule:
    category: str
    label: str
    regex: re.Pattern[str]


def _rule(category: str, label: str, pattern: str) -> PatternRule:
    return PatternRule(category, label, re.compile(pattern, re.IGNORECASE))


_TARGETS = r"(instructions|prompts|rules|guidelines)"

INJECTION_PATTERNS: tuple[PatternRule, ...] = (
    # Instruction override
    _rule(INSTRUCTION_OVERRIDE, "ignore instructions",
          rf"ignore\s+(all\s+|your\s+)?(previous\s+|prior\s+|above\s+)?{_TARGETS}"),
    _rule(INSTRUCTION_OVERRIDE, "disregard instructions",
          rf"disregard\s+(all\s+|your\s+)?(previous\s+|prior\s+|above\s+)?{_TARGETS}"),
    _rule(INSTRUCTION_OVERRIDE, "forget instructions",
          rf"forget\s+(all\s+|your\s+)?(previous\s+|prior\s+)?{_TARGETS}"),
    _rule(INSTRUCTION_OVERRIDE, "new identity", r"you\s+are\s+now\b"),
    _rule(INSTRUCTION_OVERRIDE, "act as if", r"\bact\s+as\s+if\b"),
    _rule(INSTRUCTION_OVERRIDE, "pretend", r"\bpretend\s+(you\s+are|to\s+be)\b"),
    _rule(INSTRUCTION_OVERRIDE, "new instructions", r"\bnew\s+instructions\s*:"),
    _rule(INSTRUCTION_OVERRIDE, "override", r"\bfrom\s+now\s+on\b"),

    # System prompt extraction
    _rule(SYSTEM_PROMPT_EXTRACTION, "system prompt", r"\bsystem\s+prompt\b"),
    _rule(SYSTEM_PROMPT_EXTRACTION, "reveal instructions",
          r"reveal\s+your\s+(instructions|prompt|rules|system)"),
    _rule(SYSTEM_PROMPT_EXTRACTION, "show instructions",
          r"show\s+me\s+your\s+(prompt|instructions|rules|system)"),
    _rule(SYSTEM_PROMPT_EXTRACTION, "what are your rules",
          r"what\s+are\s+your\s+(instructions|rules|guidelines)"),
    _rule(SYSTEM_PROMPT_EXTRACTION, "repeat above",
          r"\brepeat\s+(everything|all|the\s+text|the\s+words)\s+above\b"),

    # Command injection
    _rule(COMMAND_INJECTION, "curl command", r"\bcurl\b.{0,30}https?:"),
    _rule(COMMAND_INJECTION, "wget", r"\bwget\s+"),
    _rule(COMMAND_INJECTION, "rm -rf", r"\brm\s+-rf\b"),
    _rule(COMMAND_INJECTION, "sudo", r"\bsudo\s+"),
    _rule(COMMAND_INJECTION, "ssh", r"\bssh\s+\S+@"),
    _rule(COMMAND_INJECTION, "eval/exec", r"\b(eval|exec)\s*\("),
    _rule(COMMAND_INJECTION, "file read", r"\bcat\s+[~/]"),
    _rule(COMMAND_INJECTION, "fetch call", r"""\bfetch\s*\(\s*["']https?:"""),
    _rule(COMMAND_INJECTION, "pipe to shell", r"\|\s*(ba|z)?sh\b"),
    _rule(COMMAND_INJECTION, "chmod 777", r"\bchmod\s+(-R\s+)?777\b"),

    # Data exfiltration
    _rule(DATA_EXFILTRATION, "send data",
          r"send\s+(this|the|all|every|my)\s+.{0,20}(to|via)\b"),
    _rule(DATA_EXFILTRATION, "forward data",
          r"forward\s+(this|the|all|every)\s+.{0,20}(to|via)\b"),
    _rule(DATA_EXFILTRATION, "upload", r"upload\s+.{0,30}\s+to\s+"),
    _rule(DATA_EXFILTRATION, "exfil encoding",
          r"\bbase64\b.{0,30}\b(send|post|upload|curl)\b"),

    # Role manipulation
    _rule(ROLE_MANIPULATION, "mode switch", r"\b(switch|change)\s+to\s+\w+\s+mode\b"),
    _rule(ROLE_MANIPULATION, "enable mode", r"\benable\s+\w+\s+mode\b"),
    _rule(ROLE_MANIPULATION, "jailbreak", r"\bjailbreak\b"),
    _rule(ROLE_MANIPULATION, "DAN", r"\bDAN\b"),
    _rule(ROLE_MANIPULATION, "do anything now", r"\bdo\s+anything\s+now\b"),
    _rule(ROLE_MANIPULATION, "fake role tag", r"<\s*/?\s*(system|assistant)\s*>"),

    _rule(INSTRUCTION_OVERRIDE, "act as", r"\bact\s+as\s+(a|an|the)\b"),

    # Locale variants of override phrasing
    _rule(INSTRUCTION_OVERRIDE, "ignorar instrucciones",
          r"ignora(r)?\s+(todas\s+)?(las\s+|tus\s+)?(\S+\s+)?instrucciones"),
    _rule(INSTRUCTION_OVERRIDE, "olvidar instrucciones",
          r"olvida(r)?\s+(todas\s+)?(las\s+|tus\s+)?(\S+\s+)?instrucciones"),
    _rule(INSTRUCTION_OVERRIDE, "ignorer les instructions",
          r"(ignore[rz]?|oublie[rz]?)\s+(toutes\s+)?(les|vos|tes)\s+(\S+\s+)?instructions"),
    _rule(INSTRUCTION_OVERRIDE, "Anweisungen ignorieren",
          r"(ignorier(e|en|t)?|vergiss)\s+(alle\s+)?(\S+\s+)?(anweisungen|instruktionen|regeln)"),
    _rule(INSTRUCTION_OVERRIDE, "ignorar instruções",
          r"(ignor(e|ar)|esquec\u0327?a)\s+(todas\s+)?(as|suas)\s+(\S+\s+)?instru"),
    _rule(INSTRUCTION_OVERRIDE, "ignora le istruzioni",
          r"(ignora|dimentica)\s+(tutte\s+)?(le\s+)?(\S+\s+)?istruzioni"),
)
