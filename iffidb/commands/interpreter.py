"""
Natural-Language Interpreter

Best-effort translation of free text (typed or transcribed speech) into a
canonical console command.

DESIGN DECISION: The heuristics are an ordered rule table. Each rule has
a predicate over the lower-cased text and a transform over the raw text;
the first rule whose predicate holds AND whose transform produces a
command wins. A transform may decline (return None) to let later rules
try. If no rule fires, the text is returned unchanged and the executor
treats it as a literal command line.

Matching is case-insensitive; extracted values keep the caller's casing.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel


EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+")
NAME_PATTERN = re.compile(r"\bname\s+(.+?)(?:\s+(?:email|with|and)\b|\s*$)", re.IGNORECASE)
FALLBACK_NAME_PATTERN = re.compile(
    r"(?:create|add)(?:\s+record)?(?:\s+for)?\s+(.+?)\s+(?:email|with)\b",
    re.IGNORECASE,
)
PHONE_PATTERN = re.compile(r"phone\s+(\+?[\d\s-]{7,})", re.IGNORECASE)

SAMPLE_SHORTCUT = 'create -n "Sample User" -e "sample@test.com"'


@dataclass(frozen=True)
class InterpretationRule:
    """
    One heuristic.

    Attributes:
        name: Identifier used in logs and tests
        matches: Predicate over the lower-cased input
        translate: Builds the canonical command from the raw input,
                   or returns None to fall through
        announce: Whether the caller should report the rewrite
    """
    name: str
    matches: Callable[[str], bool]
    translate: Callable[[str], Optional[str]]
    announce: bool = False


class Interpretation(BaseModel):
    """Result of interpreting one input."""

    original: str
    command: str
    rule: Optional[str] = None
    announce: bool = False

    @property
    def rewritten(self) -> bool:
        return self.rule is not None


def _contains_any(*phrases: str) -> Callable[[str], bool]:
    return lambda lower: any(phrase in lower for phrase in phrases)


def _contains_all(*phrases: str) -> Callable[[str], bool]:
    return lambda lower: all(phrase in lower for phrase in phrases)


def _constant(command: str) -> Callable[[str], Optional[str]]:
    return lambda text: command


def extract_create_command(text: str) -> Optional[str]:
    """
    Build `create -n "<name>" -e "<email>" [-p "<phone>"]` from free text.

    Returns None unless both a name and an email are recovered.
    """
    email_match = EMAIL_PATTERN.search(text)
    email = email_match.group(0) if email_match else ""

    name = ""
    name_match = NAME_PATTERN.search(text)
    if name_match:
        name = name_match.group(1)
    elif email:
        fallback = FALLBACK_NAME_PATTERN.search(text)
        if fallback:
            name = fallback.group(1)

    phone_match = PHONE_PATTERN.search(text)
    phone = phone_match.group(1).strip() if phone_match else ""

    name = name.strip()
    email = email.strip()
    if not name or not email:
        return None

    command = f'create -n "{name}" -e "{email}"'
    if phone:
        command += f' -p "{phone}"'
    return command


DEFAULT_RULES: tuple[InterpretationRule, ...] = (
    InterpretationRule(
        name="create",
        matches=_contains_any("create", "add"),
        translate=extract_create_command,
        announce=True,
    ),
    InterpretationRule(
        name="list",
        matches=_contains_any("list", "show records"),
        translate=_constant("list"),
    ),
    InterpretationRule(
        name="export",
        matches=_contains_any("export", "download"),
        translate=_constant("export"),
    ),
    InterpretationRule(
        name="clear",
        matches=_contains_any("clear logs", "clear console"),
        translate=_constant("clear"),
    ),
    InterpretationRule(
        name="help",
        matches=_contains_any("help"),
        translate=_constant("help"),
    ),
    InterpretationRule(
        name="generate",
        matches=_contains_all("generate", "data"),
        translate=_constant(SAMPLE_SHORTCUT),
    ),
)


class NaturalLanguageInterpreter:
    """
    Evaluates the rule table top to bottom, first match wins.

    Usage:
        interpreter = NaturalLanguageInterpreter()
        result = interpreter.interpret("show records")
        result.command  # "list"
    """

    def __init__(self, rules: tuple[InterpretationRule, ...] = DEFAULT_RULES):
        self._rules = rules

    @property
    def rules(self) -> tuple[InterpretationRule, ...]:
        return self._rules

    def interpret(self, text: str) -> Interpretation:
        lower = text.lower()
        for rule in self._rules:
            if not rule.matches(lower):
                continue
            command = rule.translate(text)
            if command is not None:
                return Interpretation(
                    original=text,
                    command=command,
                    rule=rule.name,
                    announce=rule.announce,
                )
        return Interpretation(original=text, command=text)
