"""Command console package: tokenizer, executor and natural-language interpreter."""

from iffidb.commands.executor import (
    CLEAR_MARKER,
    HELP_LINES,
    CommandError,
    CommandExecutor,
    CommandHistory,
    CommandOutcome,
    UnknownCommandError,
    UsageError,
)
from iffidb.commands.interpreter import (
    DEFAULT_RULES,
    SAMPLE_SHORTCUT,
    Interpretation,
    InterpretationRule,
    NaturalLanguageInterpreter,
)
from iffidb.commands.tokenizer import parse_field_flags, parse_update, tokenize

__all__ = [
    "CLEAR_MARKER",
    "HELP_LINES",
    "CommandError",
    "CommandExecutor",
    "CommandHistory",
    "CommandOutcome",
    "UnknownCommandError",
    "UsageError",
    "DEFAULT_RULES",
    "SAMPLE_SHORTCUT",
    "Interpretation",
    "InterpretationRule",
    "NaturalLanguageInterpreter",
    "parse_field_flags",
    "parse_update",
    "tokenize",
]
