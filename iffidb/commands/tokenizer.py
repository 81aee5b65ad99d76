"""
Command Line Tokenizer

Splits one console line into an argument vector.

Rules:
- Whitespace separates tokens
- A double-quoted run belongs to the surrounding token, quotes stripped
  (`-n "John Smith"` -> ["-n", "John Smith"], `a"b c"d` -> ["ab cd"])
- `""` on its own is an empty token
- A quote with no closing partner is an ordinary character
  (`O"Brien` -> ["O\\"Brien"]); unbalanced input never raises
"""

from typing import Optional

from iffidb.models.record import RecordUpdate


FIELD_FLAGS = {
    "-n": "name",
    "-e": "email",
    "-p": "phone",
    "-a": "address",
}


def tokenize(line: str) -> list[str]:
    """Split a command line into tokens, honoring double quotes."""
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    in_quotes = False

    for index, char in enumerate(line):
        if in_quotes:
            if char == '"':
                in_quotes = False
            else:
                current.append(char)
        elif char == '"' and line.find('"', index + 1) != -1:
            in_quotes = True
            in_token = True
        elif char.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(char)
            in_token = True

    if in_token:
        tokens.append("".join(current))
    return tokens


def parse_field_flags(args: list[str]) -> dict[str, str]:
    """
    Collect -n/-e/-p/-a values from args.

    Each flag takes the next token as its value. Unknown tokens are
    skipped, a flag with no following token is ignored, and an empty
    value counts as not given.
    """
    fields: dict[str, str] = {}
    index = 0
    while index < len(args):
        field: Optional[str] = FIELD_FLAGS.get(args[index])
        if field is not None and index + 1 < len(args):
            value = args[index + 1]
            if value.strip():
                fields[field] = value
            index += 2
            continue
        index += 1
    return fields


def parse_update(args: list[str]) -> RecordUpdate:
    """Field flags as a partial record update."""
    return RecordUpdate(**parse_field_flags(args))
