from dataclasses import dataclass, field
from typing import List


@dataclass
class ParsedCommand:
    name: str = ""
    args: List[str] = field(default_factory=list)


def tokenize(line: str) -> List[str]:
    """Split on spaces and tabs, keeping single- or double-quoted runs together."""
    tokens: List[str] = []
    current: List[str] = []
    quote = ""
    for char in line:
        if quote:
            if char == quote:
                quote = ""
            else:
                current.append(char)
        elif char in ("'", '"'):
            quote = char
        elif char in (" ", "\t"):
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)
    if current:
        tokens.append("".join(current))
    return tokens


def parse(line: str) -> ParsedCommand:
    tokens = tokenize(line.strip())
    if not tokens:
        return ParsedCommand()
    return ParsedCommand(name=tokens[0].lower(), args=tokens[1:])
