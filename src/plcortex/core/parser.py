"""Text-to-rung parser for the simplified instruction-list notation.

Grammar, informally::

    line   := element* action
    element:= TOKEN | '[' leg (',' leg)* ']'
    leg    := TOKEN+
    TOKEN  := OPCODE '(' TAG ')'

The parser is lenient: anything that does not look like a token is skipped
and never aborts the rest of the line. Structural problems are expected to
have been reported by the validation pass before a program is simulated.
"""

from __future__ import annotations

import re

from plcortex.core.instruction import Branch, Instruction, Opcode, RungElement
from plcortex.core.rung import Program, Rung

OPCODE_PATTERN = "|".join(op.value for op in Opcode)
TAG_PATTERN = r"[A-Za-z0-9_]+"

#: A whole token; the tag may be padded inside the parentheses.
TOKEN_RE = re.compile(rf"^({OPCODE_PATTERN})\(\s*({TAG_PATTERN})\s*\)$")
#: Splits text into candidate tokens. A parenthesized run stays in one piece
#: even if it holds spaces, so ``XIC( A )`` is a single token.
_TOKEN_SPLIT_RE = re.compile(r"\S*\([^()]*\)\S*|\S+")

_BRACKET_RE = re.compile(r"(\[[^\[\]]*\])")

COMMENT_PREFIX = "//"


def is_code_line(line: str) -> bool:
    """True for lines that hold logic (not blank, not a ``//`` comment)."""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith(COMMENT_PREFIX)


def parse_token(token: str) -> Instruction | None:
    """Parse one ``OPCODE(TAG)`` token, or return None if it is malformed."""
    match = TOKEN_RE.match(token.strip())
    if match is None:
        return None
    return Instruction(Opcode(match.group(1)), match.group(2))


def _parse_series(text: str) -> list[Instruction]:
    instructions = []
    for token in _TOKEN_SPLIT_RE.findall(text):
        instr = parse_token(token)
        if instr is not None:
            instructions.append(instr)
    return instructions


def _parse_branch(group: str) -> Branch | None:
    legs = []
    for leg_text in group[1:-1].split(","):
        # Coils have no meaning inside a parallel group.
        leg = tuple(instr for instr in _parse_series(leg_text) if instr.is_condition)
        if leg:
            legs.append(leg)
    if not legs:
        return None
    return Branch(tuple(legs))


def tokenize_line(line: str) -> list[Instruction]:
    """Every well-formed token on ``line`` in order, including coils in brackets.

    Tokenizes exactly like parse_elements, so a tag found here is one the
    parser also sees.
    """
    instructions = []
    for part in _BRACKET_RE.split(line):
        if _BRACKET_RE.fullmatch(part):
            for leg_text in part[1:-1].split(","):
                instructions.extend(_parse_series(leg_text))
        else:
            instructions.extend(_parse_series(part))
    return instructions


def parse_elements(line: str) -> list[RungElement]:
    """Split one line into instructions and parallel branches.

    Malformed fragments are dropped, so ``"XIC(A"`` returns ``[]``.
    """
    elements: list[RungElement] = []
    for part in _BRACKET_RE.split(line):
        if not part.strip():
            continue
        if _BRACKET_RE.fullmatch(part):
            branch = _parse_branch(part)
            if branch is not None:
                elements.append(branch)
        else:
            elements.extend(_parse_series(part))
    return elements


def parse_rung(line: str, source_line: int | None = None) -> Rung:
    """Parse one line into a Rung."""
    return Rung(elements=tuple(parse_elements(line)), source_line=source_line)


def parse_program(text: str) -> Program:
    """Parse every code line of ``text`` into a Program.

    Blank and comment lines are skipped; each rung keeps its 1-based line
    number so issues and traces can point back at the source.
    """
    rungs = [
        parse_rung(line, source_line=number)
        for number, line in enumerate(text.splitlines(), start=1)
        if is_code_line(line)
    ]
    return Program.from_rungs(rungs, source=text)
