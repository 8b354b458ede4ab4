"""
Doc comment tokenizer.

Turns one raw ``///``, ``//!``, ``/**`` or ``/*!`` comment into a flat list of
tokens, one per logical line: prose, group directives (``@defgroup``,
``@ingroup``/``@addtogroup``, ``@name``, ``@{``/``@}``), ``@deprecated``
markers and ``@code``/``@endcode`` blocks.  Every list ends with a single
``CommentEnd``.  Anything else is passed through as prose.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    line: int


@dataclass(frozen=True)
class TextLine(Token):
    text: str


@dataclass(frozen=True)
class BlockStart(Token):
    pass


@dataclass(frozen=True)
class BlockEnd(Token):
    pass


@dataclass(frozen=True)
class DefGroup(Token):
    group_id: str
    title: str


@dataclass(frozen=True)
class InGroup(Token):
    group_id: str


@dataclass(frozen=True)
class MemberGroup(Token):
    group_id: str


@dataclass(frozen=True)
class Deprecated(Token):
    note: str = ""


@dataclass(frozen=True)
class CodeBlockStart(Token):
    lang: str = ""


@dataclass(frozen=True)
class CodeBlockEnd(Token):
    pass


@dataclass(frozen=True)
class CodeLine(Token):
    text: str


@dataclass(frozen=True)
class CommentEnd(Token):
    # closes a `///<` style comment documenting the declaration before it
    trailing: bool = False


DOC_COMMENT_PREFIXES = ("///", "//!", "/**", "/*!")

_MD_ESCAPE_RE = re.compile(r"([|*])")
_TRAILING_RE = re.compile(r"^(?://[!/]|/\*[!*])<")


def is_doc_comment(text):
    return text.startswith(DOC_COMMENT_PREFIXES) and text not in ("/**/", "/*!*/")


def is_trailing_comment(text):
    return bool(_TRAILING_RE.match(text))


def escape_markdown(text):
    return _MD_ESCAPE_RE.sub(r"\\\1", text)


def _line_prefix_re(column):
    # Continuation lines without a leading '*' are aligned on the column of
    # the comment opener (libclang columns are 1-based).
    indent = max(column - 1, 0)
    return re.compile(r"^(?:/\*[!*]+<?|//[!/]+<?|[ \t]*\*+/?|[ ]{%d})[ \t]?" % indent)


def _deprecated(m, line):
    out = []
    before = m.group(1).rstrip()
    if before.strip():
        out.append(TextLine(line, escape_markdown(before)))
    out.append(Deprecated(line, m.group(2)))
    return out


# Tried in order, first match wins.  Each builder returns the tokens for one line.
_LINE_RULES = [
    (
        re.compile(r"^\s*[@\\]defgroup\s+(\w+)\s*(.*?)\s*$"),
        lambda m, line: [DefGroup(line, m.group(1), m.group(2))],
    ),
    (
        re.compile(r"^\s*[@\\](?:addtogroup|ingroup)\s+(\w+)"),
        lambda m, line: [InGroup(line, m.group(1))],
    ),
    (
        re.compile(r"^\s*[@\\]name\s+(.*?)\s*$"),
        lambda m, line: [MemberGroup(line, m.group(1))],
    ),
    (re.compile(r"^\s*@\{\s*$"), lambda m, line: [BlockStart(line)]),
    (re.compile(r"^\s*@\}\s*$"), lambda m, line: [BlockEnd(line)]),
    (re.compile(r"^(.*?)[@\\]deprecated\b\s*(.*?)\s*$"), _deprecated),
    (
        re.compile(r"^\s*[@\\]code(?:\{\.?([\w+#-]+)\})?(?!\w)"),
        lambda m, line: [CodeBlockStart(line, m.group(1) or "")],
    ),
    (re.compile(r"^\s*[@\\]endcode\b"), lambda m, line: [CodeBlockEnd(line)]),
]


def _classify_line(text, line, in_code):
    for pattern, build in _LINE_RULES:
        m = pattern.match(text)
        if m:
            return build(m, line)
    if in_code:
        return [CodeLine(line, text)]
    return [TextLine(line, escape_markdown(text))]


def _is_blank(token):
    return isinstance(token, TextLine) and not token.text.strip()


def tokenize_comment(raw, location):
    """Tokenize one raw comment starting at *location*.

    Line numbers of the tokens are absolute source lines.  Leading and
    trailing blank prose lines are dropped; the closing ``CommentEnd`` sits
    on the line after the last comment line.
    """
    text = raw.rstrip()
    if text.endswith("*/") and len(text) > 3:
        text = text[:-2]
    prefix = _line_prefix_re(location.column)

    tokens = []
    in_code = False
    lines = text.split("\n")
    for offset, physical in enumerate(lines):
        stripped = prefix.sub("", physical.rstrip("\r"), count=1).rstrip()
        for token in _classify_line(stripped, location.line + offset, in_code):
            if isinstance(token, CodeBlockStart):
                in_code = True
            elif isinstance(token, CodeBlockEnd):
                in_code = False
            tokens.append(token)

    while tokens and _is_blank(tokens[0]):
        tokens.pop(0)
    while tokens and _is_blank(tokens[-1]):
        tokens.pop()
    tokens.append(CommentEnd(location.line + len(lines), is_trailing_comment(raw)))
    return tokens


class CommentQueue:
    """FIFO of pending tokens, ordered by source line.

    A comment that starts on the line of the queued ``CommentEnd`` continues
    the previous one, so consecutive ``///`` lines read as a single block.
    Trailing ``///<`` comments are never spliced, on either side.
    """

    def __init__(self):
        self._tokens = deque()

    def push(self, tokens, start_line):
        last = self._tokens[-1] if self._tokens else None
        if isinstance(last, CommentEnd) and last.line == start_line and not last.trailing:
            if not (tokens and getattr(tokens[-1], "trailing", False)):
                self._tokens.pop()
        self._tokens.extend(tokens)

    def push_comment(self, raw, location):
        self.push(tokenize_comment(raw, location), location.line)

    def peek(self):
        return self._tokens[0] if self._tokens else None

    def pop(self):
        return self._tokens.popleft()

    def clear(self):
        self._tokens.clear()

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        return iter(self._tokens)

