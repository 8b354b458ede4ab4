"""
Thin facade over ``clang.cindex`` cursors.

The extractor never switches on raw cursor kinds itself: ``classify()`` maps
every kind it cares about onto a small ``CursorRole`` and the helpers here
read whatever that role needs (identity, location, literals, qualified names,
doc comment tokens).
"""

from __future__ import annotations

from enum import Enum, auto

from clang.cindex import CursorKind, TokenKind

from .comments import is_doc_comment
from .model import Location


class CursorRole(Enum):
    WRAPPER = auto()
    CALL = auto()
    NAME_REF = auto()
    CONSTRUCT = auto()
    VARIABLE = auto()
    PARAMETER = auto()
    FIELD = auto()
    FUNCTION = auto()
    SCOPE = auto()
    LITERAL = auto()
    OTHER = auto()


_ROLE_MAP = {
    CursorKind.UNEXPOSED_EXPR: CursorRole.WRAPPER,
    CursorKind.PAREN_EXPR: CursorRole.WRAPPER,
    CursorKind.UNARY_OPERATOR: CursorRole.WRAPPER,
    CursorKind.CSTYLE_CAST_EXPR: CursorRole.WRAPPER,
    CursorKind.CXX_STATIC_CAST_EXPR: CursorRole.WRAPPER,
    CursorKind.CXX_REINTERPRET_CAST_EXPR: CursorRole.WRAPPER,
    CursorKind.CXX_CONST_CAST_EXPR: CursorRole.WRAPPER,
    CursorKind.CXX_FUNCTIONAL_CAST_EXPR: CursorRole.WRAPPER,
    CursorKind.CALL_EXPR: CursorRole.CALL,
    CursorKind.DECL_REF_EXPR: CursorRole.NAME_REF,
    CursorKind.MEMBER_REF_EXPR: CursorRole.NAME_REF,
    CursorKind.CXX_NEW_EXPR: CursorRole.CONSTRUCT,
    CursorKind.VAR_DECL: CursorRole.VARIABLE,
    CursorKind.PARM_DECL: CursorRole.PARAMETER,
    CursorKind.FIELD_DECL: CursorRole.FIELD,
    CursorKind.FUNCTION_DECL: CursorRole.FUNCTION,
    CursorKind.CXX_METHOD: CursorRole.FUNCTION,
    CursorKind.CONSTRUCTOR: CursorRole.FUNCTION,
    CursorKind.NAMESPACE: CursorRole.SCOPE,
    CursorKind.CLASS_DECL: CursorRole.SCOPE,
    CursorKind.STRUCT_DECL: CursorRole.SCOPE,
    CursorKind.CLASS_TEMPLATE: CursorRole.SCOPE,
    CursorKind.INTEGER_LITERAL: CursorRole.LITERAL,
    CursorKind.FLOATING_LITERAL: CursorRole.LITERAL,
    CursorKind.STRING_LITERAL: CursorRole.LITERAL,
    CursorKind.CHARACTER_LITERAL: CursorRole.LITERAL,
    CursorKind.CXX_BOOL_LITERAL_EXPR: CursorRole.LITERAL,
}

DECLARATION_ROLES = frozenset(
    {CursorRole.VARIABLE, CursorRole.PARAMETER, CursorRole.FIELD, CursorRole.FUNCTION}
)


def classify(cursor):
    return _ROLE_MAP.get(cursor.kind, CursorRole.OTHER)


def identity(cursor):
    """Cross-translation-unit identity of a declaration (its USR)."""
    if cursor is None:
        return ""
    return cursor.get_usr() or ""


def location_of(cursor):
    loc = cursor.location
    if loc is None:
        return Location()
    fname = loc.file.name if loc.file else ""
    return Location(str(fname), loc.line, loc.column)


def token_location(token):
    loc = token.location
    fname = loc.file.name if loc.file else ""
    return Location(str(fname), loc.line, loc.column)


def in_system_header(cursor):
    loc = cursor.location
    return bool(loc is not None and loc.file and loc.is_in_system_header)


def type_spelling(cursor):
    t = cursor.type
    return t.spelling if t is not None else ""


def arguments(cursor):
    return list(cursor.get_arguments())


def children(cursor):
    return list(cursor.get_children())


def is_constructor(cursor):
    return cursor.kind == CursorKind.CONSTRUCTOR


def is_local_variable(cursor):
    if classify(cursor) is not CursorRole.VARIABLE:
        return False
    parent = cursor.semantic_parent
    return parent is not None and classify(parent) is CursorRole.FUNCTION


def extract_string_literal(cursor):
    """First string literal spelled inside *cursor*, without its quotes."""
    value = ""
    for tok in cursor.get_tokens():
        if tok.kind == TokenKind.LITERAL and '"' in tok.spelling:
            value = tok.spelling
            break
    if not value:
        for node in cursor.walk_preorder():
            if node.kind == CursorKind.STRING_LITERAL:
                value = node.spelling
                break
    if '"' in value:
        value = value[value.index('"') + 1 : value.rindex('"')]
    return value


def extract_int_literal(cursor, default=0):
    negative = False
    for tok in cursor.get_tokens():
        if tok.kind == TokenKind.PUNCTUATION and tok.spelling == "-":
            negative = not negative
            continue
        if tok.kind == TokenKind.LITERAL and '"' not in tok.spelling:
            digits = tok.spelling.rstrip("uUlL")
            try:
                value = int(digits, 0)
            except ValueError:
                try:
                    value = int(digits, 10)
                except ValueError:
                    return default
            return -value if negative else value
    return default


def fully_qualified_name(cursor):
    parts = []
    node = cursor
    while node is not None and node.kind != CursorKind.TRANSLATION_UNIT:
        if node.spelling:
            parts.append(node.spelling)
        node = node.semantic_parent
    return "::".join(reversed(parts))


def doc_comments(cursor):
    """Yield ``(text, location)`` for every doc comment inside *cursor*'s extent."""
    for tok in cursor.get_tokens():
        if tok.kind == TokenKind.COMMENT and is_doc_comment(tok.spelling):
            yield tok.spelling, token_location(tok)
