"""
Duck-typed stand-ins for ``clang.cindex`` cursors and tokens.

They carry real ``CursorKind``/``TokenKind`` values, so the extractor code
under test runs unchanged; only the AST itself is built by hand.
"""

from clang.cindex import CursorKind, TokenKind

NAMESPACE_T = "EScript::Namespace *"
TYPE_T = "EScript::Type *"
FILE = "bind.cpp"


class FakeFile:
    def __init__(self, name):
        self.name = name


class FakeLocation:
    def __init__(self, line=0, column=1, file=FILE, system=False):
        self.file = FakeFile(file) if file else None
        self.line = line
        self.column = column
        self.is_in_system_header = system


class FakeType:
    def __init__(self, spelling=""):
        self.spelling = spelling


class FakeToken:
    def __init__(self, kind, spelling, line=0, column=1, file=FILE):
        self.kind = kind
        self.spelling = spelling
        self.location = FakeLocation(line, column, file)


class FakeCursor:
    def __init__(
        self,
        kind,
        spelling="",
        *,
        type="",
        line=0,
        column=1,
        file=FILE,
        system=False,
        children=(),
        arguments=None,
        referenced=None,
        usr="",
        tokens=(),
        semantic_parent=None,
        definition=None,
        is_definition=False,
    ):
        self.kind = kind
        self.spelling = spelling
        self.type = FakeType(type)
        self.location = FakeLocation(line, column, file, system)
        self.children = list(children)
        self.arguments = list(arguments) if arguments is not None else []
        self.referenced = referenced
        self.usr = usr
        self.tokens = list(tokens)
        self.semantic_parent = semantic_parent
        self.definition = definition
        self._is_definition = is_definition

    def __repr__(self):
        return f"FakeCursor({self.kind.name}, {self.spelling!r})"

    def get_children(self):
        return iter(self.children)

    def get_arguments(self):
        return iter(self.arguments)

    def get_usr(self):
        return self.usr

    def get_tokens(self):
        return iter(self.tokens)

    def get_definition(self):
        return self.definition

    def is_definition(self):
        return self._is_definition

    def walk_preorder(self):
        yield self
        for child in self.children:
            yield from child.walk_preorder()


# ── builders ──


def translation_unit(*children):
    return FakeCursor(CursorKind.TRANSLATION_UNIT, "bind.cpp", children=children)


def namespace(name, *children, parent=None, usr=None):
    ns = FakeCursor(
        CursorKind.NAMESPACE, name, children=children, usr=usr or f"c:@N@{name}", semantic_parent=parent
    )
    for child in children:
        if child.semantic_parent is None:
            child.semantic_parent = ns
    return ns


def param(name, usr, type=NAMESPACE_T, line=1):
    return FakeCursor(CursorKind.PARM_DECL, name, type=type, usr=usr, line=line)


def variable(name, usr, type, init=(), parent=None, line=1):
    return FakeCursor(
        CursorKind.VAR_DECL,
        name,
        type=type,
        usr=usr,
        children=init,
        semantic_parent=parent,
        line=line,
    )


def function_decl(name, usr, type="void ()", parent=None, children=(), line=1):
    return FakeCursor(
        CursorKind.FUNCTION_DECL,
        name,
        type=type,
        usr=usr,
        semantic_parent=parent,
        children=children,
        line=line,
    )


def ref(decl, line=0):
    """Name reference to *decl*, typed like it."""
    return FakeCursor(
        CursorKind.DECL_REF_EXPR,
        decl.spelling,
        type=decl.type.spelling,
        referenced=decl,
        line=line,
    )


def wrap(expr, kind=CursorKind.UNEXPOSED_EXPR):
    return FakeCursor(kind, "", type=expr.type.spelling, children=[expr], line=expr.location.line)


def string_lit(text, line=0):
    spelled = f'"{text}"'
    return FakeCursor(
        CursorKind.STRING_LITERAL,
        spelled,
        type=f"const char[{len(text) + 1}]",
        tokens=[FakeToken(TokenKind.LITERAL, spelled, line)],
        line=line,
    )


def int_lit(value, line=0):
    tokens = []
    if value < 0:
        tokens.append(FakeToken(TokenKind.PUNCTUATION, "-", line))
    tokens.append(FakeToken(TokenKind.LITERAL, str(abs(value)), line))
    return FakeCursor(CursorKind.INTEGER_LITERAL, "", type="int", tokens=tokens, line=line)


def call(name, *args, line, callee=None, type="void"):
    head = [ref(callee, line)] if callee is not None else []
    return FakeCursor(
        CursorKind.CALL_EXPR,
        name,
        type=type,
        children=head + list(args),
        arguments=args,
        referenced=callee,
        line=line,
    )


def comment(text, line, column=5):
    return FakeToken(TokenKind.COMMENT, text, line, column)


def init_function(usr, lib, body=(), comments=(), name="init", parent=None, line=1):
    """``void init(EScript::Namespace * lib) { body }`` with *comments* in its extent."""
    stmt = FakeCursor(CursorKind.COMPOUND_STMT, children=body, line=line)
    fn = FakeCursor(
        CursorKind.FUNCTION_DECL,
        name,
        type="void (EScript::Namespace *)",
        usr=usr,
        children=[lib, stmt],
        arguments=[lib],
        tokens=comments,
        semantic_parent=parent,
        is_definition=True,
        line=line,
    )
    fn.definition = fn
    lib.semantic_parent = fn
    return fn


def class_name_accessor(usr, name, parent=None, line=1):
    lit = string_lit(name, line)
    ret = FakeCursor(CursorKind.RETURN_STMT, children=[lit], line=line)
    body = FakeCursor(CursorKind.COMPOUND_STMT, children=[ret], line=line)
    fn = FakeCursor(
        CursorKind.CXX_METHOD,
        "getClassName",
        type="const char *()",
        usr=usr,
        children=[body],
        tokens=[
            FakeToken(TokenKind.KEYWORD, "return", line),
            FakeToken(TokenKind.LITERAL, f'"{name}"', line),
        ],
        semantic_parent=parent,
        is_definition=True,
        line=line,
    )
    return fn
