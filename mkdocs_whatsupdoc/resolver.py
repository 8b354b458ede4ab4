"""
Reference resolution for binding call arguments.

Given the expression passed as owner or value of a registration call, find
the declaration that stands for the namespace/type object behind it, so that
``lib``, ``*lib``, ``typeObject`` and ``Foo::getTypeObject()`` all land on
one identity no matter how the value travelled.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from .cursors import (
    DECLARATION_ROLES,
    CursorRole,
    arguments,
    children,
    classify,
    fully_qualified_name,
    is_constructor,
    is_local_variable,
    type_spelling,
)

log = logging.getLogger("mkdocs.plugins.whatsupdoc")

_MAX_DEPTH = 32


class ScopeKind(Enum):
    NEITHER = auto()
    NAMESPACE = auto()
    TYPE = auto()


class Resolver:
    def __init__(self, binding):
        self.binding = binding

    # ── classification ──

    def scope_kind_of(self, spelling):
        if self.binding.namespace_marker in spelling:
            return ScopeKind.NAMESPACE
        if self.binding.type_marker in spelling:
            return ScopeKind.TYPE
        return ScopeKind.NEITHER

    def classify(self, cursor):
        if cursor is None:
            return ScopeKind.NEITHER
        return self.scope_kind_of(type_spelling(cursor))

    def is_value_wrapper(self, cursor):
        spelling = type_spelling(cursor)
        return any(w in spelling for w in self.binding.value_wrappers)

    def _is_wrapper(self, cursor):
        return classify(cursor) is CursorRole.WRAPPER or self.is_value_wrapper(cursor)

    # ── resolution ──

    def resolve_expression(self, cursor, _depth=0):
        """Return the declaration cursor *cursor* denotes, or None."""
        if cursor is None or _depth > _MAX_DEPTH:
            return None
        if self._is_wrapper(cursor):
            for child in children(cursor):
                found = self.resolve_expression(child, _depth + 1)
                if found is not None:
                    return found
            return None

        kind = self.classify(cursor)
        if kind is ScopeKind.NEITHER:
            return None
        role = classify(cursor)
        if role is CursorRole.CALL:
            return self._resolve_call(cursor, kind, _depth)
        if role is CursorRole.NAME_REF:
            return self._resolve_declaration(cursor.referenced, _depth)
        if role in DECLARATION_ROLES:
            return self._resolve_declaration(cursor, _depth)
        return None

    def _resolve_call(self, call, kind, depth):
        for node in call.walk_preorder():
            if node is call or classify(node) is not CursorRole.NAME_REF:
                continue
            decl = node.referenced
            if decl is not None and self.classify(decl) is kind:
                return self._resolve_declaration(decl, depth + 1)
        log.debug("whatsupdoc: no %s reference below call %s", kind.name.lower(), call.spelling)
        return None

    def _resolve_declaration(self, decl, depth):
        if decl is None or depth > _MAX_DEPTH:
            return None
        if is_local_variable(decl):
            return self._resolve_variable(decl, depth)
        if self.classify(decl) is ScopeKind.NEITHER:
            return None
        return decl

    def _resolve_variable(self, var, depth):
        initializer = [c for c in children(var) if classify(c) is not CursorRole.OTHER]
        if self.find_construction(var) is not None:
            return var
        for expr in initializer:
            found = self.resolve_expression(expr, depth + 1)
            if found is not None and found != var:
                return found
        if self.classify(var) is ScopeKind.NEITHER:
            return None
        return var

    # ── auxiliary lookups ──

    def find_construction(self, cursor):
        """First ``new T(...)``/constructor call of a namespace or type below *cursor*."""
        for node in cursor.walk_preorder():
            role = classify(node)
            if role is CursorRole.CONSTRUCT and self.classify(node) is not ScopeKind.NEITHER:
                return node
            if role is CursorRole.CALL and self.classify(node) is not ScopeKind.NEITHER:
                ref = node.referenced
                if ref is not None and is_constructor(ref):
                    return node
        return None

    def find_named_descendant(self, cursor, name):
        """Declaration of the first member/variable reference spelled *name*."""
        if cursor is None or not name:
            return None
        for node in cursor.walk_preorder():
            if classify(node) is CursorRole.NAME_REF and node.spelling == name:
                if node.referenced is not None:
                    return node.referenced
        return None

    def native_ref(self, cursor, name):
        decl = self.find_named_descendant(cursor, name)
        return fully_qualified_name(decl) if decl is not None else ""

    def find_constructed_base(self, decl):
        """Declaration of the supertype a binding type is constructed from.

        ``static Type * typeObject = new Type(Base::getTypeObject());`` yields
        ``Base::getTypeObject``.  For type-returning functions the lookup runs
        over the function's definition.
        """
        if decl is None:
            return None
        scope = decl
        if classify(decl) is CursorRole.FUNCTION:
            scope = decl.get_definition()
            if scope is None:
                return None
        construct = self.find_construction(scope)
        if construct is None:
            return None
        if classify(construct) is CursorRole.CALL:
            args = arguments(construct)
        else:
            args = children(construct)
        for arg in args:
            base = self.resolve_expression(arg)
            if base is not None and self.classify(base) is ScopeKind.TYPE:
                return base
        return None
