"""
Registration-function visitor and declaration handlers.

For every ``init(EScript::Namespace * lib)`` definition the extractor queues
the doc comments of its body, then walks its ``declareFunction``,
``declareConstant`` and ``init`` calls in source order.  Each call resolves
the namespace/type it targets, takes the comments in front of it and records
a Member, a Reference or a merge of two compounds in the registry.
"""

from __future__ import annotations

import logging

from .config import BindingConfig
from .cursors import (
    CursorRole,
    arguments,
    classify,
    doc_comments,
    extract_int_literal,
    extract_string_literal,
    identity,
    in_system_header,
    location_of,
)
from .model import CompoundKind, DiagnosticKind, Member, MemberKind, Reference
from .registry import CompoundRegistry
from .resolver import Resolver, ScopeKind
from .session import Session

log = logging.getLogger("mkdocs.plugins.whatsupdoc")

_COMPOUND_KINDS = {
    ScopeKind.NAMESPACE: CompoundKind.NAMESPACE,
    ScopeKind.TYPE: CompoundKind.TYPE,
}


class Extractor:
    def __init__(self, binding=None, registry=None):
        self.binding = binding or BindingConfig()
        self.registry = registry if registry is not None else CompoundRegistry()
        self.resolver = Resolver(self.binding)
        self.session = Session(self.registry)
        self._call_handlers = {
            self.binding.declare_function: self.handle_declare_function,
            self.binding.declare_constant: self.handle_declare_constant,
            self.binding.init_function: self.handle_init_call,
        }

    @property
    def diagnostics(self):
        return self.session.diagnostics

    # ── translation units ──

    def visit_translation_unit(self, root):
        """Collect class names, then visit every registration function in *root*."""
        functions = []
        self._scan(root, functions)
        visited = 0
        for fn in functions:
            if self.visit_registration_function(fn):
                visited += 1
        return visited

    def _scan(self, cursor, functions):
        for child in cursor.get_children():
            if in_system_header(child):
                continue
            role = classify(child)
            if role is CursorRole.SCOPE:
                self._scan(child, functions)
            elif role is CursorRole.FUNCTION and child.is_definition():
                if child.spelling == self.binding.class_name_accessor:
                    self._record_class_name(child)
                elif self.is_registration_function(child):
                    functions.append(child)

    def _record_class_name(self, fn):
        name = extract_string_literal(fn)
        fid = identity(fn)
        if name and fid:
            self.session.names[fid] = name

    def is_registration_function(self, fn):
        if fn.spelling != self.binding.init_function:
            return False
        params = arguments(fn)
        return len(params) == 1 and self.resolver.classify(params[0]) is ScopeKind.NAMESPACE

    # ── registration functions ──

    def visit_registration_function(self, fn):
        fid = identity(fn)
        if not fid:
            return False
        ctx = self.session.context_for(fid)
        if ctx.visited:
            log.debug("whatsupdoc: %s already visited", fid)
            return False

        params = arguments(fn)
        param = params[0] if params else None
        pid = identity(param)
        loc = location_of(fn)
        self.session.enter(fid, pid, loc.file)
        kind = _COMPOUND_KINDS.get(self.resolver.classify(param), CompoundKind.NAMESPACE)
        self.registry.get_or_create(fid, kind, loc)
        if pid:
            self.registry.alias(pid, fid)

        for text, where in doc_comments(fn):
            self.session.queue.push_comment(text, where)

        log.debug("whatsupdoc: %s: visiting %s", loc, fid)
        for call in self._call_sites(fn):
            self._call_handlers[call.spelling](call)
        self.session.finish()
        return True

    def _call_sites(self, cursor):
        for child in cursor.get_children():
            role = classify(child)
            if role is CursorRole.FUNCTION:
                continue
            if role is CursorRole.CALL:
                if child.spelling in self._call_handlers:
                    yield child
                continue
            yield from self._call_sites(child)

    # ── helpers ──

    def _resolve_owner(self, arg, loc, what):
        decl = self.resolver.resolve_expression(arg)
        kind = self.resolver.classify(decl)
        if decl is None or kind is ScopeKind.NEITHER or not identity(decl):
            self.session.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                loc,
                f"invalid {what}: owner is not a namespace or type",
            )
            return None, kind
        return decl, kind

    def _compound_for(self, decl, kind):
        compound = self.registry.get_or_create(
            identity(decl), _COMPOUND_KINDS[kind], location_of(decl)
        )
        if compound.kind is CompoundKind.TYPE and not compound.base_id:
            base = self.resolver.find_constructed_base(decl)
            base_id = identity(base)
            if base_id and self.registry.canonical_id(base_id) != compound.id:
                self.registry.get_or_create(base_id, CompoundKind.TYPE, location_of(base))
                compound.base_id = base_id
        return compound

    def _effective_group(self, owner, explicit):
        if explicit:
            return explicit
        ctx = self.session.current
        if ctx is not None and ctx.inherited_group:
            if self.registry.canonical_id(ctx.id) == owner.id:
                return ctx.inherited_group
        return ""

    def _attach_to_group(self, owner, member, note):
        group_id = self._effective_group(owner, note.group_id)
        group = self.registry.get(group_id)
        if group is None or group is owner:
            return
        group.members.append(member)
        if note.group_id and not owner.group_id:
            owner.group_id = group.id

    def _constant_name(self, arg, loc):
        for node in arg.walk_preorder():
            if classify(node) is CursorRole.NAME_REF:
                name = self.session.names.get(identity(node.referenced))
                if name:
                    return name
                break
        literal = extract_string_literal(arg)
        if literal:
            return literal
        self.session.report(
            DiagnosticKind.AMBIGUOUS_NAME,
            loc,
            "constant name is neither a string literal nor a known class name",
        )
        return None

    # ── call handlers ──

    def handle_declare_function(self, call):
        loc = location_of(call)
        args = arguments(call)
        if len(args) not in (3, 5):
            self.session.report(
                DiagnosticKind.MALFORMED_CALL,
                loc,
                f"invalid function declaration: expected 3 or 5 arguments, got {len(args)}",
            )
            return None
        decl, kind = self._resolve_owner(args[0], loc, "function declaration")
        if decl is None:
            return None
        name = extract_string_literal(args[1])
        if not name:
            self.session.report(
                DiagnosticKind.MALFORMED_CALL, loc, "function name is not a string literal"
            )
            return None
        if len(args) == 5:
            min_params = extract_int_literal(args[2])
            max_params = extract_int_literal(args[3], default=-1)
        else:
            min_params, max_params = 0, -1

        native_ref = self.resolver.native_ref(args[-1], name)
        owner = self._compound_for(decl, kind)
        note = self.session.annotate(loc.line)
        member = Member(
            name=name,
            kind=MemberKind.FUNCTION,
            owner_id=owner.id,
            location=loc,
            description=note.text,
            native_ref=native_ref,
            group_id=note.member_group,
            min_params=min_params,
            max_params=max_params,
            deprecated=note.deprecated,
        )
        owner.members.append(member)
        self._attach_to_group(owner, member, note)
        return member

    def handle_declare_constant(self, call):
        loc = location_of(call)
        args = arguments(call)
        if len(args) != 3:
            self.session.report(
                DiagnosticKind.MALFORMED_CALL,
                loc,
                f"invalid constant declaration: expected 3 arguments, got {len(args)}",
            )
            return None
        decl, kind = self._resolve_owner(args[0], loc, "constant declaration")
        if decl is None:
            return None
        name = self._constant_name(args[1], loc)
        if name is None:
            return None

        value_decl = self.resolver.resolve_expression(args[2])
        value_kind = self.resolver.classify(value_decl)
        owner = self._compound_for(decl, kind)
        note = self.session.annotate(loc.line)
        if value_decl is not None and value_kind is not ScopeKind.NEITHER and identity(value_decl):
            return self._add_reference(owner, name, value_decl, value_kind, loc, note)

        member = Member(
            name=name,
            kind=MemberKind.CONSTANT,
            owner_id=owner.id,
            location=loc,
            description=note.text,
            native_ref=self.resolver.native_ref(args[2], name),
            group_id=note.member_group,
            deprecated=note.deprecated,
        )
        owner.members.append(member)
        self._attach_to_group(owner, member, note)
        return member

    def _add_reference(self, owner, name, value_decl, value_kind, loc, note):
        value = self._compound_for(value_decl, value_kind)
        if value is owner:
            log.debug("whatsupdoc: %s: '%s' refers to its own owner, skipped", loc, name)
            return None
        if not value.name:
            value.name = name
        if not value.parent_id:
            value.parent_id = owner.id
        group_id = self._effective_group(owner, note.group_id)
        if group_id and not value.group_id:
            value.group_id = group_id
        if note.text and not value.description:
            value.description = note.text
        ref = Reference(name=name, owner_id=owner.id, target_id=value.id, location=loc)
        owner.children.append(ref)
        return ref

    def handle_init_call(self, call):
        loc = location_of(call)
        args = arguments(call)
        if len(args) != 1:
            self.session.report(
                DiagnosticKind.MALFORMED_CALL,
                loc,
                f"invalid init call: expected 1 argument, got {len(args)}",
            )
            return None
        decl, kind = self._resolve_owner(args[0], loc, "init call")
        if decl is None:
            return None
        if kind is not ScopeKind.NAMESPACE:
            self.session.report(
                DiagnosticKind.UNRESOLVED_REFERENCE, loc, "invalid init call: owner is not a namespace"
            )
            return None
        callee = call.referenced
        callee_id = identity(callee)
        if not callee_id:
            self.session.report(
                DiagnosticKind.UNRESOLVED_REFERENCE, loc, "cannot resolve the called init function"
            )
            return None

        owner = self._compound_for(decl, kind)
        target = self.registry.get_or_create(callee_id, CompoundKind.UNKNOWN, location_of(callee))
        note = self.session.drain(loc.line)
        group_id = self._effective_group(owner, note.group_id)
        if group_id:
            ctx = self.session.context_for(callee_id)
            if not ctx.inherited_group:
                ctx.inherited_group = group_id
            for ref in target.children:
                child = self.registry.get(ref.target_id)
                if child is not None and not child.group_id:
                    child.group_id = group_id
        return self.registry.merge(owner.id, target.id)
