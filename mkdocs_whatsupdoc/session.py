"""
Per-run session state and the comment/group state machine.

Comments found in a registration function are queued as tokens.  Before a
declaration is recorded, every token up to its line is drained: prose becomes
the declaration's description, group directives open and close doc-group
and member-group scopes, ``@deprecated`` flags the next member.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .comments import (
    BlockEnd,
    BlockStart,
    CodeBlockEnd,
    CodeBlockStart,
    CodeLine,
    CommentEnd,
    CommentQueue,
    DefGroup,
    Deprecated,
    InGroup,
    MemberGroup,
    TextLine,
)
from .model import CompoundKind, Diagnostic, DiagnosticKind, Location
from .registry import group_identity

log = logging.getLogger("mkdocs.plugins.whatsupdoc")


@dataclass
class RegistrationContext:
    id: str
    param_id: str = ""
    inherited_group: str = ""
    visited: bool = False


@dataclass
class Annotation:
    """What the comments in front of one declaration say about it."""

    text: str = ""
    group_id: str = ""
    member_group: str = ""
    deprecated: bool = False


class Session:
    def __init__(self, registry):
        self.registry = registry
        self.queue = CommentQueue()
        self.names = {}
        self.contexts = {}
        self.diagnostics = []
        self.current = None
        self.file = ""
        self._reset_scopes()

    def _reset_scopes(self):
        self.group_stack = []
        self.pending_group = ""
        self.loose_group = ""
        self.member_group = ""
        self.pending_member_group = ""
        self.deprecated = False
        self.capture = ""
        self._in_comment = False

    # ── diagnostics ──

    def report(self, kind, location, message):
        diag = Diagnostic(kind, location, message)
        self.diagnostics.append(diag)
        log.warning("whatsupdoc: %s", diag)
        return diag

    def location(self, line):
        return Location(self.file, line, 0)

    # ── registration contexts ──

    def context_for(self, fid):
        ctx = self.contexts.get(fid)
        if ctx is None:
            ctx = self.contexts[fid] = RegistrationContext(fid)
        return ctx

    def enter(self, fid, param_id, file=""):
        ctx = self.context_for(fid)
        ctx.param_id = param_id
        ctx.visited = True
        self.current = ctx
        self.file = file
        self.queue.clear()
        self._reset_scopes()
        return ctx

    def finish(self):
        """Drain what is left, force-close open scopes and forget them."""
        self.resolve_description(float("inf"))
        if self.group_stack or self.member_group:
            log.info(
                "whatsupdoc: %s: closing %d unterminated group scope(s)",
                self.file,
                len(self.group_stack) + (1 if self.member_group else 0),
            )
        self.queue.clear()
        self._reset_scopes()
        self.current = None

    # ── group state ──

    @property
    def active_group(self):
        if self.loose_group:
            return self.loose_group
        return self.group_stack[-1] if self.group_stack else ""

    def take_deprecated(self):
        flag = self.deprecated
        self.deprecated = False
        return flag

    def annotate(self, line):
        """Drain comments up to *line* and snapshot the state for one declaration."""
        note = self.drain(line)
        note.deprecated = self.take_deprecated()
        return note

    def drain(self, line):
        """Like :meth:`annotate`, but ``@deprecated`` stays for the next member."""
        note = Annotation(text=self.resolve_description(line))
        note.group_id = self.active_group
        note.member_group = self.member_group
        # @ingroup without a block and groups never opened apply to one declaration
        self.loose_group = ""
        self.pending_group = ""
        self.pending_member_group = ""
        return note

    def resolve_description(self, line):
        lines = []
        while True:
            tok = self.queue.peek()
            if tok is None or (tok.line > line and not self._in_comment):
                break
            self.queue.pop()
            self._in_comment = not isinstance(tok, CommentEnd)
            self._HANDLERS[type(tok)](self, tok, lines)
        return "\n".join(lines).strip("\n")

    def _emit(self, text, lines):
        if self.capture:
            group = self.registry.get(self.capture)
            if group is not None:
                group.description = f"{group.description}\n{text}" if group.description else text
                return
        lines.append(text)

    def _on_text(self, tok, lines):
        if self.capture and not tok.text.strip() and not self._group_description():
            return
        self._emit(tok.text, lines)

    def _group_description(self):
        group = self.registry.get(self.capture)
        return group.description if group is not None else ""

    def _on_code_start(self, tok, lines):
        self._emit(f"```{tok.lang}", lines)

    def _on_code_line(self, tok, lines):
        self._emit(tok.text, lines)

    def _on_code_end(self, tok, lines):
        self._emit("```", lines)

    def _on_deprecated(self, tok, lines):
        self.deprecated = True
        if tok.note:
            self._emit(f"**Deprecated:** {tok.note}", lines)

    def _on_def_group(self, tok, lines):
        gid = group_identity(tok.group_id)
        group = self.registry.get_or_create(gid, CompoundKind.GROUP, self.location(tok.line))
        group.kind = CompoundKind.GROUP
        if not group.name:
            group.name = tok.title or tok.group_id
        enclosing = self.active_group
        if not group.parent_id and enclosing and enclosing != gid:
            group.parent_id = enclosing
        self.pending_group = gid
        self.pending_member_group = ""
        self.capture = gid

    def _on_in_group(self, tok, lines):
        gid = group_identity(tok.group_id)
        group = self.registry.get(gid)
        if group is None or group.kind is not CompoundKind.GROUP:
            self.report(
                DiagnosticKind.INVALID_GROUP,
                self.location(tok.line),
                f"unknown group '{tok.group_id}'",
            )
            return
        if self.capture:
            described = self.registry.get(self.capture)
            if described is not None and described.id != gid and not described.parent_id:
                described.parent_id = gid
            self.capture = ""
            return
        self.pending_group = gid
        self.loose_group = gid

    def _on_member_group(self, tok, lines):
        self.pending_member_group = tok.group_id
        self.capture = ""

    def _on_block_start(self, tok, lines):
        self.capture = ""
        if self.pending_member_group:
            self.member_group = self.pending_member_group
            self.pending_member_group = ""
        elif self.pending_group:
            self.group_stack.append(self.pending_group)
            if self.loose_group == self.pending_group:
                self.loose_group = ""
            self.pending_group = ""
        else:
            self.report(
                DiagnosticKind.INVALID_GROUP,
                self.location(tok.line),
                "'@{' without a preceding @defgroup, @ingroup or @name",
            )

    def _on_block_end(self, tok, lines):
        self.capture = ""
        if self.member_group:
            self.member_group = ""
        elif self.group_stack:
            self.group_stack.pop()
        else:
            self.report(
                DiagnosticKind.INVALID_GROUP, self.location(tok.line), "'@}' without an open group"
            )

    def _on_comment_end(self, tok, lines):
        self.capture = ""

    _HANDLERS = {
        TextLine: _on_text,
        CodeBlockStart: _on_code_start,
        CodeLine: _on_code_line,
        CodeBlockEnd: _on_code_end,
        Deprecated: _on_deprecated,
        DefGroup: _on_def_group,
        InGroup: _on_in_group,
        MemberGroup: _on_member_group,
        BlockStart: _on_block_start,
        BlockEnd: _on_block_end,
        CommentEnd: _on_comment_end,
    }
