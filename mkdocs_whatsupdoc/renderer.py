"""
Markdown renderer for extracted compounds.

Turns a compound of the registry into Markdown with an anchor, a heading,
its description, a table of nested compounds and one section per member
kind.  Links between compounds go through an optional ``link`` callable.
"""

from __future__ import annotations

import re

from .model import CompoundKind, MemberKind

_KIND_LABELS = {
    CompoundKind.UNKNOWN: "",
    CompoundKind.NAMESPACE: "Namespace",
    CompoundKind.TYPE: "Type",
    CompoundKind.GROUP: "Group",
    MemberKind.FUNCTION: "Function",
    MemberKind.CONSTANT: "Constant",
}

_KIND_ANCHOR_PREFIX = {
    CompoundKind.UNKNOWN: "sym",
    CompoundKind.NAMESPACE: "ns",
    CompoundKind.TYPE: "type",
    CompoundKind.GROUP: "group",
    MemberKind.FUNCTION: "func",
    MemberKind.CONSTANT: "const",
}

_SLUG_RE = re.compile(r"[^\w.-]+")
_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")


def anchor_id(kind, name):
    prefix = _KIND_ANCHOR_PREFIX.get(kind, "sym")
    return f"{prefix}-{_SLUG_RE.sub('-', name).strip('-')}"


class RenderConfig:
    def __init__(self, *, heading_level=2, members=True, show_location=True):
        self.heading_level = heading_level
        self.members = members
        self.show_location = show_location


def _heading(text, level):
    return f"{'#' * min(level, 6)} {text}"


def _ref(registry, cid, link):
    target = registry.get(cid)
    if target is None:
        return ""
    name = registry.full_name(target) or target.id
    url = link(target) if link else None
    return f"[`{name}`]({url})" if url else f"`{name}`"


def _arity(member):
    lo, hi = member.min_params, member.max_params
    if hi < 0:
        return f"{lo}+" if lo else "any"
    if lo == hi:
        return str(lo)
    return f"{lo}-{hi}"


def _cell(text):
    first = text.strip().split("\n", 1)[0] if text else ""
    return _UNESCAPED_PIPE_RE.sub(r"\\|", first)


def render_member(member, registry, cfg=None):
    if cfg is None:
        cfg = RenderConfig()
    parts = []
    full_name = registry.member_full_name(member)
    label = _KIND_LABELS[member.kind]
    htxt = f"`{member.name}()`" if member.kind is MemberKind.FUNCTION else f"`{member.name}`"
    if member.deprecated:
        htxt += " <small>deprecated</small>"

    parts.append(f'<a id="{anchor_id(member.kind, full_name)}"></a>')
    parts.append("")
    parts.append(_heading(f"{label}: {htxt}", cfg.heading_level))
    parts.append("")

    facts = []
    if member.kind is MemberKind.FUNCTION:
        facts.append(f"**Parameters:** {_arity(member)}")
    if member.native_ref:
        facts.append(f"**Native:** `{member.native_ref}`")
    if cfg.show_location and member.location:
        facts.append(f"**Defined at:** `{member.location.file}:{member.location.line}`")
    if facts:
        parts += ["<br>".join(facts), ""]

    if member.deprecated:
        parts += ['!!! warning "Deprecated"', "", f"    `{member.name}` is deprecated.", ""]
    if member.description:
        parts += [member.description, ""]
    return "\n".join(parts)


def _render_members(compound, registry, kind, title, cfg):
    members = [m for m in compound.members if m.kind is kind]
    if not members:
        return []
    parts = [_heading(title, cfg.heading_level + 1), ""]
    mcfg = RenderConfig(
        heading_level=cfg.heading_level + 2,
        members=cfg.members,
        show_location=cfg.show_location,
    )

    # ungrouped first, then one sub-heading per member group in first-seen order
    by_group = {}
    for m in members:
        by_group.setdefault(m.group_id, []).append(m)
    for group_id in sorted(by_group, key=lambda g: g != ""):
        if group_id:
            parts += [_heading(group_id, cfg.heading_level + 2), ""]
            mcfg.heading_level = cfg.heading_level + 3
        for m in by_group[group_id]:
            parts.append(render_member(m, registry, mcfg))
    return parts


def render_compound(compound, registry, cfg=None, link=None):
    if cfg is None:
        cfg = RenderConfig()

    full_name = registry.full_name(compound) or compound.id
    label = _KIND_LABELS.get(compound.kind, "")
    htxt = f"`{full_name}`" if compound.kind is not CompoundKind.GROUP else compound.name
    if label:
        htxt = f"{label}: {htxt}"

    parts = [f'<a id="{anchor_id(compound.kind, full_name)}"></a>', ""]
    parts += [_heading(htxt, cfg.heading_level), ""]

    facts = []
    if compound.base_id:
        base = _ref(registry, compound.base_id, link)
        if base:
            facts.append(f"**Base type:** {base}")
    if compound.parent_id and compound.kind is CompoundKind.GROUP:
        parent = _ref(registry, compound.parent_id, link)
        if parent:
            facts.append(f"**Part of:** {parent}")
    if compound.group_id:
        group = registry.get(compound.group_id)
        if group is not None:
            url = link(group) if link else None
            facts.append(f"**Group:** [{group.name}]({url})" if url else f"**Group:** {group.name}")
    if cfg.show_location and compound.location:
        facts.append(f"**Defined at:** `{compound.location.file}:{compound.location.line}`")
    if facts:
        parts += ["<br>".join(facts), ""]

    if compound.description:
        parts += [compound.description, ""]

    if compound.children:
        parts += [_heading("Nested", cfg.heading_level + 1), ""]
        parts += ["| Name | Kind | Description |", "|------|------|-------------|"]
        for ref in compound.children:
            target = registry.get(ref.target_id)
            kind = _KIND_LABELS.get(target.kind, "") if target is not None else ""
            desc = _cell(target.description) if target is not None else ""
            parts.append(f"| {_ref(registry, ref.target_id, link) or ref.name} | {kind} | {desc} |")
        parts.append("")

    if cfg.members:
        parts += _render_members(compound, registry, MemberKind.FUNCTION, "Functions", cfg)
        parts += _render_members(compound, registry, MemberKind.CONSTANT, "Constants", cfg)

    return "\n".join(parts)


_INDEX_SECTIONS = (
    (CompoundKind.NAMESPACE, "Namespaces"),
    (CompoundKind.TYPE, "Types"),
    (CompoundKind.GROUP, "Groups"),
)


def render_index(registry, cfg=None, link=None, *, title="API Reference"):
    if cfg is None:
        cfg = RenderConfig()
    compounds = registry.named_compounds()
    nmembers = sum(len(c.members) for c in compounds if c.kind is not CompoundKind.GROUP)
    lines = [_heading(title, max(1, cfg.heading_level - 1)), ""]
    lines += [f"{len(compounds)} documented compounds, {nmembers} members.", ""]

    for kind, heading in _INDEX_SECTIONS:
        entries = sorted(
            (c for c in compounds if c.kind is kind), key=lambda c: registry.full_name(c).lower()
        )
        if not entries:
            continue
        lines += [_heading(heading, cfg.heading_level), ""]
        lines += ["| Name | Members | Description |", "|------|---------|-------------|"]
        for c in entries:
            lines.append(
                f"| {_ref(registry, c.id, link)} | {len(c.members)} | {_cell(c.description)} |"
            )
        lines.append("")
    return "\n".join(lines)
