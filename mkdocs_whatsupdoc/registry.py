"""
Identity-keyed store of compounds.

Records are created lazily and never removed.  Merging two records turns
one into a tombstone that redirects to the other, so every identity handed
out earlier stays a valid key for the whole run.
"""

from __future__ import annotations

from .model import Compound, CompoundKind, Location

GROUP_PREFIX = "group:"

_FIRST_WINS_FIELDS = ("name", "description", "parent_id", "group_id", "base_id")


def group_identity(group_id):
    return f"{GROUP_PREFIX}{group_id}"


class CompoundRegistry:
    def __init__(self):
        self._records = {}

    def __len__(self):
        return sum(1 for _ in self.compounds())

    def _resolve(self, cid):
        record = self._records.get(cid)
        if record is None or not record.redirect_to:
            return record
        chain = []
        seen = {cid}
        while record.redirect_to:
            chain.append(record)
            target = record.redirect_to
            if target in seen:
                raise RuntimeError(f"redirect cycle through {target!r}")
            seen.add(target)
            record = self._records[target]
        # Path compression: every hop now points at the survivor directly.
        for hop in chain:
            hop.redirect_to = record.id
        return record

    def get(self, cid):
        """Canonical record for *cid*, or None if it was never seen."""
        if not cid:
            return None
        return self._resolve(cid)

    def canonical(self, cid):
        record = self.get(cid)
        if record is None:
            raise KeyError(cid)
        return record

    def canonical_id(self, cid):
        record = self.get(cid)
        return record.id if record is not None else ""

    def get_or_create(self, cid, kind=CompoundKind.UNKNOWN, location=None):
        record = self.get(cid)
        if record is None:
            record = Compound(id=cid, kind=kind, location=location or Location())
            self._records[cid] = record
            return record
        if record.kind is CompoundKind.UNKNOWN and kind is not CompoundKind.UNKNOWN:
            record.kind = kind
        if not record.location and location:
            record.location = location
        return record

    def alias(self, alias_id, target_id):
        """Make *alias_id* resolve to the record of *target_id*."""
        target = self.get_or_create(target_id)
        if alias_id in self._records:
            return self.merge(target.id, alias_id)
        self._records[alias_id] = Compound(id=alias_id, redirect_to=target.id)
        return target

    def merge(self, a_id, b_id):
        """Fold the record of *b_id* into the record of *a_id*.

        Fields the survivor lacks are taken from the other record, members
        and children are appended and compounds parented to the other record
        move to the survivor.  Merging already-merged identities is a no-op.
        """
        a = self.canonical(a_id)
        b = self.canonical(b_id)
        if a is b:
            return a

        for name in _FIRST_WINS_FIELDS:
            if not getattr(a, name):
                setattr(a, name, getattr(b, name))
        if a.kind is CompoundKind.UNKNOWN:
            a.kind = b.kind
        if not a.location:
            a.location = b.location

        for member in b.members:
            member.owner_id = a.id
        for ref in b.children:
            ref.owner_id = a.id
        a.members.extend(b.members)
        a.children.extend(b.children)
        b.members = []
        b.children = []

        for record in self._records.values():
            if record.parent_id == b.id:
                record.parent_id = a.id
        b.redirect_to = a.id
        if a.parent_id and self.canonical_id(a.parent_id) == a.id:
            a.parent_id = ""
        return a

    def compounds(self):
        """All canonical records, in creation order."""
        for record in self._records.values():
            if not record.redirect_to:
                yield record

    def named_compounds(self):
        return [c for c in self.compounds() if c.name]

    def full_name(self, compound):
        parts = []
        seen = set()
        node = compound
        while node is not None and node.id not in seen:
            seen.add(node.id)
            if node.name:
                parts.append(node.name)
            node = self.get(node.parent_id)
        return ".".join(reversed(parts))

    def member_full_name(self, member):
        owner = self.get(member.owner_id)
        prefix = self.full_name(owner) if owner is not None else ""
        return f"{prefix}.{member.name}" if prefix else member.name
