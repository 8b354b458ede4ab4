"""
Output records and the JSON writer.

Every named, canonical compound becomes one record.  Identities inside a
record are canonical, so a consumer never sees a tombstone id.
"""

from __future__ import annotations

import json
import logging
import os
import re

log = logging.getLogger("mkdocs.plugins.whatsupdoc")

_SEPARATOR_RE = re.compile(r"[@:./\\]")
_DROPPED_RE = re.compile(r"[*#$]")


def _kind(kind):
    return kind.name.lower()


def _location(loc):
    return {"file": loc.file, "line": loc.line, "column": loc.column}


def member_record(registry, member):
    return {
        "name": member.name,
        "fullName": registry.member_full_name(member),
        "kind": _kind(member.kind),
        "minParams": member.min_params,
        "maxParams": member.max_params,
        "location": _location(member.location),
        "description": member.description,
        "nativeRef": member.native_ref,
        "groupId": member.group_id,
        "deprecated": member.deprecated,
    }


def _child_record(registry, ref):
    target = registry.get(ref.target_id)
    return {
        "name": ref.name,
        "fullName": registry.full_name(target) if target is not None else ref.name,
        "id": target.id if target is not None else ref.target_id,
        "location": _location(ref.location),
    }


def compound_record(registry, compound):
    return {
        "id": compound.id,
        "name": compound.name,
        "fullName": registry.full_name(compound),
        "kind": _kind(compound.kind),
        "location": _location(compound.location),
        "parentId": registry.canonical_id(compound.parent_id),
        "groupId": registry.canonical_id(compound.group_id),
        "baseId": registry.canonical_id(compound.base_id),
        "description": compound.description,
        "children": [_child_record(registry, ref) for ref in compound.children],
        "members": [member_record(registry, m) for m in compound.members],
    }


def records(registry):
    return [compound_record(registry, c) for c in registry.named_compounds()]


def json_filename(cid):
    return _DROPPED_RE.sub("", _SEPARATOR_RE.sub("_", cid)) + ".json"


def write_json(registry, directory):
    """Write one file per compound plus ``index.json``; return the paths written."""
    os.makedirs(directory, exist_ok=True)
    written = []
    index = []
    for record in records(registry):
        fname = json_filename(record["id"])
        path = os.path.join(directory, fname)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)
        written.append(path)
        index.append(
            {
                "id": record["id"],
                "name": record["name"],
                "fullName": record["fullName"],
                "kind": record["kind"],
                "file": fname,
            }
        )
    path = os.path.join(directory, "index.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(index, f, indent=2)
    written.append(path)
    log.info("whatsupdoc: wrote %d compound(s) to %s", len(index), directory)
    return written
