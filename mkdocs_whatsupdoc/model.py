"""
Records shared by the extractor, the registry and the output stage.

Compounds refer to each other only by identity (``parent_id``, ``group_id``,
``base_id``, ``redirect_to``); the registry resolves those at read time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


@dataclass(frozen=True)
class Location:
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self):
        return f"{self.file}:{self.line}:{self.column}"

    def __bool__(self):
        return bool(self.file or self.line)


class CompoundKind(Enum):
    UNKNOWN = auto()
    NAMESPACE = auto()
    TYPE = auto()
    GROUP = auto()


class MemberKind(Enum):
    FUNCTION = auto()
    CONSTANT = auto()


class DiagnosticKind(Enum):
    MALFORMED_CALL = auto()
    UNRESOLVED_REFERENCE = auto()
    INVALID_GROUP = auto()
    AMBIGUOUS_NAME = auto()


@dataclass
class Member:
    name: str
    kind: MemberKind
    owner_id: str
    location: Location = field(default_factory=Location)
    description: str = ""
    native_ref: str = ""
    group_id: str = ""
    min_params: int = 0
    max_params: int = 0
    deprecated: bool = False


@dataclass
class Reference:
    name: str
    owner_id: str
    target_id: str
    location: Location = field(default_factory=Location)


@dataclass
class Compound:
    id: str
    kind: CompoundKind = CompoundKind.UNKNOWN
    name: str = ""
    description: str = ""
    location: Location = field(default_factory=Location)
    parent_id: str = ""
    group_id: str = ""
    base_id: str = ""
    redirect_to: str = ""
    members: list[Member] = field(default_factory=list)
    children: list[Reference] = field(default_factory=list)

    @property
    def is_tombstone(self):
        return bool(self.redirect_to)


@dataclass
class Diagnostic:
    kind: DiagnosticKind
    location: Location
    message: str

    def __str__(self):
        return f"{self.location}: {self.message}"
