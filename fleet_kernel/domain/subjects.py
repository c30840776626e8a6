"""
Subject references -- what an attribute can be assigned to.

An assignment targets exactly one subject: a shift or a cab.  SubjectRef is
a tagged reference (kind + id), so "both set" or "neither set" cannot be
expressed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class SubjectKind(str, Enum):
    SHIFT = "SHIFT"
    CAB = "CAB"


@dataclass(frozen=True)
class SubjectRef:
    """Tagged reference to a shift or a cab."""

    kind: SubjectKind
    id: UUID

    @classmethod
    def shift(cls, shift_id: UUID) -> SubjectRef:
        return cls(SubjectKind.SHIFT, shift_id)

    @classmethod
    def cab(cls, cab_id: UUID) -> SubjectRef:
        return cls(SubjectKind.CAB, cab_id)

    @property
    def is_shift(self) -> bool:
        return self.kind is SubjectKind.SHIFT

    def __str__(self) -> str:
        return f"{self.kind.value.lower()}:{self.id}"
