from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"
    UNKNOWN = "U"

    @classmethod
    def parse(cls, value: Any) -> "Sex":
        """Accept the Gramps/GEDCOM single letters as well as spelled-out values."""

        s = str(value or "").strip().upper()
        if s in ("M", "MALE"):
            return cls.MALE
        if s in ("F", "FEMALE"):
            return cls.FEMALE
        return cls.UNKNOWN


@dataclass(frozen=True)
class Individual:
    id: str
    sex: Sex = Sex.UNKNOWN
    family_as_child: Optional[str] = None
    family_as_spouse: tuple[str, ...] = ()
    display_name: Optional[str] = None


@dataclass(frozen=True)
class FamilyUnit:
    id: str
    husband: Optional[str] = None
    wife: Optional[str] = None
    children: tuple[str, ...] = ()

    @property
    def has_both_parents(self) -> bool:
        return bool(self.husband) and bool(self.wife)


@dataclass(frozen=True)
class FamilySnapshot:
    """Immutable view of the family graph used for one or more queries.

    Cross references between records are plain ids; they are resolved through
    the two maps and may dangle.
    """

    individuals: Mapping[str, Individual] = field(default_factory=dict)
    families: Mapping[str, FamilyUnit] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "individuals", MappingProxyType(dict(self.individuals)))
        object.__setattr__(self, "families", MappingProxyType(dict(self.families)))
