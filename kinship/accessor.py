from __future__ import annotations

from typing import NamedTuple, Optional

try:
    from .models import FamilySnapshot, FamilyUnit, Individual, Sex
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import FamilySnapshot, FamilyUnit, Individual, Sex


class Parents(NamedTuple):
    father: Optional[str] = None
    mother: Optional[str] = None


class GraphAccessor:
    """Read-only adjacency over a FamilySnapshot.

    Every lookup is total: a missing person or a dangling family reference
    yields an empty result, never an error.
    """

    def __init__(self, snapshot: FamilySnapshot) -> None:
        self.snapshot = snapshot

    def individual(self, person_id: str) -> Individual | None:
        return self.snapshot.individuals.get(person_id)

    def family(self, family_id: str | None) -> FamilyUnit | None:
        if not family_id:
            return None
        return self.snapshot.families.get(family_id)

    def sex_of(self, person_id: str) -> Sex:
        person = self.individual(person_id)
        return person.sex if person else Sex.UNKNOWN

    def parent_family(self, person_id: str) -> FamilyUnit | None:
        person = self.individual(person_id)
        if person is None:
            return None
        return self.family(person.family_as_child)

    def spouse_families(self, person_id: str) -> list[FamilyUnit]:
        person = self.individual(person_id)
        if person is None:
            return []
        out: list[FamilyUnit] = []
        for fid in person.family_as_spouse:
            fam = self.family(fid)
            if fam is not None:
                out.append(fam)
        return out

    @staticmethod
    def spouse_in(family: FamilyUnit, person_id: str) -> str | None:
        """Return the opposing parent slot of *family* as seen from *person_id*."""

        if family.husband == person_id:
            return family.wife or None
        if family.wife == person_id:
            return family.husband or None
        return None

    def parents_of(self, person_id: str) -> Parents:
        fam = self.parent_family(person_id)
        if fam is None:
            return Parents()
        return Parents(father=fam.husband or None, mother=fam.wife or None)

    def spouses_of(self, person_id: str) -> list[str]:
        out: list[str] = []
        for fam in self.spouse_families(person_id):
            sp = self.spouse_in(fam, person_id)
            if sp:
                out.append(sp)
        return out

    def children_of(self, person_id: str) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for fam in self.spouse_families(person_id):
            for cid in fam.children:
                if cid in seen:
                    continue
                seen.add(cid)
                out.append(cid)
        return out

    def siblings_of(self, person_id: str) -> list[str]:
        fam = self.parent_family(person_id)
        if fam is None:
            return []
        return [cid for cid in fam.children if cid != person_id]
