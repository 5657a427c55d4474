"""Kinship classification between two people of a FamilySnapshot.

The calculator answers, in a fixed precedence order: identity, direct spouse,
blood relation through the nearest common ancestor, in-law, and finally a
spouse's blood relation ("Spouse's Brother"). When none applies the result is
``Unknown`` and callers may fall back to the shortest connecting path
(see ``kinship.pathfind``).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, ClassVar, NamedTuple, Optional, Union

try:
    from . import labels
    from .accessor import GraphAccessor
    from .models import FamilySnapshot
    from .pathfind import PathFinder, RelationshipPath
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    import labels
    from accessor import GraphAccessor
    from models import FamilySnapshot
    from pathfind import PathFinder, RelationshipPath

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Relation kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelfRelation:
    kind: ClassVar[str] = "self"

    def parameters(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Spouse:
    kind: ClassVar[str] = "spouse"

    def parameters(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Ancestor:
    generations: int
    kind: ClassVar[str] = "ancestor"

    def parameters(self) -> dict[str, Any]:
        return {"generations": self.generations}


@dataclass(frozen=True)
class Descendant:
    generations: int
    kind: ClassVar[str] = "descendant"

    def parameters(self) -> dict[str, Any]:
        return {"generations": self.generations}


@dataclass(frozen=True)
class Sibling:
    half: bool
    kind: ClassVar[str] = "sibling"

    def parameters(self) -> dict[str, Any]:
        return {"half": self.half}


@dataclass(frozen=True)
class UncleAunt:
    great: int
    kind: ClassVar[str] = "uncle_aunt"

    def parameters(self) -> dict[str, Any]:
        return {"great": self.great}


@dataclass(frozen=True)
class NephewNiece:
    great: int
    kind: ClassVar[str] = "nephew_niece"

    def parameters(self) -> dict[str, Any]:
        return {"great": self.great}


@dataclass(frozen=True)
class Cousin:
    degree: int
    removed: int
    kind: ClassVar[str] = "cousin"

    def parameters(self) -> dict[str, Any]:
        return {"degree": self.degree, "removed": self.removed}


@dataclass(frozen=True)
class InLaw:
    """A relation mediated by a marriage.

    ``base`` is the relation the in-law derives from: parent, sibling or child
    for the direct in-law checks, or the spouse's own relation to the target
    when ``via_spouse`` is set.
    """

    base: "Relation"
    via_spouse: bool = False
    kind: ClassVar[str] = "in_law"

    def parameters(self) -> dict[str, Any]:
        return {
            "base": {"kind": self.base.kind, **self.base.parameters()},
            "via_spouse": self.via_spouse,
        }


@dataclass(frozen=True)
class Unknown:
    kind: ClassVar[str] = "unknown"

    def parameters(self) -> dict[str, Any]:
        return {}


Relation = Union[
    SelfRelation,
    Spouse,
    Ancestor,
    Descendant,
    Sibling,
    UncleAunt,
    NephewNiece,
    Cousin,
    InLaw,
    Unknown,
]


@dataclass(frozen=True)
class RelationshipResult:
    from_id: str
    to_id: str
    relation: Relation
    label: str

    @property
    def kind(self) -> str:
        return self.relation.kind

    @property
    def is_unknown(self) -> bool:
        return isinstance(self.relation, Unknown)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "kind": self.kind,
            "parameters": self.relation.parameters(),
            "label": self.label,
        }


class CommonAncestor(NamedTuple):
    ancestor_id: str
    from_depth: int
    to_depth: int


UNKNOWN_RELATION_LABEL = "Unknown Relation"
DISTANT_RELATIVE_LABEL = "Distant Relative"

# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class RelationshipCalculator:
    def __init__(self, snapshot: FamilySnapshot) -> None:
        self.graph = GraphAccessor(snapshot)
        self.paths = PathFinder(self.graph)

    # -- public API ---------------------------------------------------------

    def find_relationship(self, from_id: str, to_id: str) -> RelationshipResult:
        """Return the named relation of *to_id* as seen from *from_id*.

        Total over any pair of ids: ids missing from the snapshot simply lead
        to an ``Unknown`` result.
        """

        return self._resolve(from_id, to_id, spouse_fallback=True)

    def find_path(
        self,
        from_id: str,
        to_id: str,
        *,
        max_hops: int | None = None,
        max_nodes: int | None = None,
    ) -> list[str]:
        return self.paths.find_path(from_id, to_id, max_hops=max_hops, max_nodes=max_nodes)

    def relationship_path(
        self,
        from_id: str,
        to_id: str,
        *,
        max_hops: int | None = None,
        max_nodes: int | None = None,
    ) -> RelationshipPath:
        return self.paths.relationship_path(from_id, to_id, max_hops=max_hops, max_nodes=max_nodes)

    def describe(self, from_id: str, to_id: str) -> str:
        """Named label when there is one, else the possessive chain along the shortest path."""

        result = self.find_relationship(from_id, to_id)
        if not result.is_unknown:
            return result.label

        chain = self.paths.relationship_path(from_id, to_id).label
        return chain or result.label

    def all_relationships(self, person_id: str) -> list[RelationshipResult]:
        out: list[RelationshipResult] = []
        for other_id in self.graph.snapshot.individuals:
            if other_id == person_id:
                continue
            result = self.find_relationship(person_id, other_id)
            if not result.is_unknown:
                out.append(result)
        return out

    # -- resolution ---------------------------------------------------------

    def _resolve(self, from_id: str, to_id: str, *, spouse_fallback: bool) -> RelationshipResult:
        if from_id == to_id:
            return RelationshipResult(from_id, to_id, SelfRelation(), "Self")

        spouse = self._check_spouse(from_id, to_id)
        if spouse is not None:
            return spouse

        common = self._nearest_common_ancestor(
            self._ancestor_depths(from_id),
            self._ancestor_depths(to_id),
        )
        if common is not None:
            return self._blood_relationship(from_id, to_id, common)

        in_law = self._check_in_law(from_id, to_id)
        if in_law is not None:
            return in_law

        # Never re-entered from inside itself: the nested lookups below run
        # with spouse_fallback=False.
        if spouse_fallback:
            via_spouse = self._check_spouse_blood_relatives(from_id, to_id)
            if via_spouse is not None:
                return via_spouse

        return RelationshipResult(from_id, to_id, Unknown(), UNKNOWN_RELATION_LABEL)

    def _check_spouse(self, from_id: str, to_id: str) -> RelationshipResult | None:
        if to_id not in self.graph.spouses_of(from_id):
            return None
        return RelationshipResult(from_id, to_id, Spouse(), labels.spouse_label(self.graph.sex_of(to_id)))

    def _ancestor_depths(self, person_id: str) -> dict[str, int]:
        """Breadth-first walk up through parents: id -> minimal generation depth.

        Already-visited ids are skipped, so pedigree collapse and cyclic data
        both terminate.
        """

        depths: dict[str, int] = {}
        queue: deque[tuple[str, int]] = deque([(person_id, 0)])
        while queue:
            pid, depth = queue.popleft()
            if pid in depths:
                continue
            depths[pid] = depth

            father, mother = self.graph.parents_of(pid)
            if father:
                queue.append((father, depth + 1))
            if mother:
                queue.append((mother, depth + 1))
        return depths

    @staticmethod
    def _nearest_common_ancestor(
        from_depths: dict[str, int],
        to_depths: dict[str, int],
    ) -> Optional[CommonAncestor]:
        # Ties on total distance go to the smallest ancestor id.
        best: Optional[CommonAncestor] = None
        for aid, from_depth in from_depths.items():
            to_depth = to_depths.get(aid)
            if to_depth is None:
                continue
            total = from_depth + to_depth
            if best is None:
                best = CommonAncestor(aid, from_depth, to_depth)
                continue
            best_total = best.from_depth + best.to_depth
            if total < best_total or (total == best_total and aid < best.ancestor_id):
                best = CommonAncestor(aid, from_depth, to_depth)
        return best

    def _blood_relationship(self, from_id: str, to_id: str, common: CommonAncestor) -> RelationshipResult:
        fd, td = common.from_depth, common.to_depth
        sex = self.graph.sex_of(to_id)

        def result(relation: Relation, label: str) -> RelationshipResult:
            return RelationshipResult(from_id, to_id, relation, label)

        if td == 0 and fd > 0:
            return result(Ancestor(fd), labels.ancestor_label(fd, sex))

        if fd == 0 and td > 0:
            return result(Descendant(td), labels.descendant_label(td, sex))

        if fd == 1 and td == 1:
            half = self._is_half_sibling(from_id, to_id)
            return result(Sibling(half), labels.sibling_label(sex, half=half))

        if fd >= 2 and td == 1:
            great = fd - 2
            return result(UncleAunt(great), labels.uncle_aunt_label(great, sex))

        if fd == 1 and td >= 2:
            great = td - 2
            return result(NephewNiece(great), labels.nephew_niece_label(great, sex))

        if fd >= 2 and td >= 2:
            degree = min(fd, td) - 1
            removed = abs(fd - td)
            return result(Cousin(degree, removed), labels.cousin_label(degree, removed))

        log.debug("unclassified blood relation %s -> %s via %s (%d, %d)", from_id, to_id, *common)
        return result(Unknown(), DISTANT_RELATIVE_LABEL)

    def _is_half_sibling(self, a: str, b: str) -> bool:
        pa = self.graph.individual(a)
        pb = self.graph.individual(b)
        if pa is None or pb is None or not pa.family_as_child or not pb.family_as_child:
            return False
        if pa.family_as_child != pb.family_as_child:
            return True

        fam = self.graph.family(pa.family_as_child)
        return fam is None or not fam.has_both_parents

    def _check_in_law(self, from_id: str, to_id: str) -> RelationshipResult | None:
        if self.graph.individual(from_id) is None:
            return None
        sex = self.graph.sex_of(to_id)

        # The spouse-side checks only apply to people with a record of their own.
        spouse_ids = self.graph.spouses_of(from_id) if self.graph.individual(to_id) is not None else []
        for spouse_id in spouse_ids:
            # Spouse's parent.
            if to_id in self.graph.parents_of(spouse_id):
                return RelationshipResult(
                    from_id, to_id, InLaw(Ancestor(1)), labels.parent_in_law_label(sex)
                )
            # Spouse's sibling.
            if to_id in self.graph.siblings_of(spouse_id):
                return RelationshipResult(
                    from_id, to_id, InLaw(Sibling(False)), labels.sibling_in_law_label(sex)
                )

        # Sibling's spouse.
        for sibling_id in self.graph.siblings_of(from_id):
            if to_id in self.graph.spouses_of(sibling_id):
                return RelationshipResult(
                    from_id, to_id, InLaw(Sibling(False)), labels.sibling_in_law_label(sex)
                )

        # Child's spouse.
        for child_id in self.graph.children_of(from_id):
            if to_id in self.graph.spouses_of(child_id):
                return RelationshipResult(
                    from_id, to_id, InLaw(Descendant(1)), labels.child_in_law_label(sex)
                )

        return None

    def _check_spouse_blood_relatives(self, from_id: str, to_id: str) -> RelationshipResult | None:
        for spouse_id in self.graph.spouses_of(from_id):
            spouse_rel = self._resolve(spouse_id, to_id, spouse_fallback=False)
            if isinstance(spouse_rel.relation, (Unknown, SelfRelation)):
                continue
            return RelationshipResult(
                from_id,
                to_id,
                InLaw(spouse_rel.relation, via_spouse=True),
                f"Spouse's {spouse_rel.label}",
            )
        return None


def build_calculator(snapshot: FamilySnapshot) -> RelationshipCalculator:
    return RelationshipCalculator(snapshot)
