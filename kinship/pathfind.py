from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

try:
    from . import labels
    from .accessor import GraphAccessor
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    import labels
    from accessor import GraphAccessor

log = logging.getLogger(__name__)


class StepRelation(str, Enum):
    PARENT = "parent"
    CHILD = "child"
    SIBLING = "sibling"
    SPOUSE = "spouse"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LATERAL = "lateral"


_DIRECTIONS = {
    StepRelation.PARENT: Direction.UP,
    StepRelation.CHILD: Direction.DOWN,
    StepRelation.SIBLING: Direction.LATERAL,
    StepRelation.SPOUSE: Direction.LATERAL,
}


@dataclass(frozen=True)
class PathStep:
    person_id: str
    relation: Optional[StepRelation]
    label: Optional[str]

    @property
    def direction(self) -> Optional[Direction]:
        if self.relation is None:
            return None
        return _DIRECTIONS[self.relation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_id": self.person_id,
            "relation": self.relation.value if self.relation else None,
            "direction": self.direction.value if self.direction else None,
            "label": self.label,
        }


@dataclass(frozen=True)
class RelationshipPath:
    """Shortest connection between two people, one step per hop.

    ``label`` is the possessive chain ("Father's Brother's Wife"); empty when
    the two people are not connected.
    """

    from_id: str
    to_id: str
    person_ids: list[str] = field(default_factory=list)
    steps: list[PathStep] = field(default_factory=list)
    label: str = ""

    @property
    def hops(self) -> int:
        return max(0, len(self.person_ids) - 1)

    @property
    def connected(self) -> bool:
        return bool(self.person_ids)


def chain_label(step_labels: list[Optional[str]]) -> str:
    # Hops without a single-step label are dropped from the chain.
    return "'s ".join(s for s in step_labels if s)


class PathFinder:
    def __init__(self, graph: GraphAccessor) -> None:
        self.graph = graph

    def neighbors(self, person_id: str) -> list[str]:
        """Undirected adjacency: parents, siblings, spouses, children."""

        out: list[str] = []
        father, mother = self.graph.parents_of(person_id)
        if father:
            out.append(father)
        if mother:
            out.append(mother)
        out.extend(self.graph.siblings_of(person_id))

        for fam in self.graph.spouse_families(person_id):
            sp = self.graph.spouse_in(fam, person_id)
            if sp:
                out.append(sp)
            out.extend(fam.children)
        return out

    def find_path(
        self,
        start: str,
        goal: str,
        *,
        max_hops: int | None = None,
        max_nodes: int | None = None,
    ) -> list[str]:
        """Return the first shortest path from *start* to *goal*, both inclusive.

        An empty list means no connection (or that a search limit was hit).
        """

        if start == goal:
            return [start]

        parents: dict[str, str | None] = {start: None}
        frontier = [start]
        depth = 0

        while frontier:
            if max_hops is not None and depth >= max_hops:
                log.debug("path search %s -> %s stopped at max_hops=%d", start, goal, max_hops)
                break

            next_frontier: list[str] = []
            for node in frontier:
                for nb in self.neighbors(node):
                    if nb in parents:
                        continue
                    parents[nb] = node

                    if nb == goal:
                        path = [goal]
                        cur: str | None = node
                        while cur is not None:
                            path.append(cur)
                            cur = parents[cur]
                        path.reverse()
                        return path

                    next_frontier.append(nb)

            if max_nodes is not None and len(parents) > max_nodes:
                log.warning("path search %s -> %s exceeded max_nodes=%d", start, goal, max_nodes)
                return []

            frontier = next_frontier
            depth += 1

        return []

    def step_relation(self, from_id: str, to_id: str) -> StepRelation | None:
        """Classify one hop by direct structure only: parent, child, sibling, spouse."""

        if self.graph.individual(from_id) is None or self.graph.individual(to_id) is None:
            return None

        if to_id in self.graph.parents_of(from_id):
            return StepRelation.PARENT
        if to_id in self.graph.children_of(from_id):
            return StepRelation.CHILD
        if to_id in self.graph.siblings_of(from_id):
            return StepRelation.SIBLING
        if to_id in self.graph.spouses_of(from_id):
            return StepRelation.SPOUSE
        return None

    def step_label(self, relation: StepRelation | None, to_id: str) -> str | None:
        if relation is None:
            return None
        sex = self.graph.sex_of(to_id)
        if relation is StepRelation.PARENT:
            return labels.parent_label(sex)
        if relation is StepRelation.CHILD:
            return labels.child_label(sex)
        if relation is StepRelation.SIBLING:
            return labels.sibling_label(sex)
        return labels.spouse_label(sex)

    def relationship_path(
        self,
        from_id: str,
        to_id: str,
        *,
        max_hops: int | None = None,
        max_nodes: int | None = None,
    ) -> RelationshipPath:
        person_ids = self.find_path(from_id, to_id, max_hops=max_hops, max_nodes=max_nodes)

        steps: list[PathStep] = []
        for prev_id, next_id in zip(person_ids, person_ids[1:]):
            relation = self.step_relation(prev_id, next_id)
            steps.append(PathStep(next_id, relation, self.step_label(relation, next_id)))

        return RelationshipPath(
            from_id=from_id,
            to_id=to_id,
            person_ids=person_ids,
            steps=steps,
            label=chain_label([s.label for s in steps]),
        )
