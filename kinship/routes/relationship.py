from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

try:
    from ..models import FamilySnapshot
    from ..relationship import build_calculator
    from ..snapshot import current_snapshot
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import FamilySnapshot
    from relationship import build_calculator
    from snapshot import current_snapshot

router = APIRouter()

_PATH_MAX_NODES = 100_000

# Each request loads its own snapshot (the full person/family/family_child
# tables), so a query never sees a half-applied edit. On large trees this load
# dominates request time; /relationship/all additionally runs one
# find_relationship per person in the snapshot.


def _require_person(snapshot: FamilySnapshot, person_id: str) -> None:
    if person_id not in snapshot.individuals:
        raise HTTPException(status_code=404, detail=f"person not found: {person_id}")


def _person_ref(snapshot: FamilySnapshot, person_id: str) -> dict[str, Any]:
    person = snapshot.individuals.get(person_id)
    return {
        "id": person_id,
        "display_name": person.display_name if person else None,
        "sex": person.sex.value if person else None,
    }


@router.get("/relationship")
def relationship(
    from_id: str = Query(min_length=1, max_length=64),
    to_id: str = Query(min_length=1, max_length=64),
) -> dict[str, Any]:
    snapshot = current_snapshot()
    _require_person(snapshot, from_id)
    _require_person(snapshot, to_id)

    calc = build_calculator(snapshot)
    result = calc.find_relationship(from_id, to_id)
    out = result.to_dict()
    out["description"] = result.label if not result.is_unknown else calc.describe(from_id, to_id)
    return out


@router.get("/relationship/path")
def relationship_path(
    from_id: str = Query(min_length=1, max_length=64),
    to_id: str = Query(min_length=1, max_length=64),
    max_hops: int = Query(default=12, ge=1, le=50),
) -> dict[str, Any]:
    snapshot = current_snapshot()
    _require_person(snapshot, from_id)
    _require_person(snapshot, to_id)

    rp = build_calculator(snapshot).relationship_path(
        from_id, to_id, max_hops=max_hops, max_nodes=_PATH_MAX_NODES
    )
    if not rp.connected:
        return {"from": from_id, "to": to_id, "path": []}

    return {
        "from": from_id,
        "to": to_id,
        "path": [_person_ref(snapshot, pid) for pid in rp.person_ids],
        "steps": [s.to_dict() for s in rp.steps],
        "label": rp.label,
        "hops": rp.hops,
    }


@router.get("/relationship/all")
def relationship_all(person_id: str = Query(min_length=1, max_length=64)) -> dict[str, Any]:
    """Every named relation of one person, e.g. for a "relatives" side panel."""

    snapshot = current_snapshot()
    _require_person(snapshot, person_id)

    results = build_calculator(snapshot).all_relationships(person_id)
    return {
        "person": _person_ref(snapshot, person_id),
        "relationships": [
            {**r.to_dict(), "person": _person_ref(snapshot, r.to_id)} for r in results
        ],
        "total": len(results),
    }
