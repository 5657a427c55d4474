"""Snapshot sources: build a FamilySnapshot from the JSON tree shape or Postgres.

The JSON shape is the one produced by the tree's export:

    {
      "individuals": {"I1": {"sex": "M", "familyAsChild": "F1", "familyAsSpouse": ["F2"]}},
      "families": {"F1": {"husband": "I0", "wife": "I9", "children": ["I1"]}}
    }

The Postgres source reads the ``person``, ``family`` and ``family_child``
tables loaded by the Gramps import.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import psycopg

try:
    from .db import db_conn
    from .models import FamilySnapshot, FamilyUnit, Individual, Sex
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from db import db_conn
    from models import FamilySnapshot, FamilyUnit, Individual, Sex

log = logging.getLogger(__name__)


def _opt_id(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _id_list(value: Any, *, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError(f"{where}: expected a list of ids, got {type(value).__name__}")
    return tuple(s for s in (_opt_id(v) for v in value) if s)


def _display_name(rec: Mapping[str, Any]) -> str | None:
    name = rec.get("name")
    if isinstance(name, Mapping):
        return _opt_id(name.get("full"))
    return _opt_id(name if name is not None else rec.get("display_name"))


def snapshot_from_dict(data: Mapping[str, Any]) -> FamilySnapshot:
    """Build a snapshot from the two keyed collections of the JSON tree shape."""

    raw_people = data.get("individuals") or {}
    raw_families = data.get("families") or {}
    if not isinstance(raw_people, Mapping) or not isinstance(raw_families, Mapping):
        raise ValueError("individuals and families must be objects keyed by id")

    individuals: dict[str, Individual] = {}
    for pid, rec in raw_people.items():
        if not isinstance(rec, Mapping):
            raise ValueError(f"individual {pid!r}: expected an object")
        individuals[str(pid)] = Individual(
            id=str(pid),
            sex=Sex.parse(rec.get("sex")),
            family_as_child=_opt_id(rec.get("familyAsChild")),
            family_as_spouse=_id_list(rec.get("familyAsSpouse"), where=f"individual {pid!r}"),
            display_name=_display_name(rec),
        )

    families: dict[str, FamilyUnit] = {}
    for fid, rec in raw_families.items():
        if not isinstance(rec, Mapping):
            raise ValueError(f"family {fid!r}: expected an object")
        families[str(fid)] = FamilyUnit(
            id=str(fid),
            husband=_opt_id(rec.get("husband")),
            wife=_opt_id(rec.get("wife")),
            children=_id_list(rec.get("children"), where=f"family {fid!r}"),
        )

    snapshot = FamilySnapshot(individuals=individuals, families=families)
    _warn_dangling(snapshot)
    return snapshot


def read_snapshot_json(path: Path) -> FamilySnapshot:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    log.debug("loaded tree json from %s", path)
    return snapshot_from_dict(data)


def load_snapshot(conn: psycopg.Connection) -> FamilySnapshot:
    """Read the whole family graph from the Gramps tables."""

    people = conn.execute("SELECT id, gender, display_name FROM person").fetchall()
    fam_rows = conn.execute("SELECT id, father_id, mother_id FROM family").fetchall()

    # No explicit child order column: birth date first, then id.
    child_rows = conn.execute(
        """
        SELECT fc.family_id, fc.child_id
        FROM family_child fc
        LEFT JOIN person p ON p.id = fc.child_id
        ORDER BY fc.family_id, p.birth_date NULLS LAST, fc.child_id
        """.strip()
    ).fetchall()

    children: dict[str, list[str]] = {}
    as_child: dict[str, str] = {}
    for fid, cid in child_rows:
        fid, cid = str(fid), str(cid)
        children.setdefault(fid, []).append(cid)
        if cid in as_child:
            # One parent family per person; later rows (e.g. adoptive) are ignored.
            log.warning("person %s is a child in several families; keeping %s", cid, as_child[cid])
            continue
        as_child[cid] = fid

    families: dict[str, FamilyUnit] = {}
    as_spouse: dict[str, list[str]] = {}
    for fid, father_id, mother_id in fam_rows:
        fid = str(fid)
        fam = FamilyUnit(
            id=fid,
            husband=_opt_id(father_id),
            wife=_opt_id(mother_id),
            children=tuple(children.get(fid, [])),
        )
        families[fid] = fam
        for parent_id in (fam.husband, fam.wife):
            if parent_id:
                as_spouse.setdefault(parent_id, []).append(fid)

    individuals: dict[str, Individual] = {}
    for pid, gender, display_name in people:
        pid = str(pid)
        individuals[pid] = Individual(
            id=pid,
            sex=Sex.parse(gender),
            family_as_child=as_child.get(pid),
            family_as_spouse=tuple(as_spouse.get(pid, [])),
            display_name=display_name,
        )

    log.debug("loaded snapshot: %d people, %d families", len(individuals), len(families))
    return FamilySnapshot(individuals=individuals, families=families)


def _warn_dangling(snapshot: FamilySnapshot) -> None:
    missing: set[str] = set()
    for person in snapshot.individuals.values():
        for fid in (person.family_as_child, *person.family_as_spouse):
            if fid and fid not in snapshot.families:
                missing.add(fid)
    if missing:
        log.warning("%d family references do not resolve: %s", len(missing), ", ".join(sorted(missing)[:10]))


def current_snapshot() -> FamilySnapshot:
    """Load the snapshot configured by the environment.

    ``TREE_JSON_PATH`` wins over ``DATABASE_URL`` when both are set.
    """

    json_path = (os.environ.get("TREE_JSON_PATH") or "").strip()
    if json_path:
        return read_snapshot_json(Path(json_path))

    with db_conn() as conn:
        return load_snapshot(conn)
