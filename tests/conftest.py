from __future__ import annotations

from typing import Callable, Optional

import pytest

from kinship.models import FamilySnapshot, FamilyUnit, Individual, Sex
from kinship.relationship import RelationshipCalculator, build_calculator

FamilyRow = tuple[Optional[str], Optional[str], list[str]]


def _build_tree(
    people: dict[str, str],
    families: dict[str, FamilyRow],
) -> FamilySnapshot:
    """people: id -> sex letter; families: id -> (husband, wife, children).

    familyAsChild / familyAsSpouse are derived from the families, the way the
    tree export populates them.
    """

    as_child: dict[str, str] = {}
    as_spouse: dict[str, list[str]] = {}
    units: dict[str, FamilyUnit] = {}
    for fid, (husband, wife, children) in families.items():
        units[fid] = FamilyUnit(id=fid, husband=husband, wife=wife, children=tuple(children))
        for cid in children:
            as_child.setdefault(cid, fid)
        for pid in (husband, wife):
            if pid:
                as_spouse.setdefault(pid, []).append(fid)

    individuals = {
        pid: Individual(
            id=pid,
            sex=Sex.parse(sex),
            family_as_child=as_child.get(pid),
            family_as_spouse=tuple(as_spouse.get(pid, [])),
        )
        for pid, sex in people.items()
    }
    return FamilySnapshot(individuals=individuals, families=units)


@pytest.fixture()
def build_tree() -> Callable[..., FamilySnapshot]:
    return _build_tree


@pytest.fixture()
def family_tree() -> FamilySnapshot:
    # Four generations plus marriages:
    #
    #   GG1 + GG2
    #       |
    #   G1 + G2            G1's brother GU (married to GUW)
    #       |                     |
    #   P1 + P2 (M/F)       PC (P1's 1st cousin)
    #     |       \                |
    #   ME (M)   SIS (F) + SISH    PCC
    #     |
    #   KID + KIDW
    #     |
    #   GKID
    #
    # P2's parents are IL1 + IL2; P2's brother is UNC. ME is married to WIFE,
    # whose parents are WF + WM and whose brother is WB.
    people = {
        "GG1": "M", "GG2": "F",
        "G1": "M", "G2": "F", "GU": "M", "GUW": "F",
        "P1": "M", "P2": "F", "PC": "F",
        "IL1": "M", "IL2": "F", "UNC": "M",
        "ME": "M", "SIS": "F", "SISH": "M", "PCC": "M",
        "WIFE": "F", "WF": "M", "WM": "F", "WB": "M",
        "KID": "M", "KIDW": "F", "GKID": "F",
    }
    families: dict[str, FamilyRow] = {
        "F_GG": ("GG1", "GG2", ["G1", "GU"]),
        "F_G": ("G1", "G2", ["P1"]),
        "F_GU": ("GU", "GUW", ["PC"]),
        "F_PC": (None, "PC", ["PCC"]),
        "F_IL": ("IL1", "IL2", ["P2", "UNC"]),
        "F_P": ("P1", "P2", ["ME", "SIS"]),
        "F_SIS": ("SISH", "SIS", []),
        "F_W": ("WF", "WM", ["WIFE", "WB"]),
        "F_ME": ("ME", "WIFE", ["KID"]),
        "F_KID": ("KID", "KIDW", ["GKID"]),
    }
    return _build_tree(people, families)


@pytest.fixture()
def calc(family_tree: FamilySnapshot) -> RelationshipCalculator:
    return build_calculator(family_tree)
