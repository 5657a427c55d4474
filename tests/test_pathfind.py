from __future__ import annotations

from kinship.accessor import GraphAccessor
from kinship.models import FamilySnapshot, FamilyUnit, Individual, Sex
from kinship.pathfind import Direction, PathFinder, StepRelation, chain_label


def _finder(snap: FamilySnapshot) -> PathFinder:
    return PathFinder(GraphAccessor(snap))


def test_path_to_self_is_single_node(family_tree: FamilySnapshot) -> None:
    assert _finder(family_tree).find_path("ME", "ME") == ["ME"]


def test_neighbors_cover_parents_siblings_spouses_children(family_tree: FamilySnapshot) -> None:
    assert _finder(family_tree).neighbors("ME") == ["P1", "P2", "SIS", "WIFE", "KID"]


def test_shortest_path_through_marriage(family_tree: FamilySnapshot) -> None:
    assert _finder(family_tree).find_path("WB", "SIS") == ["WB", "WIFE", "ME", "SIS"]


def test_relationship_path_segments_and_chain(family_tree: FamilySnapshot) -> None:
    rp = _finder(family_tree).relationship_path("WB", "SIS")

    assert rp.connected
    assert rp.hops == 3
    assert [s.relation for s in rp.steps] == [StepRelation.SIBLING, StepRelation.SPOUSE, StepRelation.SIBLING]
    assert [s.direction for s in rp.steps] == [Direction.LATERAL] * 3
    assert rp.label == "Sister's Husband's Sister"


def test_relationship_path_up_and_down(family_tree: FamilySnapshot) -> None:
    rp = _finder(family_tree).relationship_path("SISH", "KID")

    assert rp.person_ids == ["SISH", "SIS", "ME", "KID"]
    assert rp.label == "Wife's Brother's Son"
    assert [s.to_dict()["direction"] for s in rp.steps] == ["lateral", "lateral", "down"]


def test_disconnected_people_have_no_path(build_tree) -> None:
    snap = build_tree({"A": "M", "B": "F", "C": "M"}, {"F1": ("A", "B", [])})
    rp = _finder(snap).relationship_path("A", "C")
    assert rp.person_ids == []
    assert rp.steps == []
    assert rp.label == ""
    assert not rp.connected


def test_max_hops_limits_search(family_tree: FamilySnapshot) -> None:
    finder = _finder(family_tree)
    assert finder.find_path("WB", "SIS", max_hops=2) == []
    assert finder.find_path("WB", "SIS", max_hops=3) == ["WB", "WIFE", "ME", "SIS"]


def test_max_nodes_gives_up_without_raising(family_tree: FamilySnapshot) -> None:
    assert _finder(family_tree).find_path("GKID", "PCC", max_nodes=3) == []


def test_step_relation_recognizes_single_hops(family_tree: FamilySnapshot) -> None:
    finder = _finder(family_tree)
    assert finder.step_relation("ME", "P1") is StepRelation.PARENT
    assert finder.step_relation("P1", "ME") is StepRelation.CHILD
    assert finder.step_relation("ME", "SIS") is StepRelation.SIBLING
    assert finder.step_relation("ME", "WIFE") is StepRelation.SPOUSE
    assert finder.step_relation("ME", "GU") is None


def test_unrecognized_hop_is_dropped_from_chain() -> None:
    # Child "GHOST" is listed in the family but has no individual record.
    snap = FamilySnapshot(
        individuals={
            "D": Individual(id="D", sex=Sex.MALE, family_as_spouse=("F1",)),
            "M": Individual(id="M", sex=Sex.FEMALE, family_as_spouse=("F1",)),
        },
        families={"F1": FamilyUnit(id="F1", husband="D", wife="M", children=("GHOST",))},
    )
    rp = _finder(snap).relationship_path("D", "GHOST")
    assert rp.person_ids == ["D", "GHOST"]
    assert rp.steps[0].relation is None
    assert rp.steps[0].to_dict() == {"person_id": "GHOST", "relation": None, "direction": None, "label": None}
    assert rp.label == ""


def test_chain_label_joins_with_possessive() -> None:
    assert chain_label(["Father", "Brother", "Wife"]) == "Father's Brother's Wife"
    assert chain_label(["Mother", None, "Son"]) == "Mother's Son"
    assert chain_label(["Wife"]) == "Wife"
    assert chain_label([]) == ""
