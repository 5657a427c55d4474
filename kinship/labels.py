from __future__ import annotations

try:
    from .models import Sex
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import Sex

_ORDINALS = ["", "1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th", "10th"]


def _gendered(sex: Sex, male: str, female: str, neutral: str) -> str:
    if sex is Sex.MALE:
        return male
    if sex is Sex.FEMALE:
        return female
    return neutral


def _ordinal(n: int) -> str:
    if 0 < n < len(_ORDINALS):
        return _ORDINALS[n]
    return f"{n}th"


def _greats(count: int) -> str:
    return "Great-" * max(0, count)


def spouse_label(sex: Sex) -> str:
    return _gendered(sex, "Husband", "Wife", "Spouse")


def parent_label(sex: Sex) -> str:
    return _gendered(sex, "Father", "Mother", "Parent")


def child_label(sex: Sex) -> str:
    return _gendered(sex, "Son", "Daughter", "Child")


def sibling_label(sex: Sex, *, half: bool = False) -> str:
    base = _gendered(sex, "Brother", "Sister", "Sibling")
    return f"Half-{base}" if half else base


def ancestor_label(generations: int, sex: Sex) -> str:
    if generations == 1:
        return parent_label(sex)
    base = _gendered(sex, "Grandfather", "Grandmother", "Grandparent")
    return _greats(generations - 2) + base


def descendant_label(generations: int, sex: Sex) -> str:
    if generations == 1:
        return child_label(sex)
    base = _gendered(sex, "Grandson", "Granddaughter", "Grandchild")
    return _greats(generations - 2) + base


def uncle_aunt_label(great: int, sex: Sex) -> str:
    return _greats(great) + _gendered(sex, "Uncle", "Aunt", "Uncle/Aunt")


def nephew_niece_label(great: int, sex: Sex) -> str:
    return _greats(great) + _gendered(sex, "Nephew", "Niece", "Nephew/Niece")


def cousin_label(degree: int, removed: int) -> str:
    # "Removed" carries no direction; the label is the same from either side.
    suffix = f" {removed}x Removed" if removed > 0 else ""
    return f"{_ordinal(degree)} Cousin{suffix}"


def parent_in_law_label(sex: Sex) -> str:
    return _gendered(sex, "Father-in-law", "Mother-in-law", "Parent-in-law")


def sibling_in_law_label(sex: Sex) -> str:
    return _gendered(sex, "Brother-in-law", "Sister-in-law", "Sibling-in-law")


def child_in_law_label(sex: Sex) -> str:
    return _gendered(sex, "Son-in-law", "Daughter-in-law", "Child-in-law")
