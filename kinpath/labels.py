"""Map a relationship kind and the target's sex to an i18n key and display text."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import Sex
from .schemas import EdgeType, ErrorCode, RelationshipKind
from .vocabulary import PREFIX, RelationshipVocabulary

# kind -> (male, female, unknown)
GENDERED: Dict[RelationshipKind, Tuple[str, str, str]] = {
    RelationshipKind.PARENT: ("father", "mother", "parent"),
    RelationshipKind.CHILD: ("son", "daughter", "child"),
    RelationshipKind.SPOUSE: ("husband", "wife", "spouse"),
    RelationshipKind.SIBLING: ("brother", "sister", "sibling"),
    RelationshipKind.GRANDPARENT: ("grandfather", "grandmother", "grandparent"),
    RelationshipKind.GRANDCHILD: ("grandson", "granddaughter", "grandchild"),
    RelationshipKind.UNCLE_AUNT: ("uncle", "aunt", "auntOrUncle"),
    RelationshipKind.NEPHEW_NIECE: ("nephew", "niece", "nieceOrNephew"),
}

NEUTRAL: Dict[RelationshipKind, str] = {
    RelationshipKind.SELF: "self",
    RelationshipKind.COUSIN: "cousin",
    RelationshipKind.DISTANT: "related",
    RelationshipKind.NONE: "notRelated",
}

ERRORS: Dict[ErrorCode, str] = {
    ErrorCode.PERSON_NOT_FOUND: "notFound",
    ErrorCode.INVALID_SCOPE: "invalidScope",
}

# what the next person on a path is, read from the current person
EDGE_KEYS: Dict[EdgeType, Tuple[str, str, str]] = {
    EdgeType.PARENT: ("fatherOf", "motherOf", "parentOf"),
    EdgeType.CHILD: ("sonOf", "daughterOf", "childOf"),
    EdgeType.SPOUSE: ("spouseOf", "spouseOf", "spouseOf"),
}


def _pick(variants: Tuple[str, str, str], sex: Optional[Sex]) -> str:
    if sex == Sex.M:
        return variants[0]
    if sex == Sex.F:
        return variants[1]
    return variants[2]


def base_key(kind: RelationshipKind, sex: Optional[Sex] = None,
             error: Optional[ErrorCode] = None) -> str:
    if kind == RelationshipKind.ERROR:
        return ERRORS[error or ErrorCode.PERSON_NOT_FOUND]
    if kind in GENDERED:
        return _pick(GENDERED[kind], sex)
    return NEUTRAL[kind]


def edge_key(edge: EdgeType, sex: Optional[Sex]) -> str:
    """``relationship.fatherOf`` style key for one hop, or "" for the last node."""
    if edge not in EDGE_KEYS:
        return ""
    return PREFIX + _pick(EDGE_KEYS[edge], sex)


@dataclass(frozen=True)
class Label:
    key: str
    display: str
    type_id: Optional[int] = None


class LabelResolver:
    """Pure lookup over an injected vocabulary."""

    def __init__(self, vocabulary: RelationshipVocabulary):
        self.vocabulary = vocabulary

    def resolve(self, kind: RelationshipKind, sex: Optional[Sex], locale: str,
                steps: Optional[int] = None, error: Optional[ErrorCode] = None) -> Label:
        key = base_key(kind, sex, error)
        params = {"steps": steps} if kind == RelationshipKind.DISTANT else {}
        return Label(
            key=PREFIX + key,
            display=self.vocabulary.display(key, locale, **params),
            type_id=self.vocabulary.type_id(key),
        )
