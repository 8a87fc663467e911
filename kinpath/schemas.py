import enum
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, Literal, Tuple


class RelationshipKind(str, enum.Enum):
    SELF = "self"
    PARENT = "parent"
    CHILD = "child"
    SPOUSE = "spouse"
    SIBLING = "sibling"
    GRANDPARENT = "grandparent"
    GRANDCHILD = "grandchild"
    UNCLE_AUNT = "uncle_aunt"
    NEPHEW_NIECE = "nephew_niece"
    COUSIN = "cousin"
    DISTANT = "distant"
    NONE = "none"
    ERROR = "error"


class EdgeType(str, enum.Enum):
    """What the next person on a path is relative to the current one."""
    PARENT = "parent"
    CHILD = "child"
    SPOUSE = "spouse"
    NONE = "none"


class ErrorCode(str, enum.Enum):
    PERSON_NOT_FOUND = "person_not_found"
    INVALID_SCOPE = "invalid_scope"


# ── Relationship query results ──

class PathStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    person_id: str
    sex: Literal["M", "F", "U"] = "U"
    edge_to_next: EdgeType = EdgeType.NONE
    relationship_to_next_key: str = ""


class CommonAncestor(BaseModel):
    model_config = ConfigDict(frozen=True)

    person_id: str
    generations_from_person1: int
    generations_from_person2: int


class RelationshipResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    found: bool
    path_length: int
    kind: RelationshipKind
    label_key: str
    display_label: str
    path_ids: Tuple[str, ...] = ()
    common_ancestor_id: Optional[str] = None
    error: Optional[ErrorCode] = None
    relationship_type_id: Optional[int] = None
    path: Tuple[PathStep, ...] = ()
    trail: str = ""
    common_ancestors: Tuple[CommonAncestor, ...] = ()
    locale: str = "en"


# ── API payloads ──

class TreeCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

class TreeOut(BaseModel):
    id: str
    name: str
    created_at: str

class PersonCreate(BaseModel):
    display_name: str
    sex: Literal["M","F","U"] = "U"
    notes: Optional[str] = None
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    is_deceased: bool = False

class PersonOut(BaseModel):
    id: str
    display_name: str
    sex: str
    tree_id: str
    notes: Optional[str] = None
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    is_deceased: bool = False

class ParentCreate(BaseModel):
    parent_id: str
    child_id: str
    rel_type: Literal["biological","adoptive","step"] = "biological"

class ParentOut(BaseModel):
    id: str
    parent_id: str
    child_id: str
    rel_type: str

class UnionCreate(BaseModel):
    member_ids: list[str]

    @field_validator("member_ids")
    @classmethod
    def validate_members(cls, v):
        # keep order, drop repeats
        members = list(dict.fromkeys(m for m in v if m))
        if len(members) < 2:
            raise ValueError("a union needs at least two distinct members")
        return members

class UnionOut(BaseModel):
    id: str
    tree_id: str
    member_ids: list[str]

class RelationshipTypeOut(BaseModel):
    id: Optional[int] = None
    key: str
    category: Optional[str] = None
    names: dict[str, str]
