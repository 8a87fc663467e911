import uuid, enum
from sqlalchemy import String, Boolean, Integer, ForeignKey, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

class Base(DeclarativeBase):
    pass

class Sex(enum.Enum):
    M = "M"
    F = "F"
    U = "U"

    @classmethod
    def parse(cls, value) -> "Sex":
        """Accept M/F/U, male/female, or the legacy 0 (male) / 1 (female) codes."""
        if isinstance(value, Sex):
            return value
        if isinstance(value, bool) or value is None:
            return cls.U
        if isinstance(value, int):
            return {0: cls.M, 1: cls.F}.get(value, cls.U)
        text = str(value).strip().lower()
        if text in ("m", "male"):
            return cls.M
        if text in ("f", "female"):
            return cls.F
        return cls.U

class Tree(Base):
    __tablename__ = "family_trees"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)

class Person(Base):
    __tablename__ = "people"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tree_id: Mapped[str] = mapped_column(String(36), ForeignKey("family_trees.id"), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    sex: Mapped[Sex] = mapped_column(Enum(Sex), nullable=False, default=Sex.U)
    is_deceased: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

class ParentChild(Base):
    __tablename__ = "parent_children"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    parent_id: Mapped[str] = mapped_column(String(36), ForeignKey("people.id"), nullable=False, index=True)
    child_id: Mapped[str] = mapped_column(String(36), ForeignKey("people.id"), nullable=False, index=True)

    # biological / adoptive / step; relationship queries treat them alike
    rel_type: Mapped[str] = mapped_column(String(20), nullable=False, default="biological")

    parent = relationship("Person", foreign_keys=[parent_id])
    child = relationship("Person", foreign_keys=[child_id])

class FamilyUnion(Base):
    __tablename__ = "unions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tree_id: Mapped[str] = mapped_column(String(36), ForeignKey("family_trees.id"), nullable=False, index=True)

    members = relationship("UnionMember", back_populates="union", cascade="all, delete-orphan")

class UnionMember(Base):
    __tablename__ = "union_members"
    union_id: Mapped[str] = mapped_column(String(36), ForeignKey("unions.id"), primary_key=True)
    person_id: Mapped[str] = mapped_column(String(36), ForeignKey("people.id"), primary_key=True, index=True)

    union = relationship("FamilyUnion", back_populates="members")

class FamilyRelationshipType(Base):
    __tablename__ = "family_relationship_types"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name_arabic: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    name_english: Mapped[str] = mapped_column(String(100), nullable=False)
    name_nubian: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # i18n key without the "relationship." prefix; derived from name_english when empty
    key: Mapped[str | None] = mapped_column(String(100), nullable=True)
