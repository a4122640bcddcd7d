"""
Core domain models for the Eloquent Model Generator.

These models describe a database table as the generator sees it and the
intermediate representation a model file is rendered from. All of them are
built fresh for every table in a generation pass and discarded afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class RelationshipKind(Enum):
    """Eloquent relationship flavours the generator can emit."""

    BELONGS_TO = "belongsTo"
    HAS_MANY = "hasMany"
    BELONGS_TO_MANY = "belongsToMany"

    @property
    def is_collection(self) -> bool:
        return self is not RelationshipKind.BELONGS_TO


class CastCategory(Enum):
    """Values allowed in an Eloquent ``$casts`` map."""

    DATETIME = "datetime"
    DATE = "date"
    ARRAY = "array"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"


class ChangeKind(Enum):
    """What the incremental patcher did to an existing file."""

    NO_CHANGE = "no_change"
    COMPLETED = "completed"
    UPDATED_WITH_RELATIONSHIPS = "updated"


class GenerationOutcome(Enum):
    """Per-table result of a generation pass."""

    GENERATED = "generated"
    UPDATED = "updated"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ColumnDescriptor:
    """A single column as reported by the catalog."""

    name: str
    raw_type: str
    nullable: bool = False


@dataclass(frozen=True)
class ForeignKeyDescriptor:
    """A directional edge ``from_table.from_column -> to_table.to_column``."""

    from_column: str
    to_table: str
    to_column: str
    # Table holding the foreign key column; set for incoming keys
    from_table: Optional[str] = None


@dataclass
class TableSchema:
    """Everything the generator knows about one table."""

    name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    outgoing_fks: List[ForeignKeyDescriptor] = field(default_factory=list)
    incoming_fks: List[ForeignKeyDescriptor] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]


@dataclass(frozen=True)
class TypeClassification:
    """Result of mapping a raw column type."""

    cast_category: Optional[CastCategory]
    doc_type: str


@dataclass(frozen=True)
class RelationshipDescriptor:
    """
    One relationship method on a model.

    For belongs-to, ``foreign_key`` is the column on this table and
    ``local_key`` the referenced (owner) column. For has-many, ``foreign_key``
    is the column on the related table and ``local_key`` is this table's key.
    For belongs-to-many both keys are pivot columns and are ``None`` when the
    framework defaults should apply.
    """

    kind: RelationshipKind
    method_name: str
    related_class_name: str
    local_key: Optional[str] = None
    foreign_key: Optional[str] = None
    pivot_table: Optional[str] = None

    @property
    def has_explicit_pivot_keys(self) -> bool:
        return bool(self.local_key and self.foreign_key)


@dataclass(frozen=True)
class DocProperty:
    """A ``@property`` line in the class doc block."""

    name: str
    type: str
    read_only: bool = False

    @property
    def access_suffix(self) -> str:
        return "-read" if self.read_only else ""


@dataclass(frozen=True)
class ModelFileSpec:
    """Complete description of a model file; consumed by the emitter and the patcher."""

    class_name: str
    namespace: str
    table_name: str
    fillable_fields: Tuple[str, ...] = ()
    casts: Dict[str, CastCategory] = field(default_factory=dict)
    relationships: Tuple[RelationshipDescriptor, ...] = ()
    doc_block: Tuple[DocProperty, ...] = ()


@dataclass
class InferenceResult:
    """Relationships inferred for one table plus anything worth a manual look."""

    relationships: List[RelationshipDescriptor] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def method_names(self) -> List[str]:
        return [rel.method_name for rel in self.relationships]


@dataclass
class GenerationSummary:
    """Counters accumulated over a whole run."""

    generated: int = 0
    updated: int = 0
    completed: int = 0
    skipped: int = 0
    failed: int = 0

    def record(self, outcome: GenerationOutcome) -> None:
        attr = outcome.value
        setattr(self, attr, getattr(self, attr) + 1)

    @property
    def total(self) -> int:
        return self.generated + self.updated + self.completed + self.skipped + self.failed
