"""
Core type definitions for infraview.

Nodes and edges mirror the payload produced by the infrastructure scanner.
Models are frozen: engines derive new collections instead of mutating the
canonical snapshot.
"""

from enum import StrEnum
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from ..config import DIMMED_EDGE_OPACITY, MAX_SEARCH_LENGTH


class NodeType(StrEnum):
    """Categories of nodes in the infrastructure graph."""
    RESOURCE = "terraform_resource"
    MODULE = "terraform_module"
    DATA_SOURCE = "terraform_data_source"
    CHART = "helm_chart"
    CLUSTER_RESOURCE = "k8s_resource"
    EXTERNAL_REFERENCE = "external_reference"
    CONFIG = "tg_config"


class EdgeType(StrEnum):
    """Types of relationships between nodes."""
    DEPENDS_ON = "DEPENDS_ON"
    REFERENCES = "REFERENCES"
    CONTAINS = "CONTAINS"
    IMPORTS = "IMPORTS"
    # Terragrunt
    TG_INCLUDES = "tg_includes"
    TG_DEPENDS_ON = "tg_depends_on"
    TG_PASSES_INPUT = "tg_passes_input"
    TG_SOURCES = "tg_sources"


class Direction(StrEnum):
    """Edge direction followed by a traversal."""
    BOTH = "both"
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class SelectionMode(StrEnum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    ADDITIVE = "additive"


class ImpactSeverity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MINIMAL = "minimal"


# Sentinel for "no depth bound". A plain string keeps filters JSON-safe.
UNBOUNDED = "unbounded"

MaxDepth = Union[int, Literal["unbounded"]]


def is_unbounded(depth: MaxDepth) -> bool:
    return depth == UNBOUNDED


# =============================================================================
# Nodes & Edges
# =============================================================================

class NodeLocation(BaseModel):
    """Position of a node's definition in source."""
    file_path: str = Field(validation_alias=AliasChoices("file_path", "filePath"))
    start_line: int = Field(0, validation_alias=AliasChoices("start_line", "startLine"))
    end_line: int = Field(0, validation_alias=AliasChoices("end_line", "endLine"))

    model_config = ConfigDict(frozen=True)


class GenericNodeMetadata(BaseModel):
    """Opaque metadata for node types without a typed schema."""
    kind: Literal["generic"] = "generic"

    model_config = ConfigDict(frozen=True, extra="allow")

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class ConfigNodeMetadata(BaseModel):
    """
    Typed metadata for Terragrunt config nodes.

    Unknown keys are kept as passthrough extras.
    """
    kind: Literal["config"] = "config"
    terraform_source: Optional[str] = Field(
        None, validation_alias=AliasChoices("terraform_source", "terraformSource")
    )
    has_remote_state: bool = Field(
        False, validation_alias=AliasChoices("has_remote_state", "hasRemoteState")
    )
    remote_state_backend: Optional[str] = Field(
        None, validation_alias=AliasChoices("remote_state_backend", "remoteStateBackend")
    )
    include_count: int = Field(0, validation_alias=AliasChoices("include_count", "includeCount"))
    dependency_count: int = Field(
        0, validation_alias=AliasChoices("dependency_count", "dependencyCount")
    )
    input_count: int = Field(0, validation_alias=AliasChoices("input_count", "inputCount"))
    generate_blocks: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("generate_blocks", "generateBlocks")
    )

    model_config = ConfigDict(frozen=True, extra="allow")

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


NodeMetadata = Annotated[
    Union[ConfigNodeMetadata, GenericNodeMetadata],
    Field(discriminator="kind"),
]


class Node(BaseModel):
    """A single infrastructure artifact in the dependency graph."""
    id: str = Field(min_length=1)
    name: str
    type: NodeType
    location: Optional[NodeLocation] = None
    metadata: NodeMetadata = Field(default_factory=GenericNodeMetadata)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _tag_metadata(cls, data: Any) -> Any:
        # Payload metadata is untagged; the node type decides the variant.
        if not isinstance(data, dict):
            return data
        meta = data.get("metadata")
        if meta is None:
            meta = {}
        if isinstance(meta, dict) and "kind" not in meta:
            kind = "config" if data.get("type") == NodeType.CONFIG.value else "generic"
            data = {**data, "metadata": {**meta, "kind": kind}}
        return data

    @property
    def file_path(self) -> Optional[str]:
        return self.location.file_path if self.location else None

    @property
    def config_metadata(self) -> Optional[ConfigNodeMetadata]:
        """Typed Terragrunt metadata, or None for other node types."""
        if isinstance(self.metadata, ConfigNodeMetadata):
            return self.metadata
        return None


class Edge(BaseModel):
    """Directed relationship between two nodes."""
    id: str = Field(min_length=1)
    source_id: str = Field(
        validation_alias=AliasChoices("source_id", "sourceNodeId", "sourceId", "source")
    )
    target_id: str = Field(
        validation_alias=AliasChoices("target_id", "targetNodeId", "targetId", "target")
    )
    type: EdgeType
    confidence: float = Field(1.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="ignore")

    def touches(self, node_id: str) -> bool:
        return self.source_id == node_id or self.target_id == node_id


class VisualNode(Node):
    """Node projected for rendering, with transient visual state."""
    selected: bool = False
    highlighted: bool = False
    dimmed: bool = False


class VisualEdge(Edge):
    """Edge projected for rendering."""
    highlighted: bool = False
    opacity: float = 1.0

    @property
    def is_dimmed(self) -> bool:
        return self.opacity == DIMMED_EDGE_OPACITY


class ImpactVisualNode(VisualNode):
    """
    Node projected for a blast radius view.

    ``impact_depth`` is 0 for the source and -1 for unaffected nodes.
    """
    impact_depth: int = -1
    is_direct: bool = False
    impact_color: str = ""


# =============================================================================
# Filters
# =============================================================================

class GraphFilters(BaseModel):
    """
    Base filter state.

    An empty ``node_types`` list means no restriction, not "exclude all".
    """
    node_types: List[NodeType] = Field(default_factory=lambda: list(NodeType))
    search: str = Field("", max_length=MAX_SEARCH_LENGTH)
    show_blast_radius: bool = False

    model_config = ConfigDict(frozen=True)


class ExtendedGraphFilters(GraphFilters):
    """Filters with edge type, confidence and depth options."""
    edge_types: List[EdgeType] = Field(default_factory=lambda: list(EdgeType))
    min_confidence: float = Field(0.0, ge=0.0, le=1.0)
    max_depth: MaxDepth = UNBOUNDED
    show_connected_only: bool = False

    @field_validator("max_depth")
    @classmethod
    def _check_depth(cls, value: MaxDepth) -> MaxDepth:
        if isinstance(value, int) and value < 0:
            raise ValueError("max_depth cannot be negative")
        return value


AnyFilters = Union[GraphFilters, ExtendedGraphFilters]


# =============================================================================
# Selection
# =============================================================================

class SelectionState(BaseModel):
    """Snapshot of the selection engine, safe to hand to the renderer."""
    selected_id: Optional[str] = None
    selected_ids: Set[str] = Field(default_factory=set)
    highlighted_node_ids: Set[str] = Field(default_factory=set)
    highlighted_edge_ids: Set[str] = Field(default_factory=set)
    mode: SelectionMode = SelectionMode.SINGLE
    snapshot_id: Optional[str] = None

    @field_serializer("selected_ids", "highlighted_node_ids", "highlighted_edge_ids")
    def _sorted(self, value: Set[str]) -> List[str]:
        return sorted(value)

    @property
    def is_empty(self) -> bool:
        return not self.selected_ids and not self.highlighted_node_ids


# =============================================================================
# Blast Radius
# =============================================================================

class AffectedNode(BaseModel):
    id: str
    name: str = ""
    type: Optional[NodeType] = None
    is_direct: bool
    depth: int


class BlastRadiusResult(BaseModel):
    """Impact of changing ``source_node_id`` on the nodes that depend on it."""
    source_node_id: str
    direct_dependent_count: int = 0
    transitive_dependent_count: int = 0
    impact_score: float = Field(0.0, ge=0.0, le=1.0)
    severity: ImpactSeverity = ImpactSeverity.MINIMAL
    affected_nodes: List[AffectedNode] = Field(default_factory=list)

    @property
    def total_affected(self) -> int:
        return len(self.affected_nodes)
