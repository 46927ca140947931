"""Single source of truth for all types, enums, and protocols."""

from __future__ import annotations

from enum import Enum
from typing import Literal, NotRequired, TypedDict

# --- Enums ---


class ClaimType(str, Enum):
    FACTUAL = "factual"
    PRESCRIPTIVE = "prescriptive"
    CONDITIONAL = "conditional"
    CONTESTED = "contested"
    SPECULATIVE = "speculative"


class ClaimRole(str, Enum):
    ANCHOR = "anchor"
    BRANCH = "branch"
    CHALLENGER = "challenger"
    SUPPLEMENT = "supplement"


class EdgeType(str, Enum):
    SUPPORTS = "supports"
    CONFLICTS = "conflicts"
    TRADEOFF = "tradeoff"
    PREREQUISITE = "prerequisite"  # "A enables B"


class PrimaryShape(str, Enum):
    CONVERGENT = "convergent"
    FORKED = "forked"
    CONSTRAINED = "constrained"
    PARALLEL = "parallel"
    SPARSE = "sparse"


class PatternType(str, Enum):
    DISSENT = "dissent"
    CHALLENGED = "challenged"
    KEYSTONE = "keystone"
    CHAIN = "chain"
    FRAGILE = "fragile"
    CONDITIONAL = "conditional"
    ORPHANED = "orphaned"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PeakRelationship(str, Enum):
    CONFLICTING = "conflicting"
    TRADING_OFF = "trading-off"
    SUPPORTING = "supporting"
    INDEPENDENT = "independent"
    NONE = "none"


class InsightType(str, Enum):
    LEVERAGE_INVERSION = "leverage_inversion"
    EXPLICIT_CHALLENGER = "explicit_challenger"
    UNIQUE_PERSPECTIVE = "unique_perspective"
    EDGE_CASE = "edge_case"


class StatementType(str, Enum):
    """Shadow statement categories, highest priority first."""

    CONDITIONAL = "conditional"  # 5
    PREREQUISITE = "prerequisite"  # 4
    CONFLICT = "conflict"  # 3
    PRESCRIPTIVE = "prescriptive"  # 2
    ASSERTIVE = "assertive"  # 1


# Closed vocabularies as plain strings, for membership checks on raw input
CLAIM_TYPES = frozenset(t.value for t in ClaimType)
CLAIM_ROLES = frozenset(r.value for r in ClaimRole)
EDGE_TYPES = frozenset(t.value for t in EdgeType)
PRIMARY_SHAPES = frozenset(s.value for s in PrimaryShape)

Dynamics = Literal["symmetric", "asymmetric"]

# --- Input Types ---


class Claim(TypedDict):
    """An atomic assertion extracted from one or more model answers. Never mutated."""

    id: str
    label: str
    text: str
    supporters: list[int]  # source-model indices
    type: str  # ClaimType value
    role: str  # ClaimRole value
    challenges: str | None  # id of a claim this one directly disputes


# "from" is a keyword, so Edge uses the functional form
Edge = TypedDict("Edge", {"from": str, "to": str, "type": str})


class MapperArtifact(TypedDict):
    claims: list[Claim]
    edges: list[Edge]
    ghosts: list[str]  # topics no model addressed
    model_count: NotRequired[int]


class ModelResponse(TypedDict):
    model_index: int
    content: str


# --- Enrichment ---


class LeverageFactors(TypedDict):
    support_weight: float
    role_weight: float
    connectivity_weight: float
    position_weight: float


class ClaimRatios(Claim):
    """Claim plus raw per-claim scores, before percentile flagging."""

    support_ratio: float
    leverage: float
    leverage_factors: LeverageFactors
    keystone_score: float
    evidence_gap_score: float
    support_skew: float
    in_degree: int
    out_degree: int
    is_chain_root: bool
    is_chain_terminal: bool


class EnrichedClaim(ClaimRatios):
    """Claim plus derived scores and population-relative flags.

    Recomputed on every analysis call; never persisted.
    """

    is_high_support: bool
    is_leverage_inversion: bool
    is_keystone: bool
    is_evidence_gap: bool
    is_outlier: bool
    is_contested: bool
    is_conditional: bool
    is_challenger: bool
    is_isolated: bool


# --- Whole-population descriptions ---


class LandscapeMetrics(TypedDict):
    dominant_type: str
    type_distribution: dict[str, int]
    dominant_role: str
    role_distribution: dict[str, int]
    claim_count: int
    model_count: int
    convergence_ratio: float


class GraphAnalysis(TypedDict):
    component_count: int
    components: list[list[str]]
    longest_chain: list[str]  # ordered prerequisite path
    chain_count: int
    hub_claim: str | None
    hub_dominance: float
    articulation_points: list[str]
    cluster_cohesion: float
    local_coherence: float


class CoreRatios(TypedDict):
    concentration: float
    alignment: float | None  # None when no edges connect top claims
    tension: float
    fragmentation: float
    depth: float


class PeakAnalysis(TypedDict):
    peaks: list[EnrichedClaim]
    hills: list[EnrichedClaim]
    floor: list[EnrichedClaim]
    peak_ids: list[str]
    peak_conflicts: list[Edge]
    peak_tradeoffs: list[Edge]
    peak_supports: list[Edge]  # supports + prerequisite
    peak_unconnected: bool


class PeakPairRelationship(TypedDict):
    a_id: str
    b_id: str
    conflicts: bool
    trades_off: bool
    supports: bool
    prerequisites: bool


# --- Pairwise relation patterns ---


class ClaimRef(TypedDict):
    id: str
    label: str
    supporter_count: int


class LeverageInversion(TypedDict):
    claim_id: str
    claim_label: str
    supporter_count: int
    reason: str  # challenger_prerequisite_to_consensus | singular_foundation | ...
    affected_claims: list[str]


class CascadeRisk(TypedDict):
    source_id: str
    source_label: str
    dependent_ids: list[str]
    dependent_labels: list[str]
    depth: int


class ConflictPair(TypedDict):
    claim_a: ClaimRef
    claim_b: ClaimRef
    is_both_consensus: bool
    dynamics: Dynamics


class ConflictClaim(TypedDict):
    id: str
    label: str
    text: str
    support_count: int
    support_ratio: float
    role: str
    is_high_support: bool
    challenges: str | None


class ConflictAxis(TypedDict):
    explicit: str | None  # from the challenges field
    inferred: str | None  # from shared keywords
    resolved: str


class ConflictInfo(TypedDict):
    id: str  # "<lower id>_<higher id>"
    claim_a: ConflictClaim
    claim_b: ConflictClaim
    axis: ConflictAxis
    combined_support: int
    support_delta: int
    dynamics: Dynamics  # delta < 0.15 * model_count
    is_both_high_support: bool
    is_high_vs_low: bool
    involves_challenger: bool
    involves_anchor: bool
    involves_keystone: bool
    stakes: dict[str, str]  # choosing_a, choosing_b
    significance: float
    cluster_id: str | None


class ConflictCluster(TypedDict):
    id: str
    axis: str
    target_id: str
    challenger_ids: list[str]
    theme: str


class TradeoffPair(TypedDict):
    claim_a: ClaimRef
    claim_b: ClaimRef
    symmetry: str  # both_consensus | both_singular | asymmetric


class ConvergencePoint(TypedDict):
    target_id: str
    target_label: str
    source_ids: list[str]
    source_labels: list[str]
    edge_type: str  # prerequisite | supports


class GhostAnalysis(TypedDict):
    count: int
    may_extend_challenger: bool
    challenger_ids: list[str]


class StructuralPatterns(TypedDict):
    leverage_inversions: list[LeverageInversion]
    cascade_risks: list[CascadeRisk]
    conflicts: list[ConflictPair]
    conflict_infos: list[ConflictInfo]
    conflict_clusters: list[ConflictCluster]
    tradeoffs: list[TradeoffPair]
    convergence_points: list[ConvergencePoint]
    isolated_claims: list[str]


# --- Secondary patterns ---


class PatternClaim(TypedDict):
    id: str
    label: str
    support_ratio: float


class DissentVoice(TypedDict):
    id: str
    label: str
    text: str
    support_ratio: float
    insight_type: str  # InsightType value
    targets: list[str]
    insight_score: float


class StrongestVoice(TypedDict):
    id: str
    label: str
    text: str
    support_ratio: float
    why_it_matters: str
    insight_type: str


class DissentPatternData(TypedDict):
    voices: list[DissentVoice]
    strongest_voice: StrongestVoice | None
    suppressed_dimensions: list[str]


class ChallengedPatternData(TypedDict):
    challenges: list[dict[str, PatternClaim]]  # {"challenger": ..., "target": ...}


class KeystonePatternData(TypedDict):
    keystone: PatternClaim
    dependents: list[str]
    cascade_size: int
    challengers: list[str]


class ChainPatternData(TypedDict):
    chain: list[str]
    length: int
    weak_links: list[str]


class FragilePatternData(TypedDict):
    fragilities: list[dict[str, dict]]  # {"peak": {...}, "weak_foundation": {...}}


class ConditionalPatternData(TypedDict):
    conditions: list[dict]  # {"id", "label", "branches"}


class OrphanedPatternData(TypedDict):
    orphans: list[dict]  # {"id", "label", "support_ratio", "reason"}


class SecondaryPattern(TypedDict):
    type: str  # PatternType value
    severity: str  # Severity value
    data: (
        DissentPatternData
        | ChallengedPatternData
        | KeystonePatternData
        | ChainPatternData
        | FragilePatternData
        | ConditionalPatternData
        | OrphanedPatternData
    )


class PeakSummary(TypedDict):
    id: str
    label: str
    support_ratio: float


class PrimaryClassification(TypedDict):
    primary: str  # PrimaryShape value
    confidence: float
    evidence: list[str]
    peak_relationship: str  # PeakRelationship value


class CompositeShape(TypedDict):
    """Primary classification plus secondary patterns, before shape data."""

    primary: str
    confidence: float
    patterns: list[SecondaryPattern]
    peaks: list[PeakSummary]
    peak_relationship: str
    peak_pair_relations: list[PeakPairRelationship]
    evidence: list[str]
    transfer_question: str


# --- Shape data building blocks ---


class FloorClaim(TypedDict):
    id: str
    label: str
    text: str
    support_count: int
    support_ratio: float
    is_contested: bool
    contested_by: list[str]


class ChallengerInfo(TypedDict):
    id: str
    label: str
    text: str
    support_count: int
    challenges: str | None
    targets_claim: str | None


class SupportingClaim(TypedDict):
    id: str
    label: str
    relationship: str  # supports | prerequisite


class ConflictPosition(TypedDict):
    claim: ConflictClaim
    supporting_claims: list[SupportingClaim]
    support_rationale: str


class CentralConflictIndividual(TypedDict):
    type: Literal["individual"]
    axis: str
    position_a: ConflictPosition
    position_b: ConflictPosition
    dynamics: Dynamics
    stakes: dict[str, str]


class ChallengerGroup(TypedDict):
    claims: list[ConflictClaim]
    common_theme: str
    supporting_claims: list[SupportingClaim]


class CentralConflictCluster(TypedDict):
    type: Literal["cluster"]
    axis: str
    target: ConflictPosition
    challengers: ChallengerGroup
    dynamics: Literal["one_vs_many"]
    stakes: dict[str, str]


CentralConflict = CentralConflictIndividual | CentralConflictCluster


class TradeoffOption(TypedDict):
    id: str
    label: str
    text: str
    support_count: int
    support_ratio: float


class ClusterMember(TypedDict):
    id: str
    label: str
    text: str
    support_count: int


class DimensionCluster(TypedDict):
    id: str
    theme: str
    claims: list[ClusterMember]
    cohesion: float
    avg_support: float


class StrongestOutlier(TypedDict):
    claim: TradeoffOption
    reason: str  # leverage_inversion | explicit_challenger | minority_voice
    structural_role: str
    what_it_questions: str


# --- Shape data payloads (tagged by "shape") ---


class ConvergentShapeData(TypedDict):
    shape: Literal["convergent"]
    floor: list[FloorClaim]
    floor_strength: str  # strong | moderate | weak
    challengers: list[ChallengerInfo]
    blind_spots: list[str]
    confidence: float
    strongest_outlier: StrongestOutlier | None
    floor_assumptions: list[str]
    transfer_question: str


class ForkedFloor(TypedDict):
    exists: bool
    claims: list[FloorClaim]
    strength: str  # strong | weak | absent
    is_contradictory: bool


class ForkedShapeData(TypedDict):
    shape: Literal["forked"]
    central_conflict: CentralConflict
    secondary_conflicts: list[ConflictInfo]
    floor: ForkedFloor
    fragilities: dict[str, list]  # leverage_inversions, articulation_points
    collapsing_question: str | None


class TradeoffEntry(TypedDict):
    id: str
    option_a: TradeoffOption
    option_b: TradeoffOption
    symmetry: str  # both_high | both_low | asymmetric
    governing_factor: str | None


class ConstrainedShapeData(TypedDict):
    shape: Literal["constrained"]
    tradeoffs: list[TradeoffEntry]
    dominated_options: list[dict[str, str]]
    floor: list[FloorClaim]


class DimensionInteraction(TypedDict):
    dimension_a: str
    dimension_b: str
    relationship: str  # independent | overlapping | conflicting


class ParallelShapeData(TypedDict):
    shape: Literal["parallel"]
    dimensions: list[DimensionCluster]
    interactions: list[DimensionInteraction]
    gaps: list[str]
    governing_conditions: list[str]
    dominant_dimension: DimensionCluster | None
    hidden_dimension: DimensionCluster | None
    dominant_blind_spots: list[str]
    transfer_question: str


class SparseShapeData(TypedDict):
    shape: Literal["sparse"]
    strongest_signals: list[dict]  # {"id", "label", "text", "support_count", "reason"}
    loose_clusters: list[DimensionCluster]
    isolated_claims: list[dict[str, str]]
    clarifying_questions: list[str]
    signal_strength: float
    outer_boundary: dict | None
    sparsity_reasons: list[str]
    transfer_question: str


ShapeData = (
    ConvergentShapeData | ForkedShapeData | ConstrainedShapeData | ParallelShapeData | SparseShapeData
)


# --- Outputs ---


class ProblemStructure(TypedDict):
    """The sole externally consumed output. Treat as read-only."""

    primary: str  # PrimaryShape value
    confidence: float
    patterns: list[SecondaryPattern]
    peaks: list[PeakSummary]
    peak_relationship: str
    peak_pair_relations: list[PeakPairRelationship]
    evidence: list[str]
    transfer_question: str
    data: ShapeData
    signal_strength: float
    floor_assumptions: list[str] | None
    central_conflict: str | None
    tradeoffs: list[str] | None


class StructuralAnalysis(TypedDict):
    edges: list[Edge]
    landscape: LandscapeMetrics
    claims_with_leverage: list[EnrichedClaim]
    patterns: StructuralPatterns
    ghost_analysis: GhostAnalysis
    graph: GraphAnalysis
    ratios: CoreRatios
    shape: ProblemStructure
    diagnostics: list[str]
    shadow: NotRequired[ShadowResult]


# --- Shadow pass ---


class ShadowStatement(TypedDict):
    text: str
    primary_type: str  # StatementType value
    secondary_types: list[str]
    confidence: float
    source_model: int
    sentence_index: int
    matched_patterns: list[str]
    soft_exclusions: list[str]
    reverse_dependency: NotRequired[bool]  # prerequisites only


class DisqualifiedStatement(TypedDict):
    text: str
    attempted_type: str
    source_model: int
    disqualified_by: str
    reason: str


class TypeStats(TypedDict):
    pass1: int
    pass2: int
    disqualified: int


class ExtractionStats(TypedDict):
    total_sentences: int
    pass1_candidates: int
    pass2_validated: int
    pass2_disqualified: int
    survival_rate: float
    by_type: dict[str, TypeStats]


class ShadowExtraction(TypedDict):
    validated: dict[str, list[ShadowStatement]]  # keyed by StatementType value
    disqualified: list[DisqualifiedStatement]
    stats: ExtractionStats
    processing_time: float  # seconds


class UnindexedStatement(TypedDict):
    text: str
    type: str
    secondary_types: list[str]
    confidence: float
    query_relevance: float
    adjusted_score: float  # confidence * query_relevance * type weight
    source_models: list[int]
    reason: str


class ShadowAudit(TypedDict):
    extraction: dict[str, float]
    shadow_counts: dict[str, int]
    primary_counts: dict[str, int]
    gaps: dict[str, int]
    type_survival: dict[str, dict[str, float]]
    query_intent: str


class ShadowDelta(TypedDict):
    audit: ShadowAudit
    unindexed: list[UnindexedStatement]
    processing_time: float


class ShadowResult(TypedDict):
    audit: ShadowAudit
    unindexed: list[UnindexedStatement]
    top_unindexed: list[UnindexedStatement]
    processing_time: float


# --- Observability ---


class AnalysisEvent(TypedDict):
    """One line in the JSONL run log."""

    node: str
    ts: str  # ISO 8601
    elapsed_s: float
    inputs_summary: dict[str, int]
    outputs_summary: dict[str, int]
