"""Structural analysis engine — one pure function from mapper artifact to analysis.

Pipeline (strictly sequential, no I/O):
  normalize -> enrich -> cascades -> top claims -> flags -> graph -> ratios
  -> pairwise patterns -> composite shape -> shape data

Every well-typed input yields a structurally valid result. Builder
preconditions that fail degrade to a neighboring shape; unexpected builder
errors fall back to the sparse builder. Both are reported in `diagnostics`.
"""

from __future__ import annotations

import sys
from typing import Any, assert_never

from deliberation_shape.builders.constrained import build_constrained_data
from deliberation_shape.builders.convergent import build_convergent_data
from deliberation_shape.builders.forked import build_forked_data
from deliberation_shape.builders.parallel import build_parallel_data
from deliberation_shape.builders.sparse import build_sparse_data
from deliberation_shape.classify.composite import detect_composite_shape
from deliberation_shape.contracts import (
    CompositeShape,
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    PrimaryShape,
    ProblemStructure,
    ShapeData,
    StructuralAnalysis,
    StructuralPatterns,
)
from deliberation_shape.normalize import normalize_artifact
from deliberation_shape.patterns.relations import (
    analyze_ghosts,
    detect_cascade_risks,
    detect_conflict_clusters,
    detect_conflicts,
    detect_convergence_points,
    detect_enriched_conflicts,
    detect_isolated_claims,
    detect_leverage_inversions,
    detect_tradeoffs,
)
from deliberation_shape.scoring.enrichment import compute_claim_ratios
from deliberation_shape.scoring.flags import assign_percentile_flags, top_claim_ids
from deliberation_shape.scoring.landscape import (
    compute_core_ratios,
    compute_landscape_metrics,
    compute_signal_strength,
)
from deliberation_shape.topology.graph_analysis import analyze_graph


class _ShapeInputs:
    """Everything a shape builder may need, gathered once."""

    def __init__(
        self,
        claims: list[EnrichedClaim],
        edges: list[Edge],
        ghosts: list[str],
        graph: GraphAnalysis,
        patterns: StructuralPatterns,
        signal_strength: float,
    ) -> None:
        self.claims = claims
        self.edges = edges
        self.ghosts = ghosts
        self.graph = graph
        self.patterns = patterns
        self.signal_strength = signal_strength

    def sparse(self) -> ShapeData:
        return build_sparse_data(
            self.claims, self.edges, self.graph, self.ghosts, self.signal_strength
        )

    def convergent(self) -> ShapeData:
        return build_convergent_data(self.claims, self.edges, self.ghosts)

    def forked(self) -> ShapeData:
        return build_forked_data(self.claims, self.edges, self.patterns, self.graph)

    def constrained(self) -> ShapeData:
        return build_constrained_data(self.claims, self.edges, self.patterns["tradeoffs"])

    def parallel(self) -> ShapeData:
        return build_parallel_data(self.claims, self.edges, self.graph, self.ghosts)


def _select_shape_data(
    primary: str, inputs: _ShapeInputs, diagnostics: list[str]
) -> ShapeData:
    """Apply the local correction rules, then call the matching builder."""
    patterns = inputs.patterns
    has_conflicts = bool(patterns["conflict_infos"]) or bool(patterns["conflict_clusters"])

    shape = PrimaryShape(primary)
    match shape:
        case PrimaryShape.CONVERGENT:
            return inputs.convergent()
        case PrimaryShape.FORKED:
            if not has_conflicts:
                diagnostics.append("forked shape has no conflicts; built as convergent")
                return inputs.convergent()
            return inputs.forked()
        case PrimaryShape.CONSTRAINED:
            if not patterns["tradeoffs"]:
                if patterns["conflict_infos"]:
                    diagnostics.append("constrained shape has no tradeoffs; built as forked")
                    return inputs.forked()
                diagnostics.append("constrained shape has no tradeoffs or conflicts; built as sparse")
                return inputs.sparse()
            return inputs.constrained()
        case PrimaryShape.PARALLEL:
            if inputs.graph["component_count"] < 2:
                diagnostics.append("parallel shape has fewer than two components; built as convergent")
                return inputs.convergent()
            return inputs.parallel()
        case PrimaryShape.SPARSE:
            return inputs.sparse()
        case _:
            assert_never(shape)


def _build_shape_data(primary: str, inputs: _ShapeInputs, diagnostics: list[str]) -> ShapeData:
    try:
        return _select_shape_data(primary, inputs, diagnostics)
    except Exception as exc:
        message = f"{primary} shape builder failed ({type(exc).__name__}: {exc}); built as sparse"
        print(f"WARNING: {message}", file=sys.stderr)
        diagnostics.append(message)
        return inputs.sparse()


def _convenience_fields(data: ShapeData) -> dict[str, Any]:
    """Flatten the most-used parts of the payload, keyed by payload shape."""
    fields: dict[str, Any] = {"floor_assumptions": None, "central_conflict": None, "tradeoffs": None}
    match data["shape"]:
        case "convergent":
            fields["floor_assumptions"] = list(data["floor_assumptions"])
        case "forked":
            fields["central_conflict"] = data["collapsing_question"]
        case "constrained":
            fields["tradeoffs"] = [
                t["governing_factor"] or f"{t['option_a']['label']} vs {t['option_b']['label']}"
                for t in data["tradeoffs"]
            ]
        case "parallel" | "sparse":
            pass
        case other:
            assert_never(other)
    return fields


def _assemble_shape(
    composite: CompositeShape, data: ShapeData, signal_strength: float
) -> ProblemStructure:
    return ProblemStructure(
        primary=composite["primary"],
        confidence=composite["confidence"],
        patterns=composite["patterns"],
        peaks=composite["peaks"],
        peak_relationship=composite["peak_relationship"],
        peak_pair_relations=composite["peak_pair_relations"],
        evidence=composite["evidence"],
        transfer_question=composite["transfer_question"],
        data=data,
        signal_strength=signal_strength,
        **_convenience_fields(data),
    )


def compute_structural_analysis(artifact: Any) -> StructuralAnalysis:
    """Full structural analysis of one mapper artifact.

    Accepts anything; malformed parts are normalized away and reported in
    the result's `diagnostics`. The result is built from fresh objects on
    every call and should be treated as read-only.
    """
    normalized = normalize_artifact(artifact)
    claims, edges, ghosts = normalized.claims, normalized.edges, normalized.ghosts
    diagnostics = list(normalized.diagnostics)

    landscape = compute_landscape_metrics(claims, normalized.model_count)
    model_count = landscape["model_count"]

    with_ratios = [compute_claim_ratios(c, edges, model_count) for c in claims]
    labels = {c["id"]: c["label"] for c in with_ratios}
    cascade_risks = detect_cascade_risks(edges, labels)
    top_ids = top_claim_ids(with_ratios)
    enriched = assign_percentile_flags(with_ratios, edges, cascade_risks, top_ids)
    claim_map = {c["id"]: c for c in enriched}

    graph = analyze_graph([c["id"] for c in claims], edges, enriched)
    ratios = compute_core_ratios(enriched, edges, graph, model_count)

    conflict_infos = detect_enriched_conflicts(edges, enriched, model_count)
    conflict_clusters = detect_conflict_clusters(conflict_infos, enriched)
    patterns = StructuralPatterns(
        leverage_inversions=detect_leverage_inversions(enriched, edges, top_ids),
        cascade_risks=cascade_risks,
        conflicts=detect_conflicts(edges, claim_map, top_ids),
        conflict_infos=conflict_infos,
        conflict_clusters=conflict_clusters,
        tradeoffs=detect_tradeoffs(edges, claim_map, top_ids),
        convergence_points=detect_convergence_points(edges, claim_map),
        isolated_claims=detect_isolated_claims(enriched),
    )

    signal_strength = compute_signal_strength(
        len(enriched), len(edges), model_count, [c["supporters"] for c in enriched]
    )
    composite = detect_composite_shape(enriched, edges, graph, patterns)

    inputs = _ShapeInputs(enriched, edges, ghosts, graph, patterns, signal_strength)
    data = _build_shape_data(composite["primary"], inputs, diagnostics)

    return StructuralAnalysis(
        edges=edges,
        landscape=landscape,
        claims_with_leverage=enriched,
        patterns=patterns,
        ghost_analysis=analyze_ghosts(ghosts, enriched),
        graph=graph,
        ratios=ratios,
        shape=_assemble_shape(composite, data, signal_strength),
        diagnostics=diagnostics,
    )


def compute_problem_structure(artifact: Any) -> ProblemStructure:
    """Only the shape of the answer, for callers that need nothing else."""
    return compute_structural_analysis(artifact)["shape"]
