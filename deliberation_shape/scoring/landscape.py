"""Landscape metrics, core ratios, and signal strength.

Aggregate statistics over the whole claim population. Pure deterministic
computation; every ratio is guarded against empty populations.

Core ratios:
  concentration: max supporter count / model count
  alignment:     reinforcing edges among top claims / all edges among them (None if none)
  tension:       (conflicts + tradeoffs) / all edges
  fragmentation: (components - 1) / (claims - 1)
  depth:         longest prerequisite chain / claims
"""

from __future__ import annotations

from collections import Counter

from deliberation_shape.contracts import (
    Claim,
    CoreRatios,
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    LandscapeMetrics,
)
from deliberation_shape.utils.percentile import get_top_n_count

TOP_SHARE = 0.3


def _dominant(distribution: Counter, default: str) -> str:
    # most_common keeps first-insertion order among ties
    top = distribution.most_common(1)
    return top[0][0] if top else default


def resolve_model_count(claims: list[Claim], explicit: int = 0) -> int:
    """Explicit count when positive, else distinct supporter indices, floored at 1."""
    if explicit > 0:
        return explicit
    distinct = {s for c in claims for s in c["supporters"]}
    return len(distinct) or 1


def compute_landscape_metrics(claims: list[Claim], model_count: int = 0) -> LandscapeMetrics:
    type_distribution = Counter(c["type"] for c in claims)
    role_distribution = Counter(c["role"] for c in claims)

    convergence_ratio = 0.0
    if claims:
        cutoff = get_top_n_count(len(claims), TOP_SHARE)
        counts = sorted((len(c["supporters"]) for c in claims), reverse=True)
        top_level = counts[cutoff - 1] or 1
        convergence_ratio = sum(1 for n in counts if n >= top_level) / len(claims)

    return LandscapeMetrics(
        dominant_type=_dominant(type_distribution, "prescriptive"),
        type_distribution=dict(type_distribution),
        dominant_role=_dominant(role_distribution, "anchor"),
        role_distribution=dict(role_distribution),
        claim_count=len(claims),
        model_count=resolve_model_count(claims, model_count),
        convergence_ratio=round(convergence_ratio, 4),
    )


def compute_core_ratios(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    graph: GraphAnalysis,
    model_count: int,
) -> CoreRatios:
    claim_count = len(claims)
    edge_count = len(edges)

    max_support = max((len(c["supporters"]) for c in claims), default=0)
    concentration = max_support / model_count if model_count > 0 else 0.0

    top_count = get_top_n_count(claim_count, TOP_SHARE)
    by_support = sorted(claims, key=lambda c: len(c["supporters"]), reverse=True)
    top_ids = {c["id"] for c in by_support[:top_count]}
    top_edges = [e for e in edges if e["from"] in top_ids and e["to"] in top_ids]
    alignment: float | None = None
    if top_edges:
        reinforcing = sum(1 for e in top_edges if e["type"] in ("supports", "prerequisite"))
        alignment = round(reinforcing / len(top_edges), 4)

    tension_edges = sum(1 for e in edges if e["type"] in ("conflicts", "tradeoff"))
    tension = tension_edges / edge_count if edge_count else 0.0

    fragmentation = (
        (graph["component_count"] - 1) / (claim_count - 1) if claim_count > 1 else 0.0
    )
    depth = len(graph["longest_chain"]) / claim_count if claim_count else 0.0

    return CoreRatios(
        concentration=round(min(1.0, concentration), 4),
        alignment=alignment,
        tension=round(tension, 4),
        fragmentation=round(fragmentation, 4),
        depth=round(depth, 4),
    )


def compute_signal_strength(
    claim_count: int, edge_count: int, model_count: int, supporters: list[list[int]]
) -> float:
    """How much structure there is to read, in [0, 1].

    0.4 * edge signal + 0.3 * support-variance signal + 0.3 * model coverage.
    """
    if claim_count == 0:
        return 0.0

    min_edges_for_pattern = max(3.0, claim_count * 0.15)
    edge_signal = min(1.0, edge_count / min_edges_for_pattern)

    counts = [len(s) for s in supporters]
    max_support = max(counts + [1])
    normalized = [c / max_support for c in counts]
    mean = sum(normalized) / len(normalized)
    variance = sum((v - mean) ** 2 for v in normalized) / len(normalized)
    support_signal = min(1.0, variance * 5)

    unique_models = {s for group in supporters for s in group}
    coverage_signal = min(1.0, len(unique_models) / max(model_count, 1))

    return round(edge_signal * 0.4 + support_signal * 0.3 + coverage_signal * 0.3, 4)
