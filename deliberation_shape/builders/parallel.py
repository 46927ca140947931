"""Parallel shape data — independent dimensions and how they interact.

One dimension per connected component. The hidden dimension (least supported,
other than the dominant one) is always placed last in the list.
"""

from __future__ import annotations

from itertools import combinations

from deliberation_shape.builders.common import ShapeBuildError, dimension_cluster
from deliberation_shape.contracts import (
    DimensionCluster,
    DimensionInteraction,
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    ParallelShapeData,
)

OVERLAP_THRESHOLD = 0.5


def _supporters(dim: DimensionCluster, claim_map: dict[str, EnrichedClaim]) -> set[int]:
    return {s for member in dim["claims"] for s in claim_map[member["id"]]["supporters"]}


def _interaction(
    a: DimensionCluster, b: DimensionCluster, claim_map: dict[str, EnrichedClaim]
) -> str:
    ids_a = {m["id"] for m in a["claims"]}
    ids_b = {m["id"] for m in b["claims"]}
    crosses = any(claim_map[cid].get("challenges") in ids_b for cid in ids_a) or any(
        claim_map[cid].get("challenges") in ids_a for cid in ids_b
    )
    if crosses:
        return "conflicting"

    sup_a, sup_b = _supporters(a, claim_map), _supporters(b, claim_map)
    union = sup_a | sup_b
    if union and len(sup_a & sup_b) / len(union) >= OVERLAP_THRESHOLD:
        return "overlapping"
    return "independent"


def build_parallel_data(
    claims: list[EnrichedClaim], edges: list[Edge], graph: GraphAnalysis, ghosts: list[str]
) -> ParallelShapeData:
    if graph["component_count"] < 2:
        raise ShapeBuildError("parallel shape requires at least two components")

    claim_map = {c["id"]: c for c in claims}
    dimensions = [
        dimension_cluster(f"dim_{i + 1}", [claim_map[cid] for cid in component], edges)
        for i, component in enumerate(graph["components"])
    ]

    dominant = max(dimensions, key=lambda d: (d["avg_support"], len(d["claims"])))
    others = [d for d in dimensions if d["id"] != dominant["id"]]
    hidden = min(others, key=lambda d: d["avg_support"]) if others else None
    if hidden is not None:
        dimensions = [d for d in dimensions if d["id"] != hidden["id"]] + [hidden]

    interactions = [
        DimensionInteraction(
            dimension_a=a["id"], dimension_b=b["id"], relationship=_interaction(a, b, claim_map)
        )
        for a, b in combinations(dimensions, 2)
    ]

    dominant_supporters = _supporters(dominant, claim_map)
    blind_spots = [
        d["theme"]
        for d in others
        if dominant_supporters.isdisjoint(_supporters(d, claim_map))
    ]

    if hidden is not None:
        transfer = f'Does "{hidden["theme"]}" change how much "{dominant["theme"]}" matters to you?'
    else:
        transfer = "Which of these separate dimensions matters most for your decision?"

    return ParallelShapeData(
        shape="parallel",
        dimensions=dimensions,
        interactions=interactions,
        gaps=list(ghosts),
        governing_conditions=[c["label"] for c in claims if c["type"] == "conditional"],
        dominant_dimension=dominant,
        hidden_dimension=hidden,
        dominant_blind_spots=blind_spots,
        transfer_question=transfer,
    )
