"""Forked shape data — the central conflict, what else is disputed, what survives."""

from __future__ import annotations

from deliberation_shape.builders.common import ShapeBuildError, floor_claim, supporting_claims
from deliberation_shape.contracts import (
    CentralConflict,
    CentralConflictCluster,
    CentralConflictIndividual,
    ConflictCluster,
    ConflictInfo,
    Edge,
    EnrichedClaim,
    ForkedFloor,
    ForkedShapeData,
    GraphAnalysis,
    StructuralPatterns,
)
from deliberation_shape.patterns.relations import conflict_claim


def _central_from_cluster(
    cluster: ConflictCluster, claim_map: dict[str, EnrichedClaim], edges: list[Edge]
) -> CentralConflictCluster:
    target = claim_map[cluster["target_id"]]
    challengers = [claim_map[cid] for cid in cluster["challenger_ids"]]

    backing: list = []
    seen: set[str] = set(cluster["challenger_ids"])
    for challenger in challengers:
        for sc in supporting_claims(challenger["id"], edges, claim_map):
            if sc["id"] not in seen:
                seen.add(sc["id"])
                backing.append(sc)

    return CentralConflictCluster(
        type="cluster",
        axis=cluster["axis"],
        target={
            "claim": conflict_claim(target),
            "supporting_claims": supporting_claims(target["id"], edges, claim_map),
            "support_rationale": target["text"],
        },
        challengers={
            "claims": [conflict_claim(c) for c in challengers],
            "common_theme": cluster["theme"],
            "supporting_claims": backing,
        },
        dynamics="one_vs_many",
        stakes={
            "accepting_target": f"Accepting {target['label']}",
            "accepting_challengers": "Breaking consensus",
        },
    )


def _central_from_conflict(
    conflict: ConflictInfo, claim_map: dict[str, EnrichedClaim], edges: list[Edge]
) -> CentralConflictIndividual:
    a, b = conflict["claim_a"], conflict["claim_b"]
    return CentralConflictIndividual(
        type="individual",
        axis=conflict["axis"]["resolved"],
        position_a={
            "claim": a,
            "supporting_claims": supporting_claims(a["id"], edges, claim_map),
            "support_rationale": a["text"],
        },
        position_b={
            "claim": b,
            "supporting_claims": supporting_claims(b["id"], edges, claim_map),
            "support_rationale": b["text"],
        },
        dynamics=conflict["dynamics"],
        stakes=dict(conflict["stakes"]),
    )


def _collapsing_question(central: CentralConflict) -> str:
    if central["type"] == "cluster":
        target = central["target"]["claim"]["label"]
        count = len(central["challengers"]["claims"])
        return f'Does "{target}" survive the objections raised by {count} opposing claims?'
    a = central["position_a"]["claim"]["label"]
    b = central["position_b"]["claim"]["label"]
    return f'What would have to be true for "{a}" to win over "{b}"?'


def build_forked_data(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    patterns: StructuralPatterns,
    graph: GraphAnalysis,
) -> ForkedShapeData:
    conflicts = patterns["conflict_infos"]
    clusters = patterns["conflict_clusters"]
    if not conflicts and not clusters:
        raise ShapeBuildError("forked shape requires at least one conflict")

    claim_map = {c["id"]: c for c in claims}

    central: CentralConflict
    if clusters:
        # Largest cluster; first one wins ties
        top_cluster = max(clusters, key=lambda c: len(c["challenger_ids"]))
        central = _central_from_cluster(top_cluster, claim_map, edges)
        used = {top_cluster["target_id"], *top_cluster["challenger_ids"]}
    else:
        top_conflict = max(conflicts, key=lambda c: c["significance"])
        central = _central_from_conflict(top_conflict, claim_map, edges)
        used = {top_conflict["claim_a"]["id"], top_conflict["claim_b"]["id"]}

    secondary = [
        c for c in conflicts if c["claim_a"]["id"] not in used and c["claim_b"]["id"] not in used
    ]

    floor_claims = [c for c in claims if c["is_high_support"] and c["id"] not in used]
    floor_ids = {c["id"] for c in floor_claims}
    if len(floor_claims) > 2:
        strength = "strong"
    elif floor_claims:
        strength = "weak"
    else:
        strength = "absent"
    is_contradictory = any(
        e["type"] == "conflicts" and e["from"] in floor_ids and e["to"] in floor_ids for e in edges
    )

    return ForkedShapeData(
        shape="forked",
        central_conflict=central,
        secondary_conflicts=secondary,
        floor=ForkedFloor(
            exists=bool(floor_claims),
            claims=[floor_claim(c, edges) for c in floor_claims],
            strength=strength,
            is_contradictory=is_contradictory,
        ),
        fragilities={
            "leverage_inversions": list(patterns["leverage_inversions"]),
            "articulation_points": list(graph["articulation_points"]),
        },
        collapsing_question=_collapsing_question(central),
    )
