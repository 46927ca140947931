"""Pairwise relation analysis — conflicts, tradeoffs, cascades, convergence.

Each detector takes already-normalized edges (no dangling endpoints) and the
enriched claim population, and returns fresh records. Conflicts and tradeoffs
are reported once per unordered claim pair even when the input carries both
directions.
"""

from __future__ import annotations

from collections import deque

from deliberation_shape.contracts import (
    CascadeRisk,
    ClaimRef,
    ConflictCluster,
    ConflictClaim,
    ConflictInfo,
    ConflictPair,
    ConvergencePoint,
    Edge,
    EnrichedClaim,
    GhostAnalysis,
    LeverageInversion,
    TradeoffPair,
)
from deliberation_shape.utils.text import shared_keywords

SYMMETRY_RATIO_DELTA = 0.15


def _ref(claim: EnrichedClaim) -> ClaimRef:
    return ClaimRef(id=claim["id"], label=claim["label"], supporter_count=len(claim["supporters"]))


def _pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a < b else (b, a)


def tension_dynamics(a: EnrichedClaim, b: EnrichedClaim) -> str:
    """Symmetric when support ratios differ by less than 0.15."""
    delta = abs(a["support_ratio"] - b["support_ratio"])
    return "symmetric" if delta < SYMMETRY_RATIO_DELTA else "asymmetric"


# ============================================================
# Cascades
# ============================================================


def detect_cascade_risks(edges: list[Edge], labels: dict[str, str]) -> list[CascadeRisk]:
    """Transitive prerequisite dependents of every claim that enables something.

    Breadth-first closure; depth is the deepest BFS level reached. The source
    itself is never its own dependent, even on a cycle.
    """
    by_source: dict[str, list[str]] = {}
    for e in edges:
        if e["type"] == "prerequisite":
            by_source.setdefault(e["from"], []).append(e["to"])

    risks: list[CascadeRisk] = []
    for source_id, direct in by_source.items():
        seen: set[str] = {source_id}
        dependents: list[str] = []
        depth = 0
        queue: deque[tuple[str, int]] = deque((d, 1) for d in direct)
        while queue:
            current, level = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            dependents.append(current)
            depth = max(depth, level)
            queue.extend((nxt, level + 1) for nxt in by_source.get(current, []))

        risks.append(
            CascadeRisk(
                source_id=source_id,
                source_label=labels.get(source_id, source_id),
                dependent_ids=dependents,
                dependent_labels=[labels.get(d, d) for d in dependents],
                depth=depth,
            )
        )
    return risks


# ============================================================
# Simple pair detectors
# ============================================================


def detect_leverage_inversions(
    claims: list[EnrichedClaim], edges: list[Edge], top_ids: set[str]
) -> list[LeverageInversion]:
    """Explain each flagged leverage inversion with the structural reason behind it."""
    inversions: list[LeverageInversion] = []
    for claim in claims:
        if not claim["is_leverage_inversion"]:
            continue
        prereq_to = [
            e["to"] for e in edges if e["from"] == claim["id"] and e["type"] == "prerequisite"
        ]
        top_targets = [t for t in prereq_to if t in top_ids]

        if claim["role"] == "challenger" and top_targets:
            reason, affected = "challenger_prerequisite_to_consensus", top_targets
        elif prereq_to:
            reason, affected = "singular_foundation", prereq_to
        elif claim["leverage_factors"]["connectivity_weight"] > claim["leverage"] * 0.4:
            reason, affected = "high_connectivity_low_support", []
        else:
            continue

        inversions.append(
            LeverageInversion(
                claim_id=claim["id"],
                claim_label=claim["label"],
                supporter_count=len(claim["supporters"]),
                reason=reason,
                affected_claims=affected,
            )
        )
    return inversions


def detect_conflicts(
    edges: list[Edge], claim_map: dict[str, EnrichedClaim], top_ids: set[str]
) -> list[ConflictPair]:
    pairs: list[ConflictPair] = []
    seen: set[tuple[str, str]] = set()
    for e in edges:
        if e["type"] != "conflicts":
            continue
        key = _pair_key(e["from"], e["to"])
        if key in seen:
            continue
        seen.add(key)
        a, b = claim_map[e["from"]], claim_map[e["to"]]
        pairs.append(
            ConflictPair(
                claim_a=_ref(a),
                claim_b=_ref(b),
                is_both_consensus=a["id"] in top_ids and b["id"] in top_ids,
                dynamics=tension_dynamics(a, b),
            )
        )
    return pairs


def detect_tradeoffs(
    edges: list[Edge], claim_map: dict[str, EnrichedClaim], top_ids: set[str]
) -> list[TradeoffPair]:
    pairs: list[TradeoffPair] = []
    seen: set[tuple[str, str]] = set()
    for e in edges:
        if e["type"] != "tradeoff":
            continue
        key = _pair_key(e["from"], e["to"])
        if key in seen:
            continue
        seen.add(key)
        a, b = claim_map[e["from"]], claim_map[e["to"]]
        a_top, b_top = a["id"] in top_ids, b["id"] in top_ids
        if a_top and b_top:
            symmetry = "both_consensus"
        elif not a_top and not b_top:
            symmetry = "both_singular"
        else:
            symmetry = "asymmetric"
        pairs.append(TradeoffPair(claim_a=_ref(a), claim_b=_ref(b), symmetry=symmetry))
    return pairs


def detect_convergence_points(
    edges: list[Edge], claim_map: dict[str, EnrichedClaim]
) -> list[ConvergencePoint]:
    """Targets reached by two or more sources over the same reinforcing edge type."""
    groups: dict[tuple[str, str], list[str]] = {}
    for e in edges:
        if e["type"] in ("prerequisite", "supports"):
            sources = groups.setdefault((e["to"], e["type"]), [])
            if e["from"] not in sources:
                sources.append(e["from"])

    points: list[ConvergencePoint] = []
    for (target_id, edge_type), sources in groups.items():
        if len(sources) < 2:
            continue
        points.append(
            ConvergencePoint(
                target_id=target_id,
                target_label=claim_map[target_id]["label"],
                source_ids=sources,
                source_labels=[claim_map[s]["label"] for s in sources],
                edge_type=edge_type,
            )
        )
    return points


def detect_isolated_claims(claims: list[EnrichedClaim]) -> list[str]:
    return [c["id"] for c in claims if c["is_isolated"]]


def analyze_ghosts(ghosts: list[str], claims: list[EnrichedClaim]) -> GhostAnalysis:
    challengers = [c["id"] for c in claims if c["role"] == "challenger" or c["is_challenger"]]
    return GhostAnalysis(
        count=len(ghosts),
        may_extend_challenger=bool(ghosts) and bool(challengers),
        challenger_ids=challengers,
    )


# ============================================================
# Enriched conflicts and clusters
# ============================================================


def conflict_claim(claim: EnrichedClaim) -> ConflictClaim:
    return ConflictClaim(
        id=claim["id"],
        label=claim["label"],
        text=claim["text"],
        support_count=len(claim["supporters"]),
        support_ratio=claim["support_ratio"],
        role=claim["role"],
        is_high_support=claim["is_high_support"],
        challenges=claim.get("challenges"),
    )


def _explicit_axis(c1: EnrichedClaim, c2: EnrichedClaim) -> str | None:
    if c1.get("challenges") == c2["id"]:
        return f"{c1['label']} disputes {c2['label']}"
    if c2.get("challenges") == c1["id"]:
        return f"{c2['label']} disputes {c1['label']}"
    return None


def _inferred_axis(c1: EnrichedClaim, c2: EnrichedClaim) -> str | None:
    keywords = shared_keywords(c1["text"], c2["text"])
    if not keywords:
        return None
    return "Disagreement over " + ", ".join(keywords)


def detect_enriched_conflicts(
    edges: list[Edge], claims: list[EnrichedClaim], model_count: int
) -> list[ConflictInfo]:
    """One ConflictInfo per conflicting pair, ids sorted so output is stable.

    significance = combined support + 2 if both high-support + 3 if a keystone is involved
    """
    claim_map = {c["id"]: c for c in claims}
    infos: list[ConflictInfo] = []
    seen: set[tuple[str, str]] = set()

    for e in edges:
        if e["type"] != "conflicts":
            continue
        key = _pair_key(e["from"], e["to"])
        if key in seen:
            continue
        seen.add(key)
        c1, c2 = claim_map[key[0]], claim_map[key[1]]

        n1, n2 = len(c1["supporters"]), len(c2["supporters"])
        combined = n1 + n2
        delta = abs(n1 - n2)
        both_high = c1["is_high_support"] and c2["is_high_support"]
        involves_keystone = c1["is_keystone"] or c2["is_keystone"]

        explicit = _explicit_axis(c1, c2)
        inferred = _inferred_axis(c1, c2)

        infos.append(
            ConflictInfo(
                id=f"{c1['id']}_{c2['id']}",
                claim_a=conflict_claim(c1),
                claim_b=conflict_claim(c2),
                axis={
                    "explicit": explicit,
                    "inferred": inferred,
                    "resolved": explicit or inferred or f"{c1['label']} vs {c2['label']}",
                },
                combined_support=combined,
                support_delta=delta,
                dynamics="symmetric" if delta < model_count * 0.15 else "asymmetric",
                is_both_high_support=both_high,
                is_high_vs_low=c1["is_high_support"] != c2["is_high_support"],
                involves_challenger="challenger" in (c1["role"], c2["role"]),
                involves_anchor="anchor" in (c1["role"], c2["role"]),
                involves_keystone=involves_keystone,
                stakes={
                    "choosing_a": f"Accepting {c1['label']}",
                    "choosing_b": f"Accepting {c2['label']}",
                },
                significance=combined + (2 if both_high else 0) + (3 if involves_keystone else 0),
                cluster_id=None,
            )
        )
    return infos


def detect_conflict_clusters(
    conflicts: list[ConflictInfo], claims: list[EnrichedClaim]
) -> list[ConflictCluster]:
    """Group conflicts around a claim attacked from two or more sides.

    A cluster forms when at least one opponent is a challenger or the target is
    high-support. Member conflicts get their cluster_id set in place.
    """
    claim_map = {c["id"]: c for c in claims}
    occurrence: dict[str, list[ConflictInfo]] = {}
    for conflict in conflicts:
        for cid in (conflict["claim_a"]["id"], conflict["claim_b"]["id"]):
            occurrence.setdefault(cid, []).append(conflict)

    clusters: list[ConflictCluster] = []
    for target_id, involved in occurrence.items():
        if len(involved) < 2:
            continue
        target = claim_map[target_id]
        opponents = [
            c["claim_b"]["id"] if c["claim_a"]["id"] == target_id else c["claim_a"]["id"]
            for c in involved
        ]
        is_targeted = any(claim_map[o]["role"] == "challenger" for o in opponents)
        if not (is_targeted or target["is_high_support"]):
            continue

        cluster_id = f"cluster_{target_id}"
        clusters.append(
            ConflictCluster(
                id=cluster_id,
                axis=f"Contestation of {target['label']}",
                target_id=target_id,
                challenger_ids=opponents,
                theme="Shared disagreement",
            )
        )
        for conflict in involved:
            conflict["cluster_id"] = cluster_id

    return clusters
