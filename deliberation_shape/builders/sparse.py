"""Sparse shape data — the strongest signals in a landscape without a peak.

Also the universal fallback: it must produce a valid payload for any input,
including zero claims.
"""

from __future__ import annotations

from deliberation_shape.builders.common import dimension_cluster
from deliberation_shape.classify.peaks import PEAK_THRESHOLD
from deliberation_shape.contracts import (
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    SparseShapeData,
)
from deliberation_shape.utils.percentile import get_top_n_count, is_in_top_percentile

MAX_SIGNALS = 3
SIGNAL_SHARE = 0.3


def _signal_reason(claim: EnrichedClaim, ratios: list[float]) -> str:
    if is_in_top_percentile(claim["support_ratio"], ratios, SIGNAL_SHARE) and claim["is_high_support"]:
        return f"Among the best-supported claims ({round(claim['support_ratio'] * 100)}% of models)"
    if not claim["is_isolated"]:
        return "Connected to other claims despite modest support"
    return "Best available signal"


def _sparsity_reasons(
    claims: list[EnrichedClaim], edges: list[Edge], graph: GraphAnalysis, ghosts: list[str]
) -> list[str]:
    if not claims:
        return ["No claims were extracted"]
    reasons: list[str] = []
    if max(c["support_ratio"] for c in claims) < PEAK_THRESHOLD:
        reasons.append("No claim reaches majority support")
    if graph["component_count"] > 1:
        reasons.append(f"Claims split into {graph['component_count']} disconnected groups")
    isolated = sum(1 for c in claims if c["is_isolated"])
    if isolated:
        reasons.append(f"{isolated} claim(s) have no relation to any other claim")
    if not edges:
        reasons.append("No relations between claims were identified")
    if ghosts:
        reasons.append(f"{len(ghosts)} topic(s) were left unaddressed by every model")
    return reasons


def build_sparse_data(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    graph: GraphAnalysis,
    ghosts: list[str],
    signal_strength: float,
) -> SparseShapeData:
    claim_map = {c["id"]: c for c in claims}
    ratios = [c["support_ratio"] for c in claims]

    ranked = sorted(claims, key=lambda c: (c["support_ratio"], c["leverage"]), reverse=True)
    signal_count = min(MAX_SIGNALS, get_top_n_count(len(claims), SIGNAL_SHARE)) if claims else 0
    strongest = [
        {
            "id": c["id"],
            "label": c["label"],
            "text": c["text"],
            "support_count": len(c["supporters"]),
            "reason": _signal_reason(c, ratios),
        }
        for c in ranked[:signal_count]
    ]

    clusters = [
        dimension_cluster(f"cluster_{i + 1}", [claim_map[cid] for cid in component], edges)
        for i, component in enumerate(c for c in graph["components"] if len(c) >= 2)
    ]

    outer_boundary = None
    if len(claims) > 1:
        # Least supported claim; the most leveraged one wins ties
        edge_claim = min(claims, key=lambda c: (c["support_ratio"], -c["leverage"]))
        outer_boundary = {
            "id": edge_claim["id"],
            "label": edge_claim["label"],
            "text": edge_claim["text"],
            "support_count": len(edge_claim["supporters"]),
            "distance_reason": (
                f"Lowest support in the set ({round(edge_claim['support_ratio'] * 100)}% of models)"
            ),
        }

    questions = [f"What about {ghost}?" for ghost in ghosts]
    if not questions and claims:
        questions.append("Which of these directions is closest to what you are asking?")

    if strongest:
        transfer = f'What would make "{strongest[0]["label"]}" the right starting point?'
    else:
        transfer = "What additional context would narrow this question down?"

    return SparseShapeData(
        shape="sparse",
        strongest_signals=strongest,
        loose_clusters=clusters,
        isolated_claims=[
            {"id": c["id"], "label": c["label"], "text": c["text"]}
            for c in claims
            if c["is_isolated"]
        ],
        clarifying_questions=questions,
        signal_strength=signal_strength,
        outer_boundary=outer_boundary,
        sparsity_reasons=_sparsity_reasons(claims, edges, graph, ghosts),
        transfer_question=transfer,
    )
