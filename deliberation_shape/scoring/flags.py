"""Percentile flagging — population-relative boolean classifications.

Two strictly sequential passes:
  1. build every raw score vector for the whole population
  2. derive thresholds from those vectors, then map each claim through them

Flags are never assigned while vectors are still being built, so thresholds
cannot drift as claims are flagged.
"""

from __future__ import annotations

from deliberation_shape.contracts import CascadeRisk, ClaimRatios, Edge, EnrichedClaim
from deliberation_shape.utils.percentile import (
    get_percentile_threshold,
    get_top_n_count,
)

HIGH_SUPPORT_PCT = 0.3
LOW_SUPPORT_PCT = 0.3
HIGH_LEVERAGE_PCT = 0.25
KEYSTONE_PCT = 0.2
EVIDENCE_GAP_PCT = 0.2
OUTLIER_PCT = 0.2


def top_claim_ids(claims: list[ClaimRatios], ratio: float = HIGH_SUPPORT_PCT) -> set[str]:
    """Ids of the top `ratio` share of claims by support ratio (at least one)."""
    if not claims:
        return set()
    count = get_top_n_count(len(claims), ratio)
    ordered = sorted(claims, key=lambda c: c["support_ratio"], reverse=True)
    return {c["id"] for c in ordered[:count]}


def _evidence_gap_score(claim: ClaimRatios, cascades: dict[str, CascadeRisk]) -> float:
    cascade = cascades.get(claim["id"])
    if cascade is None or not claim["supporters"]:
        return 0.0
    return len(cascade["dependent_ids"]) / len(claim["supporters"])


def assign_percentile_flags(
    claims: list[ClaimRatios],
    edges: list[Edge],
    cascade_risks: list[CascadeRisk],
    top_ids: set[str],
) -> list[EnrichedClaim]:
    """Attach the nine population-relative flags to every claim.

    Low support excludes high support, so a leverage inversion can never be
    flagged high-support even in a population where every ratio is equal.
    """
    cascades = {risk["source_id"]: risk for risk in cascade_risks}

    # --- Pass 1: raw score vectors ---
    support_ratios = [c["support_ratio"] for c in claims]
    leverages = [c["leverage"] for c in claims]
    keystone_scores = [c["keystone_score"] for c in claims]
    skews = [c["support_skew"] for c in claims]
    gap_scores = [_evidence_gap_score(c, cascades) for c in claims]

    # --- Thresholds, fixed before any claim is flagged ---
    high_support_cut = get_percentile_threshold(support_ratios, 1 - HIGH_SUPPORT_PCT)
    low_support_cut = get_percentile_threshold(support_ratios, LOW_SUPPORT_PCT)
    leverage_cut = get_percentile_threshold(leverages, 1 - HIGH_LEVERAGE_PCT)
    keystone_cut = get_percentile_threshold(keystone_scores, 1 - KEYSTONE_PCT)
    gap_cut = get_percentile_threshold(gap_scores, 1 - EVIDENCE_GAP_PCT)
    skew_cut = get_percentile_threshold(skews, 1 - OUTLIER_PCT)

    connected: set[str] = set()
    for e in edges:
        connected.add(e["from"])
        connected.add(e["to"])

    # --- Pass 2: map each claim through the thresholds ---
    flagged: list[EnrichedClaim] = []
    for claim, gap_score in zip(claims, gap_scores):
        cid = claim["id"]
        is_high_support = claim["support_ratio"] >= high_support_cut
        is_low_support = claim["support_ratio"] <= low_support_cut and not is_high_support
        is_high_leverage = claim["leverage"] >= leverage_cut

        prereq_out = sum(1 for e in edges if e["from"] == cid and e["type"] == "prerequisite")
        is_keystone = (
            claim["keystone_score"] >= keystone_cut and claim["out_degree"] >= 2 and prereq_out >= 2
        )

        is_contested = any(
            e["type"] == "conflicts" and cid in (e["from"], e["to"]) for e in edges
        )
        is_conditional = any(e["type"] == "prerequisite" and e["to"] == cid for e in edges)

        challenges_top = claim["role"] == "challenger" and any(
            e["from"] == cid and e["to"] in top_ids and e["type"] in ("conflicts", "prerequisite")
            for e in edges
        )

        enriched = EnrichedClaim(
            **claim,
            is_high_support=is_high_support,
            is_leverage_inversion=is_low_support and is_high_leverage,
            is_keystone=is_keystone,
            is_evidence_gap=gap_score >= gap_cut and gap_score > 0,
            is_outlier=claim["support_skew"] >= skew_cut and len(claim["supporters"]) >= 2,
            is_contested=is_contested,
            is_conditional=is_conditional,
            is_challenger=is_low_support and challenges_top,
            is_isolated=cid not in connected,
        )
        enriched["evidence_gap_score"] = gap_score
        flagged.append(enriched)

    return flagged
