"""Per-claim enrichment — support ratio, leverage, keystone score, support skew.

Pure deterministic computation over one claim and the full edge list.
No population statistics here; those belong to scoring/flags.py.

Leverage = support_weight + role_weight + connectivity_weight + position_weight
  support_weight:      2 * support_ratio
  role_weight:         challenger 4, anchor 2, branch 1, supplement 0.5
  connectivity_weight: 2 * prereq_out + 1 * prereq_in + 1.5 * conflicts + 0.25 * all edges
  position_weight:     2 for a chain root (prereq out, none in), else 0
"""

from __future__ import annotations

from collections import Counter

from deliberation_shape.contracts import Claim, ClaimRatios, Edge, LeverageFactors

ROLE_WEIGHTS: dict[str, float] = {
    "challenger": 4.0,
    "anchor": 2.0,
    "branch": 1.0,
    "supplement": 0.5,
}


def compute_claim_ratios(claim: Claim, edges: list[Edge], model_count: int) -> ClaimRatios:
    """Derive raw ratios and scores for a single claim.

    Never fails: a claim without supporters gets support_ratio 0.
    """
    safe_model_count = max(model_count, 1)
    supporters = list(claim.get("supporters") or [])

    support_ratio = min(1.0, len(supporters) / safe_model_count)
    support_weight = support_ratio * 2
    role_weight = ROLE_WEIGHTS.get(claim["role"], 1.0)

    outgoing = [e for e in edges if e["from"] == claim["id"]]
    incoming = [e for e in edges if e["to"] == claim["id"]]
    prereq_out = sum(1 for e in outgoing if e["type"] == "prerequisite")
    prereq_in = sum(1 for e in incoming if e["type"] == "prerequisite")
    conflict_count = sum(1 for e in outgoing + incoming if e["type"] == "conflicts")

    connectivity_weight = (
        prereq_out * 2 + prereq_in * 1 + conflict_count * 1.5 + (len(outgoing) + len(incoming)) * 0.25
    )

    is_chain_root = prereq_out > 0 and prereq_in == 0
    is_chain_terminal = prereq_in > 0 and prereq_out == 0
    position_weight = 2.0 if is_chain_root else 0.0

    leverage = support_weight + role_weight + connectivity_weight + position_weight

    # Same model index listed more than once counts toward skew
    counts = Counter(supporters)
    support_skew = max(counts.values()) / len(supporters) if supporters else 0.0

    return ClaimRatios(
        id=claim["id"],
        label=claim["label"],
        text=claim["text"],
        supporters=supporters,
        type=claim["type"],
        role=claim["role"],
        challenges=claim.get("challenges"),
        support_ratio=support_ratio,
        leverage=leverage,
        leverage_factors=LeverageFactors(
            support_weight=support_weight,
            role_weight=role_weight,
            connectivity_weight=connectivity_weight,
            position_weight=position_weight,
        ),
        keystone_score=float(len(outgoing) * len(supporters)),
        evidence_gap_score=0.0,  # filled in by flagging, after cascade analysis
        support_skew=support_skew,
        in_degree=len(incoming),
        out_degree=len(outgoing),
        is_chain_root=is_chain_root,
        is_chain_terminal=is_chain_terminal,
    )
