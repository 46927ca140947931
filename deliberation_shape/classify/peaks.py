"""Peak analysis — three-tier support partition and peak-to-peak edges.

  peak:  support_ratio >= 0.5 and at least 2 supporters
  hill:  support_ratio > 0.25, not a peak
  floor: support_ratio <= 0.25
"""

from __future__ import annotations

from itertools import combinations

from deliberation_shape.contracts import Edge, EnrichedClaim, PeakAnalysis, PeakPairRelationship

PEAK_THRESHOLD = 0.5
HILL_THRESHOLD = 0.25
PEAK_MIN_SUPPORTERS = 2


def classify_tier(claim: EnrichedClaim) -> str:
    """Return "peak", "hill", or "floor" for one claim."""
    ratio = claim["support_ratio"]
    if ratio >= PEAK_THRESHOLD and len(claim["supporters"]) >= PEAK_MIN_SUPPORTERS:
        return "peak"
    if ratio > HILL_THRESHOLD:
        return "hill"
    return "floor"


def analyze_peaks(claims: list[EnrichedClaim], edges: list[Edge]) -> PeakAnalysis:
    tiers: dict[str, list[EnrichedClaim]] = {"peak": [], "hill": [], "floor": []}
    for claim in claims:
        tiers[classify_tier(claim)].append(claim)

    peak_ids = [c["id"] for c in tiers["peak"]]
    peak_set = set(peak_ids)
    between = [e for e in edges if e["from"] in peak_set and e["to"] in peak_set]

    return PeakAnalysis(
        peaks=tiers["peak"],
        hills=tiers["hill"],
        floor=tiers["floor"],
        peak_ids=peak_ids,
        peak_conflicts=[e for e in between if e["type"] == "conflicts"],
        peak_tradeoffs=[e for e in between if e["type"] == "tradeoff"],
        peak_supports=[e for e in between if e["type"] in ("supports", "prerequisite")],
        peak_unconnected=len(peak_ids) > 1 and not between,
    )


def compute_peak_pair_relations(
    peaks: list[EnrichedClaim], edges: list[Edge]
) -> list[PeakPairRelationship]:
    """One record per unordered pair of peaks, direction ignored."""
    relations: list[PeakPairRelationship] = []
    for a, b in combinations(peaks, 2):
        pair = {a["id"], b["id"]}
        types = {e["type"] for e in edges if {e["from"], e["to"]} == pair}
        relations.append(
            PeakPairRelationship(
                a_id=a["id"],
                b_id=b["id"],
                conflicts="conflicts" in types,
                trades_off="tradeoff" in types,
                supports="supports" in types,
                prerequisites="prerequisite" in types,
            )
        )
    return relations
