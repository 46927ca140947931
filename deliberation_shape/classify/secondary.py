"""Secondary pattern detectors — seven independent, always-evaluated checks.

Each detector returns a SecondaryPattern or None and never depends on the
primary shape. Dissent in particular is a standalone call: low support is not
low value, so minority voices are surfaced whatever shape the answer takes.
"""

from __future__ import annotations

from deliberation_shape.classify.peaks import HILL_THRESHOLD
from deliberation_shape.contracts import (
    CascadeRisk,
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    InsightType,
    LeverageInversion,
    PatternClaim,
    PatternType,
    PeakAnalysis,
    SecondaryPattern,
    Severity,
)

CHAIN_MIN_STEPS = 3
CONDITIONAL_MIN_CLAIMS = 2
KEYSTONE_MIN_DEPENDENTS = 2

# Base insight score per voice type; leverage and minority status add to it
INSIGHT_BASE: dict[str, float] = {
    InsightType.LEVERAGE_INVERSION.value: 4.0,
    InsightType.EXPLICIT_CHALLENGER.value: 3.0,
    InsightType.UNIQUE_PERSPECTIVE.value: 2.5,
    InsightType.EDGE_CASE.value: 2.0,
}

WHY_IT_MATTERS: dict[str, str] = {
    InsightType.LEVERAGE_INVERSION.value: (
        "Structurally load-bearing despite thin support; if it is wrong, more than itself falls"
    ),
    InsightType.EXPLICIT_CHALLENGER.value: (
        "Directly disputes what most models converged on"
    ),
    InsightType.UNIQUE_PERSPECTIVE.value: (
        "Comes from models that backed none of the dominant positions"
    ),
    InsightType.EDGE_CASE.value: (
        "Names a condition under which the dominant answer may not hold"
    ),
}


def _pattern(kind: PatternType, severity: Severity, data: dict) -> SecondaryPattern:
    return SecondaryPattern(type=kind.value, severity=severity.value, data=data)


def _pclaim(claim: EnrichedClaim) -> PatternClaim:
    return PatternClaim(id=claim["id"], label=claim["label"], support_ratio=claim["support_ratio"])


# ============================================================
# Dissent
# ============================================================


def _insight_score(insight_type: str, claim: EnrichedClaim) -> float:
    score = INSIGHT_BASE[insight_type] + claim["leverage"] * 0.1 + (1 - claim["support_ratio"])
    return round(score, 4)


def detect_dissent_pattern(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    peak_analysis: PeakAnalysis,
    leverage_inversions: list[LeverageInversion],
) -> SecondaryPattern | None:
    """Collect minority voices worth elevating. Peaks are never voices.

    Each claim is classified once, by the first matching voice type:
    leverage inversion, explicit challenger, unique perspective, edge case.
    """
    peak_ids = set(peak_analysis["peak_ids"])
    peak_supporters = {s for p in peak_analysis["peaks"] for s in p["supporters"]}
    inversion_targets = {inv["claim_id"]: inv["affected_claims"] for inv in leverage_inversions}

    voices: list[dict] = []
    for claim in claims:
        cid = claim["id"]
        if cid in peak_ids:
            continue

        disputed_peaks = [
            e["to"]
            for e in edges
            if e["from"] == cid and e["type"] == "conflicts" and e["to"] in peak_ids
        ]
        if claim.get("challenges") in peak_ids and claim["challenges"] not in disputed_peaks:
            disputed_peaks.append(claim["challenges"])

        if claim["is_leverage_inversion"]:
            insight, targets = InsightType.LEVERAGE_INVERSION.value, inversion_targets.get(cid, [])
        elif claim["role"] == "challenger" or disputed_peaks:
            insight, targets = InsightType.EXPLICIT_CHALLENGER.value, disputed_peaks
        elif peak_ids and claim["supporters"] and peak_supporters.isdisjoint(claim["supporters"]):
            insight, targets = InsightType.UNIQUE_PERSPECTIVE.value, []
        elif (
            claim["type"] == "conditional"
            and not claim["is_high_support"]
            and claim["support_ratio"] <= HILL_THRESHOLD
        ):
            insight, targets = InsightType.EDGE_CASE.value, []
        else:
            continue

        voices.append(
            {
                "id": cid,
                "label": claim["label"],
                "text": claim["text"],
                "support_ratio": claim["support_ratio"],
                "insight_type": insight,
                "targets": list(targets),
                "insight_score": _insight_score(insight, claim),
            }
        )

    if not voices:
        return None

    # Stable: equal scores keep claim order
    voices.sort(key=lambda v: v["insight_score"], reverse=True)
    top = voices[0]
    strongest = {
        "id": top["id"],
        "label": top["label"],
        "text": top["text"],
        "support_ratio": top["support_ratio"],
        "why_it_matters": WHY_IT_MATTERS[top["insight_type"]],
        "insight_type": top["insight_type"],
    }
    suppressed = [
        v["label"]
        for v in voices
        if v["insight_type"]
        in (InsightType.UNIQUE_PERSPECTIVE.value, InsightType.EDGE_CASE.value)
    ]

    if top["insight_type"] == InsightType.LEVERAGE_INVERSION.value:
        severity = Severity.HIGH
    elif top["insight_type"] == InsightType.EXPLICIT_CHALLENGER.value:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    return _pattern(
        PatternType.DISSENT,
        severity,
        {"voices": voices, "strongest_voice": strongest, "suppressed_dimensions": suppressed},
    )


# ============================================================
# Structural detectors
# ============================================================


def detect_challenged_pattern(
    peak_analysis: PeakAnalysis, edges: list[Edge]
) -> SecondaryPattern | None:
    """Floor-tier claims with a conflict edge aimed at a peak."""
    floor = {c["id"]: c for c in peak_analysis["floor"]}
    peaks = {c["id"]: c for c in peak_analysis["peaks"]}
    challenges = [
        {"challenger": _pclaim(floor[e["from"]]), "target": _pclaim(peaks[e["to"]])}
        for e in edges
        if e["type"] == "conflicts" and e["from"] in floor and e["to"] in peaks
    ]
    if not challenges:
        return None
    severity = Severity.HIGH if len(challenges) >= 2 else Severity.MEDIUM
    return _pattern(PatternType.CHALLENGED, severity, {"challenges": challenges})


def detect_keystone_pattern(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    graph: GraphAnalysis,
    cascade_risks: list[CascadeRisk],
) -> SecondaryPattern | None:
    """The hub claim, when at least two claims depend on it by prerequisite."""
    hub_id = graph["hub_claim"]
    if hub_id is None:
        return None
    hub = next((c for c in claims if c["id"] == hub_id), None)
    if hub is None:
        return None

    dependents = [e["to"] for e in edges if e["from"] == hub_id and e["type"] == "prerequisite"]
    if len(dependents) < KEYSTONE_MIN_DEPENDENTS:
        return None

    cascade = next((r for r in cascade_risks if r["source_id"] == hub_id), None)
    cascade_size = len(cascade["dependent_ids"]) if cascade else len(dependents)
    attackers = [e["from"] for e in edges if e["to"] == hub_id and e["type"] == "conflicts"]

    severity = Severity.HIGH if hub["support_ratio"] <= HILL_THRESHOLD or attackers else Severity.MEDIUM
    return _pattern(
        PatternType.KEYSTONE,
        severity,
        {
            "keystone": _pclaim(hub),
            "dependents": dependents,
            "cascade_size": cascade_size,
            "challengers": attackers,
        },
    )


def detect_chain_pattern(
    claims: list[EnrichedClaim], graph: GraphAnalysis
) -> SecondaryPattern | None:
    """Long prerequisite chains; single-supporter steps are weak links."""
    chain = graph["longest_chain"]
    if len(chain) < CHAIN_MIN_STEPS:
        return None
    by_id = {c["id"]: c for c in claims}
    weak_links = [cid for cid in chain if len(by_id[cid]["supporters"]) == 1]
    severity = Severity.MEDIUM if weak_links else Severity.LOW
    return _pattern(
        PatternType.CHAIN,
        severity,
        {"chain": list(chain), "length": len(chain), "weak_links": weak_links},
    )


def detect_fragile_pattern(
    claims: list[EnrichedClaim], edges: list[Edge], peak_analysis: PeakAnalysis
) -> SecondaryPattern | None:
    """Peaks resting on a prerequisite below the hill threshold."""
    by_id = {c["id"]: c for c in claims}
    peaks = {c["id"]: c for c in peak_analysis["peaks"]}
    fragilities = []
    for e in edges:
        if e["type"] != "prerequisite" or e["to"] not in peaks:
            continue
        foundation = by_id[e["from"]]
        if foundation["support_ratio"] > HILL_THRESHOLD:
            continue
        peak = peaks[e["to"]]
        fragilities.append(
            {
                "peak": {"id": peak["id"], "label": peak["label"]},
                "weak_foundation": _pclaim(foundation),
            }
        )
    if not fragilities:
        return None
    return _pattern(PatternType.FRAGILE, Severity.HIGH, {"fragilities": fragilities})


def detect_conditional_pattern(
    claims: list[EnrichedClaim], edges: list[Edge]
) -> SecondaryPattern | None:
    """Two or more conditional claims that gate other claims."""
    conditions = []
    for claim in claims:
        if claim["type"] != "conditional":
            continue
        branches = [
            e["to"] for e in edges if e["from"] == claim["id"] and e["type"] == "prerequisite"
        ]
        if branches:
            conditions.append({"id": claim["id"], "label": claim["label"], "branches": branches})
    if len(conditions) < CONDITIONAL_MIN_CLAIMS:
        return None
    return _pattern(PatternType.CONDITIONAL, Severity.MEDIUM, {"conditions": conditions})


def detect_orphaned_pattern(
    peak_analysis: PeakAnalysis, edges: list[Edge]
) -> SecondaryPattern | None:
    """Peaks with no incident edge in a map that has edges.

    A map with no edges at all says nothing about any single peak, so the
    check is skipped there.
    """
    if not edges:
        return None
    touched = {e["from"] for e in edges} | {e["to"] for e in edges}
    orphans = [
        {
            "id": p["id"],
            "label": p["label"],
            "support_ratio": p["support_ratio"],
            "reason": "Majority-supported but unconnected to any other claim",
        }
        for p in peak_analysis["peaks"]
        if p["id"] not in touched
    ]
    if not orphans:
        return None
    return _pattern(PatternType.ORPHANED, Severity.LOW, {"orphans": orphans})
