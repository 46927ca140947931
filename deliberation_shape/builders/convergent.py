"""Convergent shape data — the agreed floor, what it assumes, who disputes it."""

from __future__ import annotations

from deliberation_shape.builders.common import floor_claim, option
from deliberation_shape.contracts import (
    ChallengerInfo,
    ConvergentShapeData,
    Edge,
    EnrichedClaim,
    StrongestOutlier,
)


def _floor_strength(avg_ratio: float) -> str:
    if avg_ratio >= 0.7:
        return "strong"
    if avg_ratio >= 0.5:
        return "moderate"
    return "weak"


def _challengers(
    claims: list[EnrichedClaim], edges: list[Edge], floor_ids: set[str]
) -> list[ChallengerInfo]:
    found: list[ChallengerInfo] = []
    for claim in claims:
        if claim["id"] in floor_ids:
            continue
        if not (claim["role"] == "challenger" or claim["is_challenger"]):
            continue
        target = claim.get("challenges")
        if target is None:
            target = next(
                (
                    e["to"]
                    for e in edges
                    if e["from"] == claim["id"] and e["type"] == "conflicts" and e["to"] in floor_ids
                ),
                None,
            )
        found.append(
            ChallengerInfo(
                id=claim["id"],
                label=claim["label"],
                text=claim["text"],
                support_count=len(claim["supporters"]),
                challenges=claim.get("challenges"),
                targets_claim=target,
            )
        )
    return found


def _strongest_outlier(
    claims: list[EnrichedClaim], floor: list[EnrichedClaim], challengers: list[ChallengerInfo]
) -> StrongestOutlier | None:
    floor_ids = {c["id"] for c in floor}
    outside = [c for c in claims if c["id"] not in floor_ids]
    if not outside:
        return None

    challenger_ids = {c["id"] for c in challengers}
    inversions = [c for c in outside if c["is_leverage_inversion"]]
    explicit = [c for c in outside if c["id"] in challenger_ids]
    if inversions:
        pool, reason = inversions, "leverage_inversion"
    elif explicit:
        pool, reason = explicit, "explicit_challenger"
    else:
        pool, reason = outside, "minority_voice"

    pick = max(pool, key=lambda c: c["leverage"])
    target = next((c for c in challengers if c["id"] == pick["id"]), None)
    questioned_id = target["targets_claim"] if target else None
    questioned = next((c["label"] for c in floor if c["id"] == questioned_id), None)
    if questioned is None:
        questioned = floor[0]["label"] if floor else "the emerging agreement"

    return StrongestOutlier(
        claim=option(pick),
        reason=reason,
        structural_role=pick["role"],
        what_it_questions=questioned,
    )


def _floor_assumptions(
    floor: list[EnrichedClaim], edges: list[Edge], claim_map: dict[str, EnrichedClaim]
) -> list[str]:
    floor_ids = {c["id"] for c in floor}
    assumptions: list[str] = []
    for claim in floor:
        for e in edges:
            if e["to"] == claim["id"] and e["type"] == "prerequisite" and e["from"] not in floor_ids:
                assumptions.append(
                    f'"{claim["label"]}" assumes "{claim_map[e["from"]]["label"]}"'
                )
        if claim["type"] == "conditional":
            assumptions.append(f'"{claim["label"]}" holds only under its stated conditions')
    return assumptions


def build_convergent_data(
    claims: list[EnrichedClaim], edges: list[Edge], ghosts: list[str]
) -> ConvergentShapeData:
    claim_map = {c["id"]: c for c in claims}
    floor = [c for c in claims if c["is_high_support"]]
    floor_ids = {c["id"] for c in floor}
    avg_ratio = sum(c["support_ratio"] for c in floor) / len(floor) if floor else 0.0

    challengers = _challengers(claims, edges, floor_ids)
    outlier = _strongest_outlier(claims, floor, challengers)

    lead = max(floor, key=lambda c: c["support_ratio"])["label"] if floor else None
    if outlier is not None and lead:
        transfer = f'Does "{lead}" still hold if "{outlier["claim"]["label"]}" is right?'
    elif lead:
        transfer = f'What would have to be true for "{lead}" to fail?'
    else:
        transfer = "What would have to be true for the emerging agreement to fail?"

    return ConvergentShapeData(
        shape="convergent",
        floor=[floor_claim(c, edges) for c in floor],
        floor_strength=_floor_strength(avg_ratio),
        challengers=challengers,
        blind_spots=list(ghosts),
        confidence=round(avg_ratio, 4),
        strongest_outlier=outlier,
        floor_assumptions=_floor_assumptions(floor, edges, claim_map),
        transfer_question=transfer,
    )
