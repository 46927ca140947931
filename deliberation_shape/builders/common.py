"""Shared helpers for shape data builders."""

from __future__ import annotations

from deliberation_shape.contracts import (
    ClusterMember,
    DimensionCluster,
    Edge,
    EnrichedClaim,
    FloorClaim,
    SupportingClaim,
    TradeoffOption,
)


class ShapeBuildError(ValueError):
    """A builder's preconditions do not hold for this input."""


def floor_claim(claim: EnrichedClaim, edges: list[Edge]) -> FloorClaim:
    contested_by: list[str] = []
    for e in edges:
        if e["type"] != "conflicts":
            continue
        if e["to"] == claim["id"] and e["from"] not in contested_by:
            contested_by.append(e["from"])
        elif e["from"] == claim["id"] and e["to"] not in contested_by:
            contested_by.append(e["to"])
    return FloorClaim(
        id=claim["id"],
        label=claim["label"],
        text=claim["text"],
        support_count=len(claim["supporters"]),
        support_ratio=claim["support_ratio"],
        is_contested=bool(contested_by),
        contested_by=contested_by,
    )


def option(claim: EnrichedClaim) -> TradeoffOption:
    return TradeoffOption(
        id=claim["id"],
        label=claim["label"],
        text=claim["text"],
        support_count=len(claim["supporters"]),
        support_ratio=claim["support_ratio"],
    )


def supporting_claims(
    claim_id: str, edges: list[Edge], claim_map: dict[str, EnrichedClaim]
) -> list[SupportingClaim]:
    """Claims that support or enable the given claim."""
    found: list[SupportingClaim] = []
    seen: set[str] = set()
    for e in edges:
        if e["to"] != claim_id or e["type"] not in ("supports", "prerequisite"):
            continue
        if e["from"] in seen:
            continue
        seen.add(e["from"])
        found.append(
            SupportingClaim(
                id=e["from"], label=claim_map[e["from"]]["label"], relationship=e["type"]
            )
        )
    return found


def dimension_cluster(
    cluster_id: str, members: list[EnrichedClaim], edges: list[Edge]
) -> DimensionCluster:
    """A group of claims, themed by its best-supported member."""
    ids = {c["id"] for c in members}
    n = len(members)
    internal = sum(1 for e in edges if e["from"] in ids and e["to"] in ids)
    cohesion = internal / (n * (n - 1)) if n > 1 else 1.0
    avg_support = sum(c["support_ratio"] for c in members) / n if n else 0.0
    lead = max(members, key=lambda c: c["support_ratio"]) if members else None

    return DimensionCluster(
        id=cluster_id,
        theme=lead["label"] if lead else "",
        claims=[
            ClusterMember(
                id=c["id"], label=c["label"], text=c["text"], support_count=len(c["supporters"])
            )
            for c in members
        ],
        cohesion=round(min(1.0, cohesion), 4),
        avg_support=round(avg_support, 4),
    )
