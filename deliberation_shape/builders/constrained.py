"""Constrained shape data — tradeoff pairs, dominated options, the shared floor."""

from __future__ import annotations

from deliberation_shape.builders.common import ShapeBuildError, floor_claim, option
from deliberation_shape.contracts import (
    ConstrainedShapeData,
    Edge,
    EnrichedClaim,
    TradeoffEntry,
    TradeoffPair,
)
from deliberation_shape.utils.text import shared_keywords

DOMINANCE_FACTOR = 2


def _governing_factor(
    a: EnrichedClaim, b: EnrichedClaim, claims: list[EnrichedClaim], edges: list[Edge]
) -> str | None:
    """A conditional claim gating either option, else the vocabulary both share."""
    gated = {a["id"], b["id"]}
    for claim in claims:
        if claim["type"] != "conditional" or claim["id"] in gated:
            continue
        if any(
            e["from"] == claim["id"] and e["to"] in gated and e["type"] == "prerequisite"
            for e in edges
        ):
            return claim["label"]
    keywords = shared_keywords(a["text"], b["text"])
    if keywords:
        return "Balancing " + ", ".join(keywords)
    return None


def build_constrained_data(
    claims: list[EnrichedClaim], edges: list[Edge], tradeoffs: list[TradeoffPair]
) -> ConstrainedShapeData:
    if not tradeoffs:
        raise ShapeBuildError("constrained shape requires at least one tradeoff")

    claim_map = {c["id"]: c for c in claims}
    entries: list[TradeoffEntry] = []
    dominated: list[dict[str, str]] = []
    in_tradeoff: set[str] = set()

    for pair in tradeoffs:
        a = claim_map[pair["claim_a"]["id"]]
        b = claim_map[pair["claim_b"]["id"]]
        in_tradeoff.update((a["id"], b["id"]))

        if a["is_high_support"] and b["is_high_support"]:
            symmetry = "both_high"
        elif not a["is_high_support"] and not b["is_high_support"]:
            symmetry = "both_low"
        else:
            symmetry = "asymmetric"

        entries.append(
            TradeoffEntry(
                id=f"{a['id']}_{b['id']}",
                option_a=option(a),
                option_b=option(b),
                symmetry=symmetry,
                governing_factor=_governing_factor(a, b, claims, edges),
            )
        )

        if symmetry != "asymmetric":
            continue
        strong, weak = (a, b) if a["is_high_support"] else (b, a)
        if len(strong["supporters"]) >= DOMINANCE_FACTOR * max(len(weak["supporters"]), 1):
            dominated.append(
                {
                    "dominated": weak["id"],
                    "dominated_by": strong["id"],
                    "reason": (
                        f"{strong['label']} has {len(strong['supporters'])} supporters "
                        f"against {len(weak['supporters'])}"
                    ),
                }
            )

    floor = [
        floor_claim(c, edges) for c in claims if c["is_high_support"] and c["id"] not in in_tradeoff
    ]

    return ConstrainedShapeData(
        shape="constrained",
        tradeoffs=entries,
        dominated_options=dominated,
        floor=floor,
    )
