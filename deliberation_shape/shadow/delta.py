"""Shadow delta — what the shadow pass validated that the claim set lacks.

Statements are deduplicated across models by normalized text, matched against
primary claims by length-adjusted word overlap, and the unmatched remainder is
ranked by confidence x query relevance x intent weight.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass

from deliberation_shape.contracts import (
    Claim,
    Edge,
    ShadowAudit,
    ShadowDelta,
    ShadowExtraction,
    ShadowStatement,
    StatementType,
    UnindexedStatement,
)
from deliberation_shape.shadow.extractor import count_by_type, flatten_validated
from deliberation_shape.utils.text import content_words, normalize_text, word_overlap

DEFAULT_MATCH_THRESHOLD = 0.4
UNINDEXED_REASON = "validated_by_shadow_not_in_primary"


@dataclass(frozen=True)
class QueryIntent:
    type: str  # decision | feasibility | mechanism | exploration
    type_weights: dict[str, float]


_DECISION = QueryIntent(
    type="decision",
    type_weights={
        "conditional": 1.5,
        "conflict": 1.4,
        "prerequisite": 1.2,
        "prescriptive": 1.0,
        "assertive": 0.5,
    },
)
_FEASIBILITY = QueryIntent(
    type="feasibility",
    type_weights={
        "conditional": 1.5,
        "prerequisite": 1.4,
        "assertive": 1.2,
        "conflict": 0.7,
        "prescriptive": 0.6,
    },
)
_MECHANISM = QueryIntent(
    type="mechanism",
    type_weights={
        "prerequisite": 1.5,
        "conditional": 1.4,
        "assertive": 1.0,
        "conflict": 0.6,
        "prescriptive": 0.5,
    },
)
_EXPLORATION = QueryIntent(
    type="exploration",
    type_weights={t.value: 1.0 for t in StatementType},
)

_DECISION_RE = (re.compile(r"\bshould\s+(i|we)\b"), re.compile(r"\bwhich\s+(is|should|would)\b"))
_FEASIBILITY_RE = re.compile(r"\b(does|can|is\s+it)\b.*\b(work|possible|feasible|viable)\b")
_MECHANISM_RE = re.compile(r"\bhow\s+(does|do|can|to|would)\b")


def detect_query_intent(query: str) -> QueryIntent:
    lower = query.lower()
    if any(p.search(lower) for p in _DECISION_RE):
        return _DECISION
    if _FEASIBILITY_RE.search(lower):
        return _FEASIBILITY
    if _MECHANISM_RE.search(lower):
        return _MECHANISM
    return _EXPLORATION


def match_threshold_for(text: str, base: float = DEFAULT_MATCH_THRESHOLD) -> float:
    """Longer sentences score lower Jaccard against any claim, so relax the bar."""
    n = len(content_words(text))
    if n > 20:
        return base * 0.75
    if n > 15:
        return base * 0.85
    return base


def find_matching_claim(
    text: str, claims: list[Claim], base_threshold: float = DEFAULT_MATCH_THRESHOLD
) -> Claim | None:
    """Best-overlapping claim at or above the length-adjusted threshold."""
    threshold = match_threshold_for(text, base_threshold)
    best: Claim | None = None
    best_score = 0.0
    for claim in claims:
        score = word_overlap(text, claim.get("text", ""))
        if score > best_score and score >= threshold:
            best, best_score = claim, score
    return best


def _primary_counts(claims: list[Claim], edges: list[Edge]) -> dict[str, int]:
    def count(edge_type: str) -> int:
        return sum(1 for e in edges if e["type"] == edge_type)

    return {
        "claims": len(claims),
        "conflict_edges": count("conflicts"),
        "prerequisite_edges": count("prerequisite"),
        "support_edges": count("supports"),
        "tradeoff_edges": count("tradeoff"),
    }


def _type_survival(extraction: ShadowExtraction) -> dict[str, dict[str, float]]:
    survival: dict[str, dict[str, float]] = {}
    for t in StatementType:
        by_type = extraction["stats"]["by_type"][t.value]
        before, after = by_type["pass1"], by_type["pass2"]
        survival[t.value] = {
            "before_pass2": before,
            "after_pass2": after,
            "survival_rate": round(after / before, 4) if before else 0.0,
        }
    return survival


def execute_shadow_delta(
    extraction: ShadowExtraction,
    claims: list[Claim],
    edges: list[Edge],
    user_query: str,
    match_threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> ShadowDelta:
    """Compare shadow statements with the primary claims and edges."""
    start = time.monotonic()

    primary_counts = _primary_counts(claims, edges)
    shadow_counts = count_by_type(extraction["validated"])
    gaps = {
        "conflicts": max(0, shadow_counts["conflict"] - primary_counts["conflict_edges"]),
        "prerequisites": max(
            0, shadow_counts["prerequisite"] - primary_counts["prerequisite_edges"]
        ),
        # claims carry no prescriptive-force edge, so every one counts
        "prescriptive": shadow_counts["prescriptive"],
    }

    intent = detect_query_intent(user_query)

    groups: dict[str, list[ShadowStatement]] = {}
    for statement in flatten_validated(extraction["validated"]):
        groups.setdefault(normalize_text(statement["text"]), []).append(statement)

    unindexed: list[UnindexedStatement] = []
    for statements in groups.values():
        representative = statements[0]
        if find_matching_claim(representative["text"], claims, match_threshold) is not None:
            continue

        relevance = word_overlap(representative["text"], user_query)
        weight = intent.type_weights.get(representative["primary_type"], 1.0)
        confidence = sum(s["confidence"] for s in statements) / len(statements)
        unindexed.append(
            UnindexedStatement(
                text=representative["text"],
                type=representative["primary_type"],
                secondary_types=list(representative["secondary_types"]),
                confidence=round(confidence, 4),
                query_relevance=round(relevance, 4),
                adjusted_score=round(confidence * relevance * weight, 4),
                source_models=list(dict.fromkeys(s["source_model"] for s in statements)),
                reason=UNINDEXED_REASON,
            )
        )

    unindexed.sort(key=lambda u: u["adjusted_score"], reverse=True)

    stats = extraction["stats"]
    audit = ShadowAudit(
        extraction={
            "total_sentences": stats["total_sentences"],
            "pass1_candidates": stats["pass1_candidates"],
            "pass2_validated": stats["pass2_validated"],
            "pass2_disqualified": stats["pass2_disqualified"],
            "survival_rate": stats["survival_rate"],
        },
        shadow_counts=shadow_counts,
        primary_counts=primary_counts,
        gaps=gaps,
        type_survival=_type_survival(extraction),
        query_intent=intent.type,
    )

    return ShadowDelta(
        audit=audit,
        unindexed=unindexed,
        processing_time=round(time.monotonic() - start, 4),
    )
