"""Two-pass shadow extraction over raw model responses.

Pass 1 tags each sentence with every statement type whose inclusion patterns
match; the highest-priority type becomes the primary type. Pass 2 runs the
exclusion rules for that primary type only.
"""

from __future__ import annotations

import re
import time
from typing import Any

from deliberation_shape.contracts import (
    DisqualifiedStatement,
    ExtractionStats,
    ModelResponse,
    ShadowExtraction,
    ShadowStatement,
    StatementType,
    TypeStats,
)
from deliberation_shape.shadow.exclusion_rules import ExclusionRule, get_rules_for_type
from deliberation_shape.shadow.statement_types import INCLUSION_PATTERNS

MIN_SENTENCE_LENGTH = 15
MIN_ALPHA_RATIO = 0.5
SOFT_PENALTY = 0.85
DEFAULT_CONFIDENCE_FLOOR = 0.4

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+(?=[A-Z])|(?<=\n)(?=[A-Z])")
_CODE_LIKE = re.compile(r"^[{}\[\]<>]|^(const|let|var|function|import|export|class)\s")
_ALPHA = re.compile(r"[a-zA-Z]")

_REVERSE_DEPENDENCY = (
    re.compile(r"\b(runs?|executes?)\s+after\b", re.IGNORECASE),
    re.compile(r"\bfollows?\b", re.IGNORECASE),
    re.compile(r"\bsubsequent\s+to\b", re.IGNORECASE),
    re.compile(r"\b(?:comes?|happens?)\s+after\b", re.IGNORECASE),
)


def extract_sentences(text: str) -> list[str]:
    """Split a response into candidate sentences, dropping fragments and code."""
    sentences: list[str] = []
    for raw in _SENTENCE_BREAK.split(text):
        s = raw.strip()
        if len(s) < MIN_SENTENCE_LENGTH:
            continue
        if _CODE_LIKE.search(s):
            continue
        if len(_ALPHA.findall(s)) / len(s) < MIN_ALPHA_RATIO:
            continue
        sentences.append(s)
    return sentences


def has_reverse_dependency(sentence: str) -> bool:
    """True for "A runs after B" phrasing, where B is the prerequisite."""
    return any(p.search(sentence) for p in _REVERSE_DEPENDENCY)


def _pass1(sentence: str) -> list[tuple[str, list[str]]]:
    """(type, matched pattern sources) for every matching type, priority order."""
    matches: list[tuple[str, list[str]]] = []
    for definition in sorted(INCLUSION_PATTERNS, key=lambda d: d.priority, reverse=True):
        matched = [p.pattern for p in definition.patterns if p.search(sentence)]
        if matched:
            matches.append((definition.type.value, matched))
    return matches


def _pass2(
    sentence: str, candidate_type: str, base_confidence: float
) -> tuple[ExclusionRule | None, list[ExclusionRule], float]:
    """Returns (hard disqualifier or None, soft matches, adjusted confidence)."""
    soft: list[ExclusionRule] = []
    for rule in get_rules_for_type(candidate_type):
        if not rule.pattern.search(sentence):
            continue
        if rule.severity == "hard":
            return rule, [], 0.0
        soft.append(rule)
    return None, soft, base_confidence * SOFT_PENALTY ** len(soft)


def _empty_stats() -> ExtractionStats:
    return ExtractionStats(
        total_sentences=0,
        pass1_candidates=0,
        pass2_validated=0,
        pass2_disqualified=0,
        survival_rate=0.0,
        by_type={t.value: TypeStats(pass1=0, pass2=0, disqualified=0) for t in StatementType},
    )


def _response_fields(response: ModelResponse | dict[str, Any]) -> tuple[int, str]:
    """Accept both snake_case and the upstream camelCase model index key."""
    index = response.get("model_index", response.get("modelIndex", 0))
    content = response.get("content") or ""
    return int(index), str(content)


def execute_shadow_extraction(
    responses: list[ModelResponse],
    confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
) -> ShadowExtraction:
    """Run both passes over every response. Pure apart from timing."""
    start = time.monotonic()

    validated: dict[str, list[ShadowStatement]] = {t.value: [] for t in StatementType}
    disqualified: list[DisqualifiedStatement] = []
    stats = _empty_stats()

    for response in responses:
        model_index, content = _response_fields(response)
        sentences = extract_sentences(content)
        stats["total_sentences"] += len(sentences)

        for i, sentence in enumerate(sentences):
            matches = _pass1(sentence)
            if not matches:
                continue

            stats["pass1_candidates"] += 1
            primary_type, primary_patterns = matches[0]
            type_stats = stats["by_type"][primary_type]
            type_stats["pass1"] += 1

            base = min(0.5 + len(primary_patterns) * 0.1, 0.9)
            hard, soft, confidence = _pass2(sentence, primary_type, base)

            if hard is not None or confidence < confidence_floor:
                stats["pass2_disqualified"] += 1
                type_stats["disqualified"] += 1
                if hard is not None:
                    by, reason = hard.id, hard.reason
                else:
                    by = "soft_penalty_accumulation"
                    reason = "Too many soft penalties: " + ", ".join(r.id for r in soft)
                disqualified.append(
                    DisqualifiedStatement(
                        text=sentence,
                        attempted_type=primary_type,
                        source_model=model_index,
                        disqualified_by=by,
                        reason=reason,
                    )
                )
                continue

            stats["pass2_validated"] += 1
            type_stats["pass2"] += 1

            statement = ShadowStatement(
                text=sentence,
                primary_type=primary_type,
                secondary_types=[t for t, _ in matches[1:]],
                confidence=round(confidence, 4),
                source_model=model_index,
                sentence_index=i,
                matched_patterns=primary_patterns,
                soft_exclusions=[r.id for r in soft],
            )
            if primary_type == StatementType.PREREQUISITE.value and has_reverse_dependency(sentence):
                statement["reverse_dependency"] = True
            validated[primary_type].append(statement)

    if stats["pass1_candidates"]:
        stats["survival_rate"] = round(stats["pass2_validated"] / stats["pass1_candidates"], 4)

    return ShadowExtraction(
        validated=validated,
        disqualified=disqualified,
        stats=stats,
        processing_time=round(time.monotonic() - start, 4),
    )


def flatten_validated(validated: dict[str, list[ShadowStatement]]) -> list[ShadowStatement]:
    """All validated statements, grouped in priority order of their type."""
    order = sorted(INCLUSION_PATTERNS, key=lambda d: d.priority, reverse=True)
    return [s for d in order for s in validated.get(d.type.value, [])]


def count_by_type(validated: dict[str, list[ShadowStatement]]) -> dict[str, int]:
    return {t.value: len(validated.get(t.value, [])) for t in StatementType}
