"""Exclusion rules — what disqualifies a sentence in shadow pass 2.

Hard rules disqualify outright. Soft rules cost 15% confidence each.
A candidate must survive every rule that applies to its primary type.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from deliberation_shape.contracts import StatementType

_ALL = tuple(t.value for t in StatementType)


@dataclass(frozen=True)
class ExclusionRule:
    id: str
    applies_to: tuple[str, ...]  # StatementType values
    pattern: re.Pattern[str]
    reason: str
    severity: Literal["hard", "soft"]


def _rule(
    rule_id: str,
    applies_to: tuple[str, ...] | str,
    pattern: str,
    reason: str,
    severity: Literal["hard", "soft"],
    flags: int = re.IGNORECASE,
) -> ExclusionRule:
    if isinstance(applies_to, str):
        applies_to = (applies_to,)
    return ExclusionRule(
        id=rule_id,
        applies_to=applies_to,
        pattern=re.compile(pattern, flags),
        reason=reason,
        severity=severity,
    )


# ============================================================
# Universal
# ============================================================

_UNIVERSAL = (
    _rule("question_mark", _ALL, r"\?$", "Question, not statement", "hard", 0),
    _rule("too_short", _ALL, r"^.{0,15}$", "Too short to be substantive claim", "hard", 0),
    _rule(
        "meta_let_me", _ALL,
        r"^(let me|let's|i('ll| will| would)|allow me to)\b",
        "Meta-framing, not claim", "hard",
    ),
    _rule(
        "meta_note", _ALL,
        r"^(note that|it'?s worth (noting|mentioning)|keep in mind|remember that)\b",
        "Meta-commentary, not claim", "hard",
    ),
    _rule(
        "quoted_material", _ALL,
        r"^([\"“”])[^\"“”]{10,}\1$",
        "Quoted material, not original claim", "hard", 0,
    ),
)

# ============================================================
# Prescriptive
# ============================================================

_PRESCRIPTIVE = (
    _rule(
        "prescriptive_epistemic_should", "prescriptive",
        r"\bshould\s+(be|have\s+been)\s+(clear|obvious|noted|apparent|evident|unsurprising)\b",
        'Epistemic "should" (expectation), not prescriptive', "hard",
    ),
    _rule(
        "prescriptive_conditional_should", "prescriptive",
        r"\bif\s+.{5,40}\s+should\b",
        'Conditional "should", better read as conditional', "soft",
    ),
    _rule(
        "prescriptive_hypothetical", "prescriptive",
        r"\b(you|one)\s+could\s+(also|potentially|possibly)\b",
        "Suggestion, not prescription", "soft",
    ),
    _rule(
        "prescriptive_question_form", "prescriptive",
        r"\bshould\s+(you|we|i|they)\s+.{0,30}\?",
        "Prescriptive in question form", "hard",
    ),
    _rule(
        "prescriptive_rhetorical", "prescriptive",
        r"\b(surely|certainly)\s+(you|we|one)\s+(can|would|could)\s+agree\b",
        "Rhetorical appeal, not prescription", "hard",
    ),
    _rule(
        "prescriptive_past_tense", "prescriptive",
        r"\bshould\s+have\s+(been|done|had|made|used)\b",
        "Past counterfactual, not active prescription", "soft",
    ),
    _rule(
        "prescriptive_attributed", "prescriptive",
        r"\b(they|he|she|the\s+\w+)\s+(say|says|said|suggest|argues?)\s+.{0,20}should\b",
        "Attributed prescription, not asserted", "soft",
    ),
)

# ============================================================
# Conflict
# ============================================================

_CONFLICT = (
    _rule(
        "conflict_additive_but", "conflict",
        r"\b(not\s+only\s+.{5,30}\s+but\s+(also)?|but\s+also|but\s+additionally|but\s+furthermore)\b",
        'Additive "but", not adversative', "hard",
    ),
    _rule(
        "conflict_nothing_but", "conflict",
        r"\b(nothing\s+but|anything\s+but|everything\s+but|all\s+but)\b",
        '"But" as "except", not conflict', "hard",
    ),
    _rule(
        "conflict_however_additionally", "conflict",
        r"\bhowever[,;]?\s*(additionally|also|furthermore|moreover)\b",
        'Transitional "however", not adversative', "hard",
    ),
    _rule(
        "conflict_against_physical", "conflict",
        r"\bagainst\s+(the\s+)?(wall|floor|door|window|backdrop|background|grain)\b",
        'Physical "against", not opposition', "hard",
    ),
    _rule(
        "conflict_yet_temporal", "conflict",
        r"\b(not\s+yet|as\s+yet|has\s+yet\s+to)\b",
        'Temporal "yet", not adversative', "hard",
    ),
    _rule(
        "conflict_though_concessive", "conflict",
        r"\b(as\s+though|even\s+though)\b",
        "Concessive, not direct conflict", "soft",
    ),
    _rule(
        "conflict_narrative_although", "conflict",
        r"^although\s+(he|she|they|it|the)\s+(was|were|had|did)\b",
        "Narrative framing, not substantive conflict", "soft",
    ),
)

# ============================================================
# Prerequisite
# ============================================================

_PREREQUISITE = (
    _rule(
        "prereq_temporal_before", "prerequisite",
        r"\b(long\s+before|just\s+before|shortly\s+before|right\s+before|the\s+day\s+before)\b",
        "Temporal narration, not dependency", "hard",
    ),
    _rule(
        "prereq_before_meeting", "prerequisite",
        r"\bbefore\s+(the\s+)?(meeting|call|event|conference|session|interview)\b",
        "Temporal reference, not technical prerequisite", "soft",
    ),
    _rule(
        "prereq_first_ordinal", "prerequisite",
        r"^first[,;]?\s+(let\s+me|i\s+want\s+to|i('ll| will)|we\s+should\s+note)\b",
        "Ordinal framing, not prerequisite", "hard",
    ),
    _rule(
        "prereq_first_enumeration", "prerequisite",
        r"\b(first|second|third)[,;]\s+(the|we|you|there)\b",
        "List enumeration, not dependency", "soft",
    ),
    _rule(
        "prereq_after_temporal", "prerequisite",
        r"\b(shortly\s+after|right\s+after|just\s+after|the\s+day\s+after|years?\s+after)\b",
        "Temporal narration, not dependency", "hard",
    ),
    _rule(
        "prereq_requires_consideration", "prerequisite",
        r"\brequires?\s+(careful\s+)?(consideration|thought|analysis|attention)\b",
        "Subjective requirement, not technical dependency", "soft",
    ),
    _rule(
        "prereq_needs_improvement", "prerequisite",
        r"\bneeds?\s+(improvement|work|attention|more|further)\b",
        "Assessment, not dependency", "hard",
    ),
)

# ============================================================
# Conditional
# ============================================================

_CONDITIONAL = (
    _rule(
        "conditional_if_any", "conditional",
        r"\bif\s+(any|at\s+all)\b",
        "Minimizing phrase, not conditional logic", "hard",
    ),
    _rule(
        "conditional_if_you_will", "conditional",
        r"\bif\s+you\s+will\b",
        "Parenthetical phrase, not conditional", "hard",
    ),
    _rule(
        "conditional_even_if", "conditional",
        r"\beven\s+if\b",
        "Concessive, not conditional dependency", "soft",
    ),
    _rule(
        "conditional_as_if", "conditional",
        r"\bas\s+if\b",
        "Comparative, not conditional", "hard",
    ),
    _rule(
        "conditional_when_definition", "conditional",
        r"\b\w+\s+is\s+when\b",
        "Definition format, not conditional claim", "hard",
    ),
    _rule(
        "conditional_because_history", "conditional",
        r"\bbecause\s+(of\s+)?(the\s+)?(history|past|tradition|legacy)\b",
        "Historical explanation, not causal dependency", "soft",
    ),
    _rule(
        "conditional_since_temporal", "conditional",
        r"\bsince\s+(19|20)\d{2}\b",
        'Temporal "since", not causal', "hard",
    ),
    _rule(
        "conditional_when_temporal", "conditional",
        r"\bwhen\s+(he|she|they|i|we)\s+(was|were|arrived|came|left|started)\b",
        'Temporal "when", not conditional', "hard",
    ),
)

# ============================================================
# Assertive
# ============================================================

_ASSERTIVE = (
    _rule(
        "assertive_definition", "assertive",
        r"^[A-Z][a-z]+\s+(is|are)\s+(defined\s+as|a\s+type\s+of|a\s+kind\s+of|the\s+process\s+of)\b",
        "Definition format, not claim", "hard",
    ),
    _rule(
        "assertive_example", "assertive",
        r"\b(for\s+example|for\s+instance|e\.g\.|such\s+as|like\s+when)\b",
        "Example, not claim", "soft",
    ),
    _rule(
        "assertive_hypothetical", "assertive",
        r"\b(imagine|suppose|say\s+you|let'?s\s+say|hypothetically|in\s+theory)\b",
        "Hypothetical, not assertion", "hard",
    ),
    _rule(
        "assertive_list_fragment", "assertive",
        r"^[-•*]\s*.{0,25}$",
        "List fragment, not complete claim", "hard",
    ),
    _rule(
        "assertive_citation", "assertive",
        r"\b(according\s+to|as\s+\w+\s+(says?|notes?|argues?|claims?)|.+\s+(wrote|stated|mentioned))\b",
        "Citation, not original assertion", "soft",
    ),
    _rule(
        "assertive_heavy_hedge", "assertive",
        r"\b(might|could|possibly|perhaps|maybe|arguably|conceivably)\b",
        "Heavily hedged, not assertion", "soft",
    ),
    _rule(
        "assertive_some_believe", "assertive",
        r"\b(some\s+(people|experts?|argue|believe|say)|many\s+(believe|think|argue)|it\s+is\s+(often\s+)?said)\b",
        "Attributed to others, not asserted", "soft",
    ),
    _rule(
        "assertive_rhetorical_question", "assertive",
        r"^(what\s+if|why\s+would|how\s+can|isn'?t\s+it|wouldn'?t\s+you|don'?t\s+you\s+think)\b",
        "Rhetorical question form", "hard",
    ),
    _rule(
        "assertive_this_means", "assertive",
        r"^(this\s+means|in\s+other\s+words|that\s+is|i\.e\.|put\s+differently)\b",
        "Restatement, not new assertion", "soft",
    ),
    _rule(
        "assertive_reported_finding", "assertive",
        r"\b(studies?|research|reports?|findings?|surveys?|data)\s+(show|indicate|suggest|reveal|demonstrate|confirm)\b",
        "Reported finding from external source, not direct assertion", "soft",
    ),
    _rule(
        "assertive_statistical", "assertive",
        r"\baccording\s+to\s+(the\s+)?(data|statistics|numbers|metrics)\b",
        "Statistical reference, not asserted claim", "soft",
    ),
)

EXCLUSION_RULES: tuple[ExclusionRule, ...] = (
    _UNIVERSAL + _PRESCRIPTIVE + _CONFLICT + _PREREQUISITE + _CONDITIONAL + _ASSERTIVE
)


def get_rules_for_type(statement_type: str) -> list[ExclusionRule]:
    """Rules that apply to a type, in catalog order."""
    return [r for r in EXCLUSION_RULES if statement_type in r.applies_to]
