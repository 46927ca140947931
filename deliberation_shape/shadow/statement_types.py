"""Statement type catalog — inclusion patterns for shadow pass 1.

Mechanical pattern matching only. Priority order:
conditional > prerequisite > conflict > prescriptive > assertive.
Scope and dependency markers outrank normative force because they are the
first thing lost when answers are condensed into claims.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from deliberation_shape.contracts import StatementType


@dataclass(frozen=True)
class PatternDefinition:
    """What a sentence of one statement type looks like."""

    type: StatementType
    priority: int  # higher wins
    patterns: tuple[re.Pattern[str], ...]


def _compile(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


# ============================================================
# Inclusion Catalog
# ============================================================

CONDITIONAL = PatternDefinition(
    type=StatementType.CONDITIONAL,
    priority=5,
    patterns=_compile(
        # conditional markers
        r"\bif\b",
        r"\bwhen\b",
        r"\bunless\b",
        r"\bprovided\s+that\b",
        r"\bgiven\s+that\b",
        r"\bassuming\b",
        r"\bin\s+case\b",
        # dependency
        r"\bdepends?\s+on\b",
        r"\bdepending\s+on\b",
        r"\bcontingent\s+on\b",
        r"\bsubject\s+to\b",
        # causation
        r"\bbecause\b",
        r"\bsince\b",
        r"\bdue\s+to\b",
        r"\bas\s+a\s+result\b",
        r"\btherefore\b",
        r"\bthus\b",
        r"\bhence\b",
        # scope limiters
        r"\bonly\s+if\b",
        r"\bonly\s+when\b",
        r"\bexcept\s+when\b",
        r"\bin\s+(some|certain|specific)\s+cases\b",
        r"\bin\s+the\s+context\s+of\b",
        r"\bfor\s+(this|that|these|those)\s+(use\s+)?case\b",
    ),
)

PREREQUISITE = PatternDefinition(
    type=StatementType.PREREQUISITE,
    priority=4,
    patterns=_compile(
        # temporal precedence
        r"\bbefore\b",
        r"\bfirst\b",
        r"\bprior\s+to\b",
        r"\bprecede\b",
        r"\binitially\b",
        # dependency
        r"\brequires?\b",
        r"\bneeds?\b",
        r"\bdepends?\s+on\s+having\b",
        r"\bprerequisite\b",
        r"\bprecondition\b",
        # enabling
        r"\benables?\b",
        r"\bunblocks?\b",
        r"\bunlocks?\b",
        r"\ballows?\s+for\b",
        # execution order
        r"\bruns?\s+before\b",
        r"\bexecutes?\s+before\b",
        r"\bmust\s+(come|happen|occur)\s+before\b",
        # foundation
        r"\bfoundation\s+for\b",
        r"\bbuilds?\s+on\b",
        r"\bbased\s+on\b",
        r"\bgroundwork\b",
        # reverse dependency: "X after Y" makes Y the prerequisite
        r"\bafter\b",
        r"\bruns?\s+after\b",
        r"\bexecutes?\s+after\b",
        r"\bfollows?\b",
        r"\bsubsequent\s+to\b",
    ),
)

CONFLICT = PatternDefinition(
    type=StatementType.CONFLICT,
    priority=3,
    patterns=_compile(
        # adversative conjunctions
        r"\bhowever\b",
        r"\bbut\b",
        r"\balthough\b",
        r"\bthough\b",
        r"\bdespite\b",
        r"\bnevertheless\b",
        r"\bnonetheless\b",
        r"\byet\b",
        # explicit opposition
        r"\bcontradicts?\b",
        r"\bconflicts?\s+with\b",
        r"\bopposes?\b",
        r"\bopposed\s+to\b",
        r"\bagainst\b",
        r"\bcounters?\b",
        r"\brebuts?\b",
        r"\brefutes?\b",
        # contrast
        r"\bon\s+the\s+other\s+hand\b",
        r"\bin\s+contrast\b",
        r"\bconversely\b",
        r"\brather\s+than\b",
        r"\binstead\s+of\b",
        r"\bas\s+opposed\s+to\b",
        # challenge
        r"\bchallenges?\s+(the|this|that)\b",
        r"\bdisagrees?\s+with\b",
        r"\bquestions?\s+(whether|the|this)\b",
        r"\bundermine\b",
        r"\bwhile\s+(true|valid|correct|this)\b",
    ),
)

PRESCRIPTIVE = PatternDefinition(
    type=StatementType.PRESCRIPTIVE,
    priority=2,
    patterns=_compile(
        # obligation
        r"\bshould\b",
        r"\bmust\b",
        r"\bcannot\b",
        r"\bcan'?t\b",
        r"\bought\s+to\b",
        r"\bneed\s+to\b",
        r"\bhave\s+to\b",
        r"\bhas\s+to\b",
        # prohibition
        r"\bdon'?t\b",
        r"\bdo\s+not\b",
        r"\bnever\b",
        r"\bavoid\b",
        # imperatives
        r"\balways\b",
        r"\bensure\b",
        r"\bmake\s+sure\b",
        # necessity
        r"\brequired\b",
        r"\bmandatory\b",
        r"\bessential\b",
        r"\bcritical\s+to\b",
        r"\bimperative\b",
        r"\bsurely\b",
        r"\bcertainly\s+should\b",
        r"\bdefinitely\s+(should|must|need)\b",
    ),
)

ASSERTIVE = PatternDefinition(
    type=StatementType.ASSERTIVE,
    priority=1,
    patterns=_compile(
        r"\bis\b",
        r"\bare\b",
        r"\bwas\b",
        r"\bwere\b",
        r"\bdoes\b",
        r"\bdo\b",
        r"\bhas\b",
        r"\bhave\b",
        r"\bworks?\b",
        r"\bperforms?\b",
        r"\bprovides?\b",
        r"\boffers?\b",
        r"\bsupports?\b",
        r"\bincludes?\b",
        r"\bcontains?\b",
        r"\bexists?\b",
        r"\boccurs?\b",
        r"\bhappens?\b",
    ),
)

INCLUSION_PATTERNS: tuple[PatternDefinition, ...] = (
    CONDITIONAL,
    PREREQUISITE,
    CONFLICT,
    PRESCRIPTIVE,
    ASSERTIVE,
)

_BY_TYPE = {d.type.value: d for d in INCLUSION_PATTERNS}


def get_patterns(statement_type: str) -> tuple[re.Pattern[str], ...]:
    definition = _BY_TYPE.get(statement_type)
    return definition.patterns if definition else ()


def get_priority(statement_type: str) -> int:
    definition = _BY_TYPE.get(statement_type)
    return definition.priority if definition else 0
