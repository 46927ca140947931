"""Primary shape classifier — maps a peak analysis to one of five shapes.

Decision order (first match wins):
  1. no peaks                          -> sparse      (0.7 if hills are dense, else 0.9)
  2. one peak                          -> convergent  (min(0.9, 0.5 + 0.4 * ratio))
  3. conflict edge between peaks       -> forked      (0.85)
  4. tradeoff edge between peaks       -> constrained (0.8)
  5. supports/prerequisite edge        -> convergent  (min(0.85, 0.5 + 0.35 * avg ratio))
  6. no edges between peaks            -> parallel    (0.75)
  7. anything else                     -> convergent  (0.6, low-confidence fallback)

Prerequisite edges between peaks are cohesive: they never signal conflict or
tradeoff. Every branch returns human-readable evidence.
"""

from __future__ import annotations

from deliberation_shape.contracts import (
    EnrichedClaim,
    PeakAnalysis,
    PeakRelationship,
    PrimaryClassification,
    PrimaryShape,
)

HILL_DENSITY_SETTLING = 0.3
SYMMETRY_RATIO_DELTA = 0.15


def _pct(ratio: float) -> str:
    return f"{round(ratio * 100)}%"


def _result(
    shape: PrimaryShape, confidence: float, evidence: list[str], relationship: PeakRelationship
) -> PrimaryClassification:
    return PrimaryClassification(
        primary=shape.value,
        confidence=round(confidence, 4),
        evidence=evidence,
        peak_relationship=relationship.value,
    )


def _conflict_symmetry(analysis: PeakAnalysis) -> tuple[str, list[str]]:
    by_id = {p["id"]: p for p in analysis["peaks"]}
    notes: list[str] = []
    symmetric = 0
    for e in analysis["peak_conflicts"]:
        a, b = by_id[e["from"]], by_id[e["to"]]
        delta = abs(a["support_ratio"] - b["support_ratio"])
        kind = "symmetric" if delta < SYMMETRY_RATIO_DELTA else "asymmetric"
        symmetric += kind == "symmetric"
        notes.append(
            f"{kind} conflict: \"{a['label']}\" ({_pct(a['support_ratio'])}) vs "
            f"\"{b['label']}\" ({_pct(b['support_ratio'])})"
        )
    overall = "symmetric" if symmetric * 2 >= len(analysis["peak_conflicts"]) else "asymmetric"
    return overall, notes


def classify_primary_shape(
    analysis: PeakAnalysis, claims: list[EnrichedClaim]
) -> PrimaryClassification:
    peaks = analysis["peaks"]

    if not peaks:
        hill_density = len(analysis["hills"]) / len(claims) if claims else 0.0
        if hill_density >= HILL_DENSITY_SETTLING:
            return _result(
                PrimaryShape.SPARSE,
                0.7,
                [
                    "No claim reaches majority support with multiple supporters",
                    f"{len(analysis['hills'])} claims sit in the hill tier; the landscape is "
                    "almost settled",
                ],
                PeakRelationship.NONE,
            )
        return _result(
            PrimaryShape.SPARSE,
            0.9,
            [
                "No claim reaches majority support with multiple supporters",
                f"Only {len(analysis['hills'])} of {len(claims)} claims reach the hill tier; "
                "the landscape is genuinely fragmented",
            ],
            PeakRelationship.NONE,
        )

    if len(peaks) == 1:
        peak = peaks[0]
        return _result(
            PrimaryShape.CONVERGENT,
            min(0.9, 0.5 + 0.4 * peak["support_ratio"]),
            [
                f"Single peak: \"{peak['label']}\" with {_pct(peak['support_ratio'])} support",
                f"{len(analysis['hills'])} hills and {len(analysis['floor'])} floor claims "
                "surround it",
            ],
            PeakRelationship.NONE,
        )

    if analysis["peak_conflicts"]:
        overall, notes = _conflict_symmetry(analysis)
        return _result(
            PrimaryShape.FORKED,
            0.85,
            [
                f"{len(peaks)} peaks with {len(analysis['peak_conflicts'])} conflict edge(s) "
                f"between them; the fork is {overall}",
                *notes,
            ],
            PeakRelationship.CONFLICTING,
        )

    if analysis["peak_tradeoffs"]:
        return _result(
            PrimaryShape.CONSTRAINED,
            0.8,
            [
                f"{len(peaks)} peaks with {len(analysis['peak_tradeoffs'])} tradeoff edge(s) "
                "and no conflicts between them",
                "Optimizing one peak costs another",
            ],
            PeakRelationship.TRADING_OFF,
        )

    if analysis["peak_supports"]:
        avg = sum(p["support_ratio"] for p in peaks) / len(peaks)
        return _result(
            PrimaryShape.CONVERGENT,
            min(0.85, 0.5 + 0.35 * avg),
            [
                f"{len(peaks)} peaks reinforce each other through "
                f"{len(analysis['peak_supports'])} supports/prerequisite edge(s)",
                f"Average peak support {_pct(avg)}",
            ],
            PeakRelationship.SUPPORTING,
        )

    if analysis["peak_unconnected"]:
        return _result(
            PrimaryShape.PARALLEL,
            0.75,
            [
                f"{len(peaks)} peaks with no edges between them",
                "Each peak answers a different dimension of the question",
            ],
            PeakRelationship.INDEPENDENT,
        )

    return _result(
        PrimaryShape.CONVERGENT,
        0.6,
        [
            f"{len(peaks)} peaks with ambiguous relations between them",
            "Low-confidence fallback classification",
        ],
        PeakRelationship.NONE,
    )
