"""Composite shape detection — primary classification plus secondary patterns."""

from __future__ import annotations

from typing import assert_never

from deliberation_shape.classify.peaks import analyze_peaks, compute_peak_pair_relations
from deliberation_shape.classify.primary import classify_primary_shape
from deliberation_shape.classify.secondary import (
    detect_chain_pattern,
    detect_challenged_pattern,
    detect_conditional_pattern,
    detect_dissent_pattern,
    detect_fragile_pattern,
    detect_keystone_pattern,
    detect_orphaned_pattern,
)
from deliberation_shape.contracts import (
    CompositeShape,
    Edge,
    EnrichedClaim,
    GraphAnalysis,
    PeakSummary,
    PrimaryShape,
    SecondaryPattern,
    StructuralPatterns,
)


def generate_transfer_question(
    primary: str, peaks: list[PeakSummary], dissent: SecondaryPattern | None
) -> str:
    """Follow-up question surfacing the ambiguity the shape reveals."""
    shape = PrimaryShape(primary)
    lead = peaks[0]["label"] if peaks else ""
    match shape:
        case PrimaryShape.CONVERGENT:
            if lead:
                question = f'What does the agreement on "{lead}" assume without stating?'
            else:
                question = "What does the emerging agreement assume without stating?"
        case PrimaryShape.FORKED:
            if len(peaks) >= 2:
                question = (
                    f'Which condition in your situation decides between "{peaks[0]["label"]}" '
                    f'and "{peaks[1]["label"]}"?'
                )
            else:
                question = "Which condition in your situation decides between the competing positions?"
        case PrimaryShape.CONSTRAINED:
            question = "Which constraint are you least willing to give up?"
        case PrimaryShape.PARALLEL:
            question = "Which of these separate dimensions matters most for your decision?"
        case PrimaryShape.SPARSE:
            question = "What additional context would narrow this question down?"
        case _:
            assert_never(shape)

    if dissent is not None and dissent["data"].get("strongest_voice"):
        voice = dissent["data"]["strongest_voice"]["label"]
        question += f' What would it take for "{voice}" to be right?'
    return question


def detect_composite_shape(
    claims: list[EnrichedClaim],
    edges: list[Edge],
    graph: GraphAnalysis,
    patterns: StructuralPatterns,
) -> CompositeShape:
    peak_analysis = analyze_peaks(claims, edges)
    classification = classify_primary_shape(peak_analysis, claims)

    # Dissent first and unconditionally
    dissent = detect_dissent_pattern(
        claims, edges, peak_analysis, patterns["leverage_inversions"]
    )
    detected = [
        dissent,
        detect_challenged_pattern(peak_analysis, edges),
        detect_keystone_pattern(claims, edges, graph, patterns["cascade_risks"]),
        detect_chain_pattern(claims, graph),
        detect_fragile_pattern(claims, edges, peak_analysis),
        detect_conditional_pattern(claims, edges),
        detect_orphaned_pattern(peak_analysis, edges),
    ]
    secondary = [p for p in detected if p is not None]

    peaks = [
        PeakSummary(id=p["id"], label=p["label"], support_ratio=p["support_ratio"])
        for p in sorted(peak_analysis["peaks"], key=lambda c: c["support_ratio"], reverse=True)
    ]

    evidence = list(classification["evidence"])
    evidence.extend(f"Secondary pattern: {p['type']} ({p['severity']})" for p in secondary)

    return CompositeShape(
        primary=classification["primary"],
        confidence=classification["confidence"],
        patterns=secondary,
        peaks=peaks,
        peak_relationship=classification["peak_relationship"],
        peak_pair_relations=compute_peak_pair_relations(peak_analysis["peaks"], edges),
        evidence=evidence,
        transfer_question=generate_transfer_question(classification["primary"], peaks, dissent),
    )
