"""StateGraph construction — primary structure and shadow pass as parallel branches.

START fans out to both nodes; neither reads the other's output. A shadow
failure is reported through `diagnostics` and never reaches the structure
branch.
"""

from __future__ import annotations

import sys
import time
from typing import Any

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from deliberation_shape.config import Settings, get_settings
from deliberation_shape.contracts import ModelResponse, ShadowResult, StructuralAnalysis
from deliberation_shape.engine import compute_structural_analysis
from deliberation_shape.event_log.writer import EventLog
from deliberation_shape.graph.state import AnalysisState
from deliberation_shape.normalize import normalize_artifact
from deliberation_shape.shadow.delta import execute_shadow_delta
from deliberation_shape.shadow.extractor import execute_shadow_extraction


def build_graph(settings: Settings) -> CompiledStateGraph:
    """Build and compile the analysis graph."""

    def structure_node(state: AnalysisState) -> dict:
        start = time.monotonic()
        analysis = compute_structural_analysis(state.get("artifact"))
        event = EventLog.make_event(
            node="structure",
            elapsed_s=time.monotonic() - start,
            inputs_summary={
                "claims": len(analysis["claims_with_leverage"]),
                "edges": len(analysis["edges"]),
            },
            outputs_summary={
                "patterns": len(analysis["shape"]["patterns"]),
                "peaks": len(analysis["shape"]["peaks"]),
                "diagnostics": len(analysis["diagnostics"]),
            },
        )
        return {"analysis": analysis, "events": [event]}

    def shadow_node(state: AnalysisState) -> dict:
        responses = state.get("batch_responses") or []
        if not responses:
            return {"diagnostics": []}
        if not settings.shadow_enabled:
            return {"diagnostics": ["shadow pass disabled by settings"]}

        start = time.monotonic()
        try:
            normalized = normalize_artifact(state.get("artifact"))
            extraction = execute_shadow_extraction(
                responses, confidence_floor=settings.shadow_confidence_floor
            )
            delta = execute_shadow_delta(
                extraction,
                normalized.claims,
                normalized.edges,
                state.get("user_query", ""),
                match_threshold=settings.shadow_match_threshold,
            )
        except Exception as exc:
            message = f"shadow pass failed ({type(exc).__name__}: {exc}); omitted"
            print(f"WARNING: {message}", file=sys.stderr)
            return {"diagnostics": [message]}

        shadow = ShadowResult(
            audit=delta["audit"],
            unindexed=delta["unindexed"],
            top_unindexed=delta["unindexed"][: settings.shadow_top_n],
            processing_time=round(extraction["processing_time"] + delta["processing_time"], 4),
        )
        event = EventLog.make_event(
            node="shadow",
            elapsed_s=time.monotonic() - start,
            inputs_summary={
                "responses": len(responses),
                "sentences": extraction["stats"]["total_sentences"],
            },
            outputs_summary={
                "validated": extraction["stats"]["pass2_validated"],
                "unindexed": len(delta["unindexed"]),
            },
        )
        return {"shadow": shadow, "events": [event]}

    graph = StateGraph(AnalysisState)

    graph.add_node("structure", structure_node)
    graph.add_node("shadow", shadow_node)

    # Fan-out: both branches start from START and join at END
    graph.add_edge(START, "structure")
    graph.add_edge(START, "shadow")
    graph.add_edge("structure", END)
    graph.add_edge("shadow", END)

    return graph.compile()


def run_analysis_graph(
    artifact: Any,
    batch_responses: list[ModelResponse] | None = None,
    user_query: str = "",
    settings: Settings | None = None,
) -> AnalysisState:
    """Invoke the analysis graph once and return its final state."""
    settings = settings or get_settings()
    compiled = build_graph(settings)
    config = RunnableConfig(run_name="deliberation-shape", tags=["analysis"])
    return compiled.invoke(
        {
            "artifact": artifact,
            "batch_responses": list(batch_responses or []),
            "user_query": user_query,
            "diagnostics": [],
            "events": [],
        },
        config=config,
    )


def envelope_from_state(state: AnalysisState) -> StructuralAnalysis:
    """Merge branch outputs into one analysis envelope."""
    analysis = state["analysis"]
    envelope = StructuralAnalysis(**analysis)
    envelope["diagnostics"] = list(analysis["diagnostics"]) + list(state.get("diagnostics") or [])
    shadow = state.get("shadow")
    if shadow:
        envelope["shadow"] = shadow
    return envelope


def compute_full_analysis(
    batch_responses: list[ModelResponse],
    artifact: Any,
    user_query: str,
    settings: Settings | None = None,
) -> StructuralAnalysis:
    """Structural analysis plus the shadow pass over the raw responses.

    The primary fields are identical to `compute_structural_analysis`.
    `shadow` is present only when the shadow pass ran and succeeded.
    """
    state = run_analysis_graph(artifact, batch_responses, user_query, settings)
    return envelope_from_state(state)
