"""AnalysisState — the single state object flowing through the analysis graph."""

from __future__ import annotations

import operator
from typing import Annotated, Any, TypedDict

from deliberation_shape.contracts import (
    AnalysisEvent,
    ModelResponse,
    ShadowResult,
    StructuralAnalysis,
)

# --- Reducers (last-write-wins) ---


def _replace(existing: str, new: str) -> str:
    return new


def _replace_list(existing: list, new: list) -> list:
    """Replace-last-write for list fields (overwrites, not appends)."""
    return new


def _replace_dict(existing: dict, new: dict) -> dict:
    return new


# --- Graph State ---


class AnalysisState(TypedDict, total=False):
    # Input (set once)
    artifact: Annotated[dict[str, Any], _replace_dict]
    batch_responses: Annotated[list[ModelResponse], _replace_list]
    user_query: Annotated[str, _replace]

    # Branch outputs (each written by exactly one node)
    analysis: Annotated[StructuralAnalysis, _replace_dict]
    shadow: Annotated[ShadowResult, _replace_dict]

    # Accumulated from both branches
    diagnostics: Annotated[list[str], operator.add]
    events: Annotated[list[AnalysisEvent], operator.add]
