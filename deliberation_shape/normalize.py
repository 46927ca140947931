"""Input normalization for mapper artifacts.

Malformed entries are coerced to defaults or dropped, never raised. Every drop
is recorded as a diagnostic string so callers can audit what was discarded.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from deliberation_shape.contracts import (
    CLAIM_ROLES,
    CLAIM_TYPES,
    EDGE_TYPES,
    Claim,
    ClaimRole,
    ClaimType,
    Edge,
)


class NormalizedInput(NamedTuple):
    claims: list[Claim]
    edges: list[Edge]
    ghosts: list[str]
    model_count: int  # 0 means "infer"
    diagnostics: list[str]


def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _is_member(value: Any, vocabulary: frozenset[str]) -> bool:
    return isinstance(value, str) and value in vocabulary


def _normalize_claim(raw: Mapping[str, Any]) -> Claim | None:
    claim_id = raw.get("id")
    if not isinstance(claim_id, str) or not claim_id:
        return None

    supporters = [
        s
        for s in _as_list(raw.get("supporters"))
        if isinstance(s, int) and not isinstance(s, bool) and s >= 0
    ]
    claim_type = raw.get("type")
    role = raw.get("role")
    challenges = raw.get("challenges")
    label = raw.get("label")
    text = raw.get("text")

    return Claim(
        id=claim_id,
        label=label if isinstance(label, str) and label else claim_id,
        text=text if isinstance(text, str) else "",
        supporters=supporters,
        type=claim_type if _is_member(claim_type, CLAIM_TYPES) else ClaimType.PRESCRIPTIVE.value,
        role=role if _is_member(role, CLAIM_ROLES) else ClaimRole.BRANCH.value,
        challenges=challenges if isinstance(challenges, str) and challenges else None,
    )


def normalize_artifact(artifact: Any) -> NormalizedInput:
    """Coerce a raw mapper artifact into well-typed claims, edges, and ghosts.

    Edges whose endpoints are unknown, self-referencing, or whose type is not
    one of the four edge types are discarded here, once, so that no later stage
    can observe them.
    """
    diagnostics: list[str] = []
    source: Mapping[str, Any] = artifact if isinstance(artifact, Mapping) else {}
    if artifact is not None and not isinstance(artifact, Mapping):
        diagnostics.append(f"artifact is {type(artifact).__name__}, not a mapping; treated as empty")

    claims: list[Claim] = []
    seen_ids: set[str] = set()
    for index, raw in enumerate(_as_list(source.get("claims"))):
        claim = _normalize_claim(raw) if isinstance(raw, Mapping) else None
        if claim is None:
            diagnostics.append(f"claim[{index}] dropped: missing id or not a mapping")
            continue
        if claim["id"] in seen_ids:
            diagnostics.append(f"claim[{index}] dropped: duplicate id '{claim['id']}'")
            continue
        seen_ids.add(claim["id"])
        claims.append(claim)

    # challenges may point forward in the list, so resolve after all ids are known
    for claim in claims:
        target = claim["challenges"]
        if target is None:
            continue
        if target == claim["id"]:
            diagnostics.append(f"claim '{target}' challenges itself; cleared")
            claim["challenges"] = None
        elif target not in seen_ids:
            diagnostics.append(f"claim '{claim['id']}' challenges unknown claim {target!r}; cleared")
            claim["challenges"] = None

    edges: list[Edge] = []
    for index, raw in enumerate(_as_list(source.get("edges"))):
        if not isinstance(raw, Mapping):
            diagnostics.append(f"edge[{index}] dropped: not a mapping")
            continue
        src, dst, edge_type = raw.get("from"), raw.get("to"), raw.get("type")
        if not isinstance(src, str) or not isinstance(dst, str):
            diagnostics.append(f"edge[{index}] dropped: endpoints must be claim ids")
            continue
        if src not in seen_ids or dst not in seen_ids:
            diagnostics.append(f"edge[{index}] dropped: dangling endpoint {src!r} -> {dst!r}")
            continue
        if src == dst:
            diagnostics.append(f"edge[{index}] dropped: self-loop on {src!r}")
            continue
        if not _is_member(edge_type, EDGE_TYPES):
            diagnostics.append(f"edge[{index}] dropped: unknown type {edge_type!r}")
            continue
        edges.append({"from": src, "to": dst, "type": edge_type})

    ghosts = [str(g) for g in _as_list(source.get("ghosts")) if g]

    raw_count = source.get("model_count")
    valid_count = isinstance(raw_count, int) and not isinstance(raw_count, bool) and raw_count > 0
    model_count = raw_count if valid_count else 0

    return NormalizedInput(claims, edges, ghosts, model_count, diagnostics)
