"""Test fixtures and factories."""

from __future__ import annotations

import pytest

from deliberation_shape.contracts import (
    Claim,
    Edge,
    EnrichedClaim,
    MapperArtifact,
    ModelResponse,
)
from deliberation_shape.patterns.relations import detect_cascade_risks
from deliberation_shape.scoring.enrichment import compute_claim_ratios
from deliberation_shape.scoring.flags import assign_percentile_flags, top_claim_ids


def make_claim(
    claim_id: str,
    supporters: list[int] | None = None,
    *,
    label: str | None = None,
    text: str | None = None,
    type: str = "prescriptive",
    role: str = "branch",
    challenges: str | None = None,
) -> Claim:
    return Claim(
        id=claim_id,
        label=label or f"Claim {claim_id}",
        text=text or f"Text of claim {claim_id}",
        supporters=list(supporters or []),
        type=type,
        role=role,
        challenges=challenges,
    )


def make_edge(src: str, dst: str, edge_type: str = "supports") -> Edge:
    return {"from": src, "to": dst, "type": edge_type}


def make_artifact(
    claims: list[Claim],
    edges: list[Edge] | None = None,
    ghosts: list[str] | None = None,
    model_count: int | None = None,
) -> MapperArtifact:
    artifact = MapperArtifact(claims=claims, edges=list(edges or []), ghosts=list(ghosts or []))
    if model_count is not None:
        artifact["model_count"] = model_count
    return artifact


def enrich_claims(
    claims: list[Claim], edges: list[Edge] | None = None, model_count: int = 10
) -> list[EnrichedClaim]:
    """Run claims through ratios and percentile flags the way the engine does."""
    edges = list(edges or [])
    ratios = [compute_claim_ratios(c, edges, model_count) for c in claims]
    cascades = detect_cascade_risks(edges, {c["id"]: c["label"] for c in claims})
    return assign_percentile_flags(ratios, edges, cascades, top_claim_ids(ratios))


@pytest.fixture
def single_consensus_artifact() -> MapperArtifact:
    """One claim every one of ten models asserts."""
    return make_artifact([make_claim("c1", list(range(10)))], model_count=10)


@pytest.fixture
def symmetric_fork_artifact() -> MapperArtifact:
    """Two half-supported claims in mutual conflict."""
    return make_artifact(
        [
            make_claim("a", [0, 1, 2, 3, 4], label="Use a monolith"),
            make_claim("b", [5, 6, 7, 8, 9], label="Use microservices"),
        ],
        [make_edge("a", "b", "conflicts"), make_edge("b", "a", "conflicts")],
        model_count=10,
    )


@pytest.fixture
def keystone_artifact() -> MapperArtifact:
    """A single-supporter claim that two well-supported claims depend on."""
    return make_artifact(
        [
            make_claim("k", [0], label="Schema is versioned"),
            make_claim("x", [0, 1, 2, 3, 4], label="Rolling deploys"),
            make_claim("y", [5, 6, 7, 8, 9], label="Blue-green cutover"),
        ],
        [make_edge("k", "x", "prerequisite"), make_edge("k", "y", "prerequisite")],
        model_count=10,
    )


@pytest.fixture
def chain_artifact() -> MapperArtifact:
    """Four-step prerequisite chain whose second step has one supporter."""
    return make_artifact(
        [
            make_claim("s1", [0, 1, 2, 3]),
            make_claim("s2", [4]),
            make_claim("s3", [0, 1, 2, 5]),
            make_claim("s4", [0, 1, 6, 7]),
        ],
        [
            make_edge("s1", "s2", "prerequisite"),
            make_edge("s2", "s3", "prerequisite"),
            make_edge("s3", "s4", "prerequisite"),
        ],
        model_count=10,
    )


@pytest.fixture
def sample_responses() -> list[ModelResponse]:
    return [
        ModelResponse(
            model_index=0,
            content=(
                "You should cache the results aggressively. "
                "If the dataset changes hourly, the cache must be invalidated on write. "
                "However, invalidation adds operational complexity to every deployment."
            ),
        ),
        ModelResponse(
            model_index=1,
            content=(
                "Migrations require a versioned schema before any rollout. "
                "Let me explain the tradeoffs in more detail. "
                "Is this really worth the effort?"
            ),
        ),
    ]
