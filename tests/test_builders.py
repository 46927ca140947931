"""Tests for builders — per-shape data payloads and their preconditions."""

from __future__ import annotations

import pytest
from conftest import enrich_claims, make_claim, make_edge

from deliberation_shape.builders.common import ShapeBuildError, dimension_cluster, floor_claim
from deliberation_shape.builders.constrained import build_constrained_data
from deliberation_shape.builders.convergent import build_convergent_data
from deliberation_shape.builders.forked import build_forked_data
from deliberation_shape.builders.parallel import build_parallel_data
from deliberation_shape.builders.sparse import build_sparse_data
from deliberation_shape.patterns.relations import (
    detect_cascade_risks,
    detect_conflict_clusters,
    detect_enriched_conflicts,
    detect_leverage_inversions,
    detect_tradeoffs,
)
from deliberation_shape.scoring.flags import top_claim_ids
from deliberation_shape.topology.graph_analysis import analyze_graph


def _graph(claims, edges):
    return analyze_graph([c["id"] for c in claims], edges, claims)


def _patterns(claims, edges, model_count=10):
    top = top_claim_ids(claims)
    infos = detect_enriched_conflicts(edges, claims, model_count)
    return {
        "leverage_inversions": detect_leverage_inversions(claims, edges, top),
        "cascade_risks": detect_cascade_risks(edges, {c["id"]: c["label"] for c in claims}),
        "conflicts": [],
        "conflict_infos": infos,
        "conflict_clusters": detect_conflict_clusters(infos, claims),
        "tradeoffs": detect_tradeoffs(edges, {c["id"]: c for c in claims}, top),
        "convergence_points": [],
        "isolated_claims": [],
    }


# ============================================================
# Common helpers
# ============================================================


class TestCommon:
    def test_shape_build_error_is_value_error(self):
        assert issubclass(ShapeBuildError, ValueError)

    def test_floor_claim_contested_both_directions(self):
        (claim,) = enrich_claims([make_claim("a", [0])])
        edges = [make_edge("x", "a", "conflicts"), make_edge("a", "y", "conflicts"), make_edge("z", "a")]
        fc = floor_claim(claim, edges)
        assert fc["is_contested"] is True
        assert fc["contested_by"] == ["x", "y"]

    def test_dimension_cluster_theme_and_cohesion(self):
        claims = enrich_claims(
            [make_claim("a", [0, 1, 2], label="Lead"), make_claim("b", [3], label="Tail")]
        )
        dim = dimension_cluster("dim_1", claims, [make_edge("a", "b")])
        assert dim["theme"] == "Lead"
        assert dim["cohesion"] == 0.5
        assert dim["avg_support"] == 0.2


# ============================================================
# Convergent
# ============================================================


class TestConvergent:
    def test_single_consensus(self, single_consensus_artifact):
        claims = enrich_claims(single_consensus_artifact["claims"])
        data = build_convergent_data(claims, [], ["pricing"])
        assert data["shape"] == "convergent"
        assert [f["id"] for f in data["floor"]] == ["c1"]
        assert data["floor_strength"] == "strong"
        assert data["confidence"] == 1.0
        assert data["challengers"] == []
        assert data["strongest_outlier"] is None
        assert data["blind_spots"] == ["pricing"]
        assert data["transfer_question"] == 'What would have to be true for "Claim c1" to fail?'

    def test_challenger_and_outlier(self):
        edges = [make_edge("c", "p", "conflicts")]
        claims = enrich_claims(
            [make_claim("p", list(range(8))), make_claim("c", [0], role="challenger")], edges
        )
        data = build_convergent_data(claims, edges, [])
        (challenger,) = data["challengers"]
        assert challenger["id"] == "c"
        assert challenger["targets_claim"] == "p"
        assert data["floor"][0]["contested_by"] == ["c"]
        outlier = data["strongest_outlier"]
        assert outlier["reason"] == "explicit_challenger"
        assert outlier["what_it_questions"] == "Claim p"
        assert data["transfer_question"] == 'Does "Claim p" still hold if "Claim c" is right?'

    def test_floor_assumptions_from_outside_prerequisites(self, keystone_artifact):
        claims = enrich_claims(keystone_artifact["claims"], keystone_artifact["edges"])
        data = build_convergent_data(claims, keystone_artifact["edges"], [])
        assert data["floor_strength"] == "moderate"
        assert data["floor_assumptions"] == [
            '"Rolling deploys" assumes "Schema is versioned"',
            '"Blue-green cutover" assumes "Schema is versioned"',
        ]
        assert data["strongest_outlier"]["reason"] == "leverage_inversion"


# ============================================================
# Forked
# ============================================================


class TestForked:
    def test_individual_central_conflict(self, symmetric_fork_artifact):
        edges = symmetric_fork_artifact["edges"]
        claims = enrich_claims(symmetric_fork_artifact["claims"], edges)
        data = build_forked_data(claims, edges, _patterns(claims, edges), _graph(claims, edges))
        central = data["central_conflict"]
        assert central["type"] == "individual"
        assert central["dynamics"] == "symmetric"
        assert central["position_a"]["claim"]["id"] == "a"
        assert data["collapsing_question"] == (
            'What would have to be true for "Use a monolith" to win over "Use microservices"?'
        )
        assert data["floor"]["exists"] is False
        assert data["floor"]["strength"] == "absent"
        assert data["secondary_conflicts"] == []

    def test_cluster_central_conflict(self):
        edges = [make_edge("c1", "t", "conflicts"), make_edge("c2", "t", "conflicts")]
        claims = enrich_claims(
            [
                make_claim("t", list(range(6))),
                make_claim("c1", [0], role="challenger"),
                make_claim("c2", [1]),
            ],
            edges,
        )
        data = build_forked_data(claims, edges, _patterns(claims, edges), _graph(claims, edges))
        central = data["central_conflict"]
        assert central["type"] == "cluster"
        assert central["dynamics"] == "one_vs_many"
        assert [c["id"] for c in central["challengers"]["claims"]] == ["c1", "c2"]
        assert data["collapsing_question"] == (
            'Does "Claim t" survive the objections raised by 2 opposing claims?'
        )

    def test_requires_a_conflict(self, single_consensus_artifact):
        claims = enrich_claims(single_consensus_artifact["claims"])
        with pytest.raises(ShapeBuildError):
            build_forked_data(claims, [], _patterns(claims, []), _graph(claims, []))


# ============================================================
# Constrained
# ============================================================


class TestConstrained:
    def test_dominated_option(self):
        edges = [make_edge("a", "b", "tradeoff")]
        claims = enrich_claims(
            [
                make_claim("a", list(range(8)), text="Latency under load"),
                make_claim("b", [0, 1], text="Throughput under load"),
            ],
            edges,
        )
        data = build_constrained_data(claims, edges, _patterns(claims, edges)["tradeoffs"])
        (entry,) = data["tradeoffs"]
        assert entry["id"] == "a_b"
        assert entry["symmetry"] == "asymmetric"
        assert entry["governing_factor"] == "Balancing load"
        assert data["dominated_options"][0]["dominated"] == "b"
        assert data["dominated_options"][0]["dominated_by"] == "a"
        assert data["floor"] == []

    def test_conditional_governs_tradeoff(self):
        edges = [make_edge("a", "b", "tradeoff"), make_edge("g", "a", "prerequisite")]
        claims = enrich_claims(
            [
                make_claim("a", list(range(8)), text="Ship weekly"),
                make_claim("b", [0, 1], text="Freeze releases"),
                make_claim("g", [5], label="If the team is small", type="conditional"),
            ],
            edges,
        )
        data = build_constrained_data(claims, edges, _patterns(claims, edges)["tradeoffs"])
        assert data["tradeoffs"][0]["governing_factor"] == "If the team is small"

    def test_requires_a_tradeoff(self):
        with pytest.raises(ShapeBuildError):
            build_constrained_data([], [], [])


# ============================================================
# Parallel
# ============================================================


class TestParallel:
    def _claims(self):
        edges = [make_edge("a", "a2")]
        claims = enrich_claims(
            [
                make_claim("c", [8], challenges="a"),
                make_claim("a", list(range(6))),
                make_claim("a2", [0, 1, 2, 3]),
                make_claim("b", [6, 7, 8, 9]),
            ],
            edges,
        )
        return claims, edges

    def test_dimensions_with_hidden_last(self):
        claims, edges = self._claims()
        data = build_parallel_data(claims, edges, _graph(claims, edges), ["cost"])
        assert [d["id"] for d in data["dimensions"]] == ["dim_2", "dim_3", "dim_1"]
        assert data["dominant_dimension"]["id"] == "dim_2"
        assert data["hidden_dimension"]["id"] == "dim_1"
        assert data["gaps"] == ["cost"]
        assert data["dominant_blind_spots"] == ["Claim c", "Claim b"]
        assert data["transfer_question"] == 'Does "Claim c" change how much "Claim a" matters to you?'

    def test_interactions(self):
        claims, edges = self._claims()
        data = build_parallel_data(claims, edges, _graph(claims, edges), [])
        relations = {(i["dimension_a"], i["dimension_b"]): i["relationship"] for i in data["interactions"]}
        assert relations[("dim_2", "dim_1")] == "conflicting"
        assert relations[("dim_3", "dim_1")] == "independent"

    def test_requires_two_components(self, single_consensus_artifact):
        claims = enrich_claims(single_consensus_artifact["claims"])
        with pytest.raises(ShapeBuildError):
            build_parallel_data(claims, [], _graph(claims, []), [])


# ============================================================
# Sparse
# ============================================================


class TestSparse:
    def test_empty_input(self):
        data = build_sparse_data([], [], _graph([], []), [], 0.0)
        assert data["shape"] == "sparse"
        assert data["sparsity_reasons"] == ["No claims were extracted"]
        assert data["strongest_signals"] == []
        assert data["loose_clusters"] == []
        assert data["isolated_claims"] == []
        assert data["clarifying_questions"] == []
        assert data["outer_boundary"] is None

    def test_fragmented_population(self):
        claims = enrich_claims([make_claim(f"c{i}", [i]) for i in range(5)])
        data = build_sparse_data(claims, [], _graph(claims, []), ["pricing"], 0.3)
        assert len(data["strongest_signals"]) == 2
        assert data["strongest_signals"][0]["reason"].startswith("Among the best-supported")
        assert data["clarifying_questions"] == ["What about pricing?"]
        assert data["signal_strength"] == 0.3
        assert len(data["isolated_claims"]) == 5
        assert data["sparsity_reasons"] == [
            "No claim reaches majority support",
            "Claims split into 5 disconnected groups",
            "5 claim(s) have no relation to any other claim",
            "No relations between claims were identified",
            "1 topic(s) were left unaddressed by every model",
        ]

    def test_loose_clusters_need_two_members(self):
        edges = [make_edge("a", "b")]
        claims = enrich_claims(
            [make_claim("a", [0]), make_claim("b", [1]), make_claim("c", [2])], edges
        )
        data = build_sparse_data(claims, edges, _graph(claims, edges), [], 0.5)
        (cluster,) = data["loose_clusters"]
        assert [m["id"] for m in cluster["claims"]] == ["a", "b"]
        assert data["clarifying_questions"] == [
            "Which of these directions is closest to what you are asking?"
        ]
