"""Tests for engine — end-to-end structural analysis of mapper artifacts."""

from __future__ import annotations

import copy
import json

from conftest import make_artifact, make_claim, make_edge

import deliberation_shape.engine as engine
from deliberation_shape.engine import compute_problem_structure, compute_structural_analysis

ENVELOPE_KEYS = {
    "edges",
    "landscape",
    "claims_with_leverage",
    "patterns",
    "ghost_analysis",
    "graph",
    "ratios",
    "shape",
    "diagnostics",
}


# ============================================================
# Shapes
# ============================================================


class TestShapes:
    def test_single_consensus(self, single_consensus_artifact):
        result = compute_structural_analysis(single_consensus_artifact)
        shape = result["shape"]
        assert set(result) == ENVELOPE_KEYS
        assert shape["primary"] == "convergent"
        assert shape["confidence"] == 0.9
        assert shape["patterns"] == []
        assert shape["data"]["shape"] == "convergent"
        assert shape["floor_assumptions"] == []
        assert shape["central_conflict"] is None
        assert shape["tradeoffs"] is None
        assert result["diagnostics"] == []

    def test_symmetric_fork(self, symmetric_fork_artifact):
        shape = compute_problem_structure(symmetric_fork_artifact)
        assert shape["primary"] == "forked"
        assert any("symmetric" in line for line in shape["evidence"])
        assert shape["data"]["shape"] == "forked"
        assert shape["central_conflict"] == shape["data"]["collapsing_question"]
        assert [p["id"] for p in shape["peaks"]] == ["a", "b"]

    def test_keystone(self, keystone_artifact):
        result = compute_structural_analysis(keystone_artifact)
        shape = result["shape"]
        types = [p["type"] for p in shape["patterns"]]
        assert types == ["dissent", "keystone", "fragile"]
        keystone = shape["patterns"][1]["data"]
        assert keystone["keystone"]["id"] == "k"
        assert keystone["cascade_size"] == 2
        assert result["graph"]["hub_claim"] == "k"
        assert "Secondary pattern: keystone (high)" in shape["evidence"]

    def test_unconnected_peaks_in_one_component_degrade(self, keystone_artifact):
        result = compute_structural_analysis(keystone_artifact)
        assert result["shape"]["primary"] == "parallel"
        assert result["shape"]["data"]["shape"] == "convergent"
        assert "parallel shape has fewer than two components; built as convergent" in (
            result["diagnostics"]
        )

    def test_chain_weak_link(self, chain_artifact):
        shape = compute_problem_structure(chain_artifact)
        chain = next(p for p in shape["patterns"] if p["type"] == "chain")
        assert chain["data"]["weak_links"] == ["s2"]

    def test_parallel(self):
        artifact = make_artifact(
            [make_claim("a", list(range(6))), make_claim("b", list(range(4, 10)))], model_count=10
        )
        shape = compute_problem_structure(artifact)
        assert shape["primary"] == "parallel"
        assert shape["data"]["shape"] == "parallel"
        assert len(shape["data"]["dimensions"]) == 2

    def test_constrained_convenience_tradeoffs(self):
        artifact = make_artifact(
            [
                make_claim("a", list(range(6)), text="Ship weekly"),
                make_claim("b", list(range(4, 10)), text="Freeze releases"),
            ],
            [make_edge("a", "b", "tradeoff")],
            model_count=10,
        )
        shape = compute_problem_structure(artifact)
        assert shape["primary"] == "constrained"
        assert shape["tradeoffs"] == ["Claim a vs Claim b"]

    def test_empty_input_is_sparse(self):
        result = compute_structural_analysis(make_artifact([]))
        shape = result["shape"]
        assert shape["primary"] == "sparse"
        assert shape["peaks"] == []
        assert shape["patterns"] == []
        assert shape["signal_strength"] == 0.0
        assert shape["data"]["sparsity_reasons"] == ["No claims were extracted"]


# ============================================================
# Robustness
# ============================================================


class TestRobustness:
    def test_non_mapping_artifact(self):
        result = compute_structural_analysis("not an artifact")
        assert result["shape"]["primary"] == "sparse"
        assert result["diagnostics"] == ["artifact is str, not a mapping; treated as empty"]

    def test_none_artifact(self):
        result = compute_structural_analysis(None)
        assert result["shape"]["primary"] == "sparse"
        assert result["diagnostics"] == []

    def test_dangling_edge_never_reaches_output(self):
        artifact = make_artifact(
            [make_claim("a", [0, 1])], [make_edge("a", "ghost", "prerequisite")], model_count=2
        )
        result = compute_structural_analysis(artifact)
        assert result["edges"] == []
        assert result["patterns"]["cascade_risks"] == []
        assert any("dangling" in d for d in result["diagnostics"])

    def test_support_ratio_bounded(self):
        artifact = make_artifact([make_claim("a", [0, 1, 2, 3, 4]), make_claim("b", [0])], model_count=3)
        result = compute_structural_analysis(artifact)
        for claim in result["claims_with_leverage"]:
            assert 0.0 <= claim["support_ratio"] <= 1.0

    def test_input_not_mutated(self, keystone_artifact):
        before = copy.deepcopy(keystone_artifact)
        compute_structural_analysis(keystone_artifact)
        assert keystone_artifact == before

    def test_idempotent(self, chain_artifact):
        first = json.dumps(compute_structural_analysis(chain_artifact), sort_keys=True)
        second = json.dumps(compute_structural_analysis(chain_artifact), sort_keys=True)
        assert first == second

    def test_builder_failure_falls_back_to_sparse(self, symmetric_fork_artifact, monkeypatch, capsys):
        def explode(*args, **kwargs):
            raise KeyError("missing")

        monkeypatch.setattr(engine, "build_forked_data", explode)
        result = compute_structural_analysis(symmetric_fork_artifact)
        assert result["shape"]["primary"] == "forked"
        assert result["shape"]["data"]["shape"] == "sparse"
        assert any("forked shape builder failed (KeyError" in d for d in result["diagnostics"])
        assert "WARNING:" in capsys.readouterr().err

    def test_any_builder_error_falls_back_to_sparse(self, symmetric_fork_artifact, monkeypatch, capsys):
        def out_of_range(*args, **kwargs):
            return [][0]

        monkeypatch.setattr(engine, "build_forked_data", out_of_range)
        result = compute_structural_analysis(symmetric_fork_artifact)
        assert result["shape"]["data"]["shape"] == "sparse"
        assert any("forked shape builder failed (IndexError" in d for d in result["diagnostics"])
        assert "WARNING:" in capsys.readouterr().err

    def test_unknown_challenge_target_never_reaches_output(self):
        artifact = make_artifact(
            [
                make_claim("a", list(range(10))),
                make_claim("x", [0], role="challenger", challenges="ghost_id"),
            ],
            model_count=10,
        )
        result = compute_structural_analysis(artifact)
        data = result["shape"]["data"]
        assert data["shape"] == "convergent"
        (challenger,) = data["challengers"]
        assert challenger["id"] == "x"
        assert challenger["challenges"] is None
        assert challenger["targets_claim"] is None
        assert "ghost_id" not in json.dumps(result["shape"])
        assert "claim 'x' challenges unknown claim 'ghost_id'; cleared" in result["diagnostics"]
