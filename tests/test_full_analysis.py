"""Tests for graph.builder — parallel structure and shadow branches, envelope merging."""

from __future__ import annotations

import json

from conftest import make_artifact, make_claim

import deliberation_shape.graph.builder as builder
from deliberation_shape.config import Settings
from deliberation_shape.engine import compute_structural_analysis
from deliberation_shape.graph.builder import compute_full_analysis, run_analysis_graph


def _settings(**overrides) -> Settings:
    values = {
        "shadow_enabled": True,
        "shadow_top_n": 5,
        "shadow_match_threshold": 0.4,
        "shadow_confidence_floor": 0.4,
        "run_log_dir": "runs/",
        "event_log_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


def _artifact():
    return make_artifact(
        [
            make_claim("a", [0, 1], text="You should cache the results"),
            make_claim("b", [1], text="Use a message queue"),
        ],
        model_count=2,
    )


def _primary(envelope: dict) -> str:
    return json.dumps({k: v for k, v in envelope.items() if k != "shadow"}, sort_keys=True)


class TestFullAnalysis:
    def test_shadow_attached(self, sample_responses):
        result = compute_full_analysis(
            sample_responses, _artifact(), "Should we cache the dataset?", _settings()
        )
        shadow = result["shadow"]
        assert shadow["audit"]["query_intent"] == "decision"
        assert shadow["audit"]["primary_counts"]["claims"] == 2
        assert len(shadow["unindexed"]) == 3
        assert shadow["top_unindexed"] == shadow["unindexed"]

    def test_top_unindexed_capped(self, sample_responses):
        result = compute_full_analysis(sample_responses, _artifact(), "", _settings(shadow_top_n=1))
        assert len(result["shadow"]["top_unindexed"]) == 1
        assert len(result["shadow"]["unindexed"]) == 3

    def test_primary_fields_match_structural_analysis(self, sample_responses):
        artifact = _artifact()
        full = compute_full_analysis(sample_responses, artifact, "", _settings())
        assert _primary(full) == json.dumps(compute_structural_analysis(artifact), sort_keys=True)

    def test_no_responses_means_no_shadow(self):
        result = compute_full_analysis([], _artifact(), "", _settings())
        assert "shadow" not in result
        assert result["diagnostics"] == []

    def test_disabled_shadow_reported(self, sample_responses):
        result = compute_full_analysis(
            sample_responses, _artifact(), "", _settings(shadow_enabled=False)
        )
        assert "shadow" not in result
        assert result["diagnostics"] == ["shadow pass disabled by settings"]

    def test_shadow_failure_is_isolated(self, sample_responses, monkeypatch, capsys):
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(builder, "execute_shadow_extraction", explode)
        result = compute_full_analysis(sample_responses, _artifact(), "", _settings())
        assert "shadow" not in result
        assert result["diagnostics"] == ["shadow pass failed (RuntimeError: boom); omitted"]
        assert result["shape"]["primary"] == "convergent"
        assert "WARNING: shadow pass failed" in capsys.readouterr().err

    def test_normalization_diagnostics_come_first(self, sample_responses):
        artifact = _artifact()
        artifact["edges"] = [{"from": "a", "to": "zzz", "type": "supports"}]
        result = compute_full_analysis(
            sample_responses, artifact, "", _settings(shadow_enabled=False)
        )
        assert result["diagnostics"][0].startswith("edge[0] dropped: dangling")
        assert result["diagnostics"][-1] == "shadow pass disabled by settings"


class TestGraphEvents:
    def test_both_nodes_emit_events(self, sample_responses):
        state = run_analysis_graph(_artifact(), sample_responses, "", _settings())
        nodes = sorted(e["node"] for e in state["events"])
        assert nodes == ["shadow", "structure"]
        structure = next(e for e in state["events"] if e["node"] == "structure")
        assert structure["inputs_summary"] == {"claims": 2, "edges": 0}
        assert structure["elapsed_s"] >= 0

    def test_structure_only_without_responses(self):
        state = run_analysis_graph(_artifact(), [], "", _settings())
        assert [e["node"] for e in state["events"]] == ["structure"]
