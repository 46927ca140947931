"""Tests for scoring.enrichment — support ratio, leverage factors, keystone score, skew."""

from __future__ import annotations

from conftest import make_claim, make_edge

from deliberation_shape.scoring.enrichment import ROLE_WEIGHTS, compute_claim_ratios


class TestSupportRatio:
    def test_ratio_of_model_count(self):
        r = compute_claim_ratios(make_claim("c", [0, 1, 2]), [], 4)
        assert r["support_ratio"] == 0.75

    def test_no_supporters_is_zero(self):
        r = compute_claim_ratios(make_claim("c", []), [], 4)
        assert r["support_ratio"] == 0.0
        assert r["support_skew"] == 0.0

    def test_zero_model_count_floored_at_one(self):
        r = compute_claim_ratios(make_claim("c", [0]), [], 0)
        assert r["support_ratio"] == 1.0

    def test_ratio_never_exceeds_one(self):
        r = compute_claim_ratios(make_claim("c", [0, 1, 2, 3, 4]), [], 3)
        assert r["support_ratio"] == 1.0


class TestLeverage:
    def test_role_weights_table(self):
        assert ROLE_WEIGHTS == {"challenger": 4.0, "anchor": 2.0, "branch": 1.0, "supplement": 0.5}

    def test_isolated_claim_leverage(self):
        r = compute_claim_ratios(make_claim("c", [0, 1], role="anchor"), [], 4)
        # support 2 * 0.5 + anchor 2
        assert r["leverage"] == 3.0
        assert r["leverage_factors"]["connectivity_weight"] == 0.0
        assert r["leverage_factors"]["position_weight"] == 0.0

    def test_full_factor_breakdown(self):
        edges = [make_edge("c", "d", "prerequisite"), make_edge("e", "c", "conflicts")]
        r = compute_claim_ratios(make_claim("c", [0, 1]), edges, 4)
        factors = r["leverage_factors"]
        assert factors["support_weight"] == 1.0
        assert factors["role_weight"] == 1.0
        # 2 * prereq_out + 1.5 * conflict + 0.25 * 2 edges
        assert factors["connectivity_weight"] == 4.0
        assert factors["position_weight"] == 2.0
        assert r["leverage"] == 8.0

    def test_incoming_prerequisite_is_not_root(self):
        edges = [make_edge("a", "c", "prerequisite"), make_edge("c", "d", "prerequisite")]
        r = compute_claim_ratios(make_claim("c", [0]), edges, 4)
        assert r["is_chain_root"] is False
        assert r["is_chain_terminal"] is False
        assert r["leverage_factors"]["position_weight"] == 0.0

    def test_terminal(self):
        r = compute_claim_ratios(make_claim("c", [0]), [make_edge("a", "c", "prerequisite")], 4)
        assert r["is_chain_terminal"] is True

    def test_unknown_role_weighs_as_branch(self):
        claim = make_claim("c", [])
        claim["role"] = "mystery"
        r = compute_claim_ratios(claim, [], 4)
        assert r["leverage_factors"]["role_weight"] == 1.0


class TestDegreesAndScores:
    def test_keystone_score_is_out_degree_times_supporters(self):
        edges = [make_edge("c", "a"), make_edge("c", "b", "prerequisite"), make_edge("z", "c")]
        r = compute_claim_ratios(make_claim("c", [0, 1, 2]), edges, 4)
        assert r["out_degree"] == 2
        assert r["in_degree"] == 1
        assert r["keystone_score"] == 6.0

    def test_support_skew_counts_repeated_models(self):
        r = compute_claim_ratios(make_claim("c", [0, 0, 1, 2]), [], 4)
        assert r["support_skew"] == 0.5

    def test_evidence_gap_placeholder(self):
        r = compute_claim_ratios(make_claim("c", [0]), [], 4)
        assert r["evidence_gap_score"] == 0.0

    def test_input_claim_untouched(self):
        claim = make_claim("c", [0, 1])
        compute_claim_ratios(claim, [make_edge("c", "d", "prerequisite")], 4)
        assert set(claim) == {"id", "label", "text", "supporters", "type", "role", "challenges"}
