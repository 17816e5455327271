"""
Tests for Liability Scoring
===========================

Component formulas, clamping, weighting and purity.
"""

import pytest
from datetime import datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from forensic_lite.behavior import detect_behavioral_patterns
from forensic_lite.config import Settings
from forensic_lite.detector import detect_contradictions
from forensic_lite.extractor import classify_claim
from forensic_lite.liability import LiabilityCalculator, score_liability
from forensic_lite.models import Entity, Statement
from forensic_lite.schemas import BehaviorType
from forensic_lite.timeline import build_timeline
from forensic_lite.tokenizer import extract_keywords


def make_statement(sid, text, entity_id, timestamp=None, source_id="doc1"):
    return Statement(
        id=sid,
        text=text,
        claim_type=classify_claim(text),
        entity_id=entity_id,
        timestamp=timestamp,
        source_id=source_id,
        keywords=extract_keywords(text),
    )


def run_pipeline(entities):
    statements = [s for e in entities for s in e.statements]
    timeline = build_timeline(statements, entities)
    contradictions = detect_contradictions(entities)
    patterns = detect_behavioral_patterns(entities)
    return score_liability(entities, contradictions, patterns, timeline)


@pytest.fixture
def deal_case():
    alice = Entity(id="ent_a", primary_name="Alice", statements=[
        make_statement("a-s1", "The deal was signed.", "ent_a"),
    ])
    bob = Entity(id="ent_b", primary_name="Bob", statements=[
        make_statement("b-s1", "No deal ever existed", "ent_b"),
        make_statement("b-s2", "The deal fell through", "ent_b"),
    ])
    return [alice, bob]


class TestDealCase:
    """A consistent party against a self-contradicting one"""

    def test_contradicting_party_scores_higher(self, deal_case):
        scores = run_pipeline(deal_case)
        assert scores["ent_b"].overall_score > scores["ent_a"].overall_score

    def test_consistent_party_components(self, deal_case):
        score = run_pipeline(deal_case)["ent_a"]

        assert score.contradiction_score == 0.0
        assert score.behavioral_score == 0.0
        assert score.evidence_contribution_score == 20.0
        assert score.chronological_consistency_score == 0.0
        assert score.causal_responsibility_score == 0.0
        assert score.overall_score == pytest.approx(3.0)

    def test_contradicting_party_components(self, deal_case):
        score = run_pipeline(deal_case)["ent_b"]

        assert score.contradiction_score == 30.0
        assert score.chronological_consistency_score == 10.0
        assert score.causal_responsibility_score == 5.0
        assert score.breakdown.contradictions_by_severity["high"] == 1
        assert score.breakdown.direct_contradictions == 1
        assert score.overall_score == pytest.approx(14.75)

    def test_scores_keyed_in_entity_order(self, deal_case):
        assert list(run_pipeline(deal_case)) == ["ent_a", "ent_b"]

    def test_pure(self, deal_case):
        first = {k: v.to_dict() for k, v in run_pipeline(deal_case).items()}
        second = {k: v.to_dict() for k, v in run_pipeline(deal_case).items()}
        assert first == second


class TestComponents:
    """Individual components"""

    def test_contradiction_score_is_clamped(self):
        statements = [make_statement("s0", "I paid the deposit", "ent_b")]
        statements += [make_statement(f"s{i}", f"I never paid any deposit {i}", "ent_b") for i in range(1, 6)]
        entity = Entity(id="ent_b", primary_name="Bob", statements=statements)

        score = run_pipeline([entity])["ent_b"]
        assert score.contradiction_score == 100.0
        assert 0.0 <= score.overall_score <= 100.0

    def test_received_payment(self):
        entity = Entity(id="ent_b", primary_name="Bob", statements=[
            make_statement("s1", "I received the payment of R5000", "ent_b"),
        ])
        score = run_pipeline([entity])["ent_b"]

        assert score.breakdown.received_payments == 1
        assert score.breakdown.benefited_financially
        assert score.causal_responsibility_score == 20.0

    def test_story_change(self):
        entity = Entity(id="ent_b", primary_name="Bob", statements=[
            make_statement("s1", "I never took the car", "ent_b", datetime(2024, 3, 1)),
            make_statement("s2", "I admit I took the car", "ent_b", datetime(2024, 3, 20)),
        ])
        score = run_pipeline([entity])["ent_b"]

        assert score.breakdown.story_changes == 1
        # one CRITICAL direct contradiction (10) plus the story change (20)
        assert score.chronological_consistency_score == 30.0

    def test_behavioral_flags(self):
        entity = Entity(id="ent_b", primary_name="Bob", statements=[
            make_statement("s1", "Trust me.", "ent_b"),
            make_statement("s2", "You're imagining things.", "ent_b"),
        ])
        score = run_pipeline([entity])["ent_b"]

        assert score.behavioral_score == 40.0
        assert score.breakdown.behavioral_flags == (
            BehaviorType.GASLIGHTING, BehaviorType.FINANCIAL_MANIPULATION,
        )

    def test_withheld_evidence(self):
        entity = Entity(id="ent_b", primary_name="Bob", statements=[
            make_statement("s1", "See invoice_7.pdf for details.", "ent_b"),
        ])
        score = run_pipeline([entity])["ent_b"]

        assert score.breakdown.evidence_withheld == 1
        # 30 baseline + 30 withheld - 10 for one source provided
        assert score.evidence_contribution_score == 50.0

    def test_no_timeline(self):
        entity = Entity(id="ent_b", primary_name="Bob")
        scores = LiabilityCalculator().score([entity], [], [])
        assert scores["ent_b"].causal_responsibility_score == 0.0
        assert scores["ent_b"].evidence_contribution_score == 30.0
        assert scores["ent_b"].overall_score == pytest.approx(4.5)

    def test_weights_from_settings(self):
        entity = Entity(id="ent_b", primary_name="Bob")
        settings = Settings(weight_evidence=0.5)
        scores = LiabilityCalculator(settings).score([entity], [], [])
        assert scores["ent_b"].overall_score == pytest.approx(15.0)
