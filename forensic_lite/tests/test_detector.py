"""
Tests for Rule-Based Contradiction Detector
===========================================

One class per contradiction type, plus ordering and determinism.
"""

import json
import pytest
from datetime import datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from forensic_lite.detector import ContradictionDetector, detect_contradictions
from forensic_lite.extractor import classify_claim
from forensic_lite.models import Entity, Statement
from forensic_lite.schemas import ContradictionType, Severity
from forensic_lite.tokenizer import extract_keywords
from forensic_lite.dates import extract_dates


def make_statement(sid, text, timestamp=None, source_id="doc1", entity_id="ent_bob"):
    return Statement(
        id=sid,
        text=text,
        claim_type=classify_claim(text),
        entity_id=entity_id,
        timestamp=timestamp,
        mentioned_dates=tuple(m.key for m in extract_dates(text)),
        source_id=source_id,
        keywords=extract_keywords(text),
    )


def make_entity(statements, entity_id="ent_bob", name="Bob"):
    return Entity(id=entity_id, primary_name=name, statements=list(statements))


def of_type(contradictions, contradiction_type):
    return [c for c in contradictions if c.type == contradiction_type]


@pytest.fixture
def deal_entity():
    return make_entity([
        make_statement("b-s1", "No deal ever existed"),
        make_statement("b-s2", "The deal fell through"),
    ])


# =============================================================================
# DIRECT
# =============================================================================

class TestDirect:
    """Denial vs assertion by the same party"""

    def test_denial_vs_assertion_is_high(self, deal_entity):
        contradictions = detect_contradictions([deal_entity])

        assert len(contradictions) == 1
        contradiction = contradictions[0]
        assert contradiction.type == ContradictionType.DIRECT
        assert contradiction.severity == Severity.HIGH
        assert contradiction.entity_id == "ent_bob"
        assert {contradiction.statement_a.id, contradiction.statement_b.id} == {"b-s1", "b-s2"}
        assert "deal" in contradiction.description
        assert contradiction.legal_implication

    def test_denial_vs_action_claim_is_critical(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit"),
            make_statement("s2", "I never paid any deposit"),
        ])
        contradictions = detect_contradictions([entity])

        assert contradictions[0].type == ContradictionType.DIRECT
        assert contradictions[0].severity == Severity.CRITICAL

    def test_denial_vs_opinion_is_low(self):
        entity = make_entity([
            make_statement("s1", "I think the deal was fair"),
            make_statement("s2", "There was no deal"),
        ])
        direct = of_type(detect_contradictions([entity]), ContradictionType.DIRECT)

        assert len(direct) == 1
        assert direct[0].severity == Severity.LOW

    def test_unrelated_statements_do_not_contradict(self):
        entity = make_entity([
            make_statement("s1", "I never visited the farm"),
            make_statement("s2", "The car was blue"),
        ])
        assert detect_contradictions([entity]) == []

    def test_verb_forms_share_a_topic(self):
        entity = make_entity([
            make_statement("s1", "The payment cleared on time"),
            make_statement("s2", "I was never paid"),
        ])
        direct = of_type(detect_contradictions([entity]), ContradictionType.DIRECT)
        assert len(direct) == 1


# =============================================================================
# CROSS_DOCUMENT
# =============================================================================

class TestCrossDocument:
    """Denial in one evidence item, admission in another"""

    def test_different_sources(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit", source_id="bank_letter"),
            make_statement("s2", "I never paid any deposit", source_id="affidavit"),
        ])
        contradictions = detect_contradictions([entity])
        types = {c.type for c in contradictions}

        assert ContradictionType.CROSS_DOCUMENT in types
        assert ContradictionType.DIRECT in types
        cross = of_type(contradictions, ContradictionType.CROSS_DOCUMENT)[0]
        assert cross.severity == Severity.CRITICAL

    def test_same_source_is_not_cross_document(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit"),
            make_statement("s2", "I never paid any deposit"),
        ])
        assert of_type(detect_contradictions([entity]), ContradictionType.CROSS_DOCUMENT) == []


# =============================================================================
# TEMPORAL
# =============================================================================

class TestTemporal:
    """Sequence, broken promise and date conflict rules"""

    def test_broken_promise(self):
        entity = make_entity([
            make_statement("s1", "I will transfer the deposit on Friday", datetime(2024, 3, 1)),
            make_statement("s2", "I never agreed to transfer any deposit", datetime(2024, 3, 20)),
        ])
        temporal = of_type(detect_contradictions([entity]), ContradictionType.TEMPORAL)

        assert len(temporal) == 1
        assert temporal[0].severity == Severity.HIGH
        assert temporal[0].statement_a.id == "s1"

    def test_conflicting_dates(self):
        entity = make_entity([
            make_statement("s1", "The contract was signed on 1 March 2024."),
            make_statement("s2", "The contract was signed on 9 April 2024."),
        ])
        temporal = of_type(detect_contradictions([entity]), ContradictionType.TEMPORAL)

        assert len(temporal) == 1
        assert temporal[0].severity == Severity.MEDIUM

    def test_same_date_does_not_conflict(self):
        entity = make_entity([
            make_statement("s1", "The contract was signed on 1 March 2024."),
            make_statement("s2", "The contract was signed on 1 March 2024 in Durban."),
        ])
        assert of_type(detect_contradictions([entity]), ContradictionType.TEMPORAL) == []

    def test_sequence_claim_against_dated_event(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit on 1 March 2024, before the contract was signed."),
            make_statement("s2", "The contract was signed on 20 February 2024."),
        ])
        temporal = of_type(detect_contradictions([entity]), ContradictionType.TEMPORAL)

        assert len(temporal) == 1
        assert temporal[0].severity == Severity.MEDIUM
        assert "before" in temporal[0].description


# =============================================================================
# BEHAVIORAL
# =============================================================================

class TestBehavioral:
    """Classification flips between adjacent statements"""

    def test_admission_then_denial(self):
        entity = make_entity([
            make_statement("s1", "I admit I took the money", datetime(2024, 3, 1)),
            make_statement("s2", "I never took any money", datetime(2024, 3, 3)),
        ])
        behavioral = of_type(detect_contradictions([entity]), ContradictionType.BEHAVIORAL)

        assert len(behavioral) == 1
        assert behavioral[0].severity == Severity.HIGH

    def test_outside_window(self):
        entity = make_entity([
            make_statement("s1", "I admit I took the money", datetime(2024, 3, 1)),
            make_statement("s2", "I never took any money", datetime(2024, 3, 20)),
        ])
        contradictions = detect_contradictions([entity])

        assert of_type(contradictions, ContradictionType.BEHAVIORAL) == []
        assert len(of_type(contradictions, ContradictionType.DIRECT)) == 1

    def test_denial_then_admission(self):
        entity = make_entity([
            make_statement("s1", "I never took any money", datetime(2024, 3, 1)),
            make_statement("s2", "I admit I took the money", datetime(2024, 3, 2)),
        ])
        behavioral = of_type(detect_contradictions([entity]), ContradictionType.BEHAVIORAL)
        assert behavioral[0].severity == Severity.MEDIUM

    def test_undated_adjacent_pair(self):
        entity = make_entity([
            make_statement("s1", "I admit I took the money"),
            make_statement("s2", "I never took any money"),
        ])
        behavioral = of_type(detect_contradictions([entity]), ContradictionType.BEHAVIORAL)

        assert len(behavioral) == 1
        assert behavioral[0].severity == Severity.HIGH

    def test_dated_and_undated_are_not_compared(self):
        entity = make_entity([
            make_statement("s1", "I admit I took the money", datetime(2024, 3, 1)),
            make_statement("s2", "I never took any money"),
        ])
        assert of_type(detect_contradictions([entity]), ContradictionType.BEHAVIORAL) == []


# =============================================================================
# MISSING_EVIDENCE
# =============================================================================

class TestMissingEvidence:
    """References to evidence never supplied"""

    def test_named_file_missing(self):
        statement = make_statement("s1", "Please see invoice_0042.pdf for the amount.")
        missing = of_type(
            detect_contradictions([make_entity([statement])], ingested_sources=["doc1"]),
            ContradictionType.MISSING_EVIDENCE,
        )

        assert len(missing) == 1
        assert missing[0].severity == Severity.HIGH
        assert missing[0].statement_a is missing[0].statement_b

    def test_named_file_supplied(self):
        statement = make_statement("s1", "Please see invoice_0042.pdf for the amount.")
        contradictions = detect_contradictions(
            [make_entity([statement])], ingested_sources=["doc1", "invoice_0042.pdf"],
        )
        assert contradictions == []

    def test_generic_reference_without_other_evidence(self):
        statement = make_statement("s1", "See the attached receipt.")
        missing = of_type(detect_contradictions([make_entity([statement])]), ContradictionType.MISSING_EVIDENCE)

        assert len(missing) == 1
        assert missing[0].severity == Severity.MEDIUM

    def test_generic_reference_with_other_evidence(self):
        statement = make_statement("s1", "See the attached receipt.")
        contradictions = detect_contradictions([make_entity([statement])], ingested_sources=["doc1", "doc2"])
        assert contradictions == []


# =============================================================================
# THIRD_PARTY
# =============================================================================

class TestThirdParty:
    """Another party asserts what this party denies"""

    def test_third_party_action_claim(self):
        alice = make_entity(
            [make_statement("a1", "I never received the money from Bob", entity_id="ent_alice")],
            entity_id="ent_alice", name="Alice",
        )
        bob = make_entity([make_statement("b1", "I paid Alice the money on Friday")])

        third_party = of_type(detect_contradictions([alice, bob]), ContradictionType.THIRD_PARTY)

        assert len(third_party) == 1
        assert third_party[0].entity_id == "ent_alice"
        assert third_party[0].severity == Severity.HIGH
        assert third_party[0].statement_a.id == "a1"
        assert third_party[0].statement_b.id == "b1"

    def test_single_shared_word_is_not_enough(self):
        alice = make_entity(
            [make_statement("a1", "I never touched the car", entity_id="ent_alice")],
            entity_id="ent_alice", name="Alice",
        )
        bob = make_entity([make_statement("b1", "The car was red")])

        assert of_type(detect_contradictions([alice, bob]), ContradictionType.THIRD_PARTY) == []


# =============================================================================
# Ordering & determinism
# =============================================================================

class TestOutput:
    """Ordering, dedup and reproducibility"""

    def test_most_severe_first(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit", datetime(2024, 3, 1)),
            make_statement("s2", "I never paid any deposit", datetime(2024, 3, 2)),
        ])
        contradictions = detect_contradictions([entity])
        ranks = [c.severity.rank for c in contradictions]

        assert ranks == sorted(ranks)
        assert contradictions[0].severity == Severity.CRITICAL
        assert ContradictionType.BEHAVIORAL in {c.type for c in contradictions}

    def test_deterministic(self, deal_entity):
        first = [c.to_dict() for c in detect_contradictions([deal_entity])]
        second = [c.to_dict() for c in detect_contradictions([deal_entity])]
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)

    def test_detected_at_defaults_to_latest_statement(self):
        entity = make_entity([
            make_statement("s1", "I paid the deposit", datetime(2024, 3, 1)),
            make_statement("s2", "I never paid any deposit", datetime(2024, 3, 2)),
        ])
        for contradiction in detect_contradictions([entity]):
            assert contradiction.detected_at == datetime(2024, 3, 2)

    def test_explicit_detected_at(self, deal_entity):
        when = datetime(2025, 1, 1)
        contradictions = ContradictionDetector().detect([deal_entity], detected_at=when)
        assert contradictions[0].detected_at == when

    def test_no_entities(self):
        assert detect_contradictions([]) == []
