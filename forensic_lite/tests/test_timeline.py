"""
Tests for Timeline Builder
==========================
"""

import pytest
from datetime import datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from forensic_lite.extractor import classify_claim
from forensic_lite.models import Entity, Statement
from forensic_lite.schemas import EventType, Significance
from forensic_lite.timeline import build_timeline, chronological, is_received_payment
from forensic_lite.tokenizer import extract_keywords


def make_statement(sid, text, timestamp=None, entity_id=None, speaker=None, date_text=None):
    return Statement(
        id=sid,
        text=text,
        claim_type=classify_claim(text),
        speaker=speaker,
        entity_id=entity_id,
        timestamp=timestamp,
        date_text=date_text,
        source_id="doc1",
        keywords=extract_keywords(text),
    )


# =============================================================================
# Ordering
# =============================================================================

class TestOrdering:
    """Chronological ordering rules"""

    def test_dated_first_then_undated_in_encounter_order(self):
        statements = [
            make_statement("s1", "The car was returned.", datetime(2024, 3, 5)),
            make_statement("s2", "We spoke again.", date_text="sometime later"),
            make_statement("s3", "The car was collected.", datetime(2024, 3, 1)),
            make_statement("s4", "Nothing else happened."),
        ]
        timeline = build_timeline(statements)
        assert [e.statement_id for e in timeline.events] == ["s3", "s1", "s2", "s4"]
        assert timeline.events[2].date_text == "sometime later"

    def test_equal_timestamps_keep_input_order(self):
        when = datetime(2024, 3, 1, 9, 0)
        statements = [
            make_statement("s1", "First.", when),
            make_statement("s2", "Second.", when),
        ]
        assert [s.id for s in chronological(statements)] == ["s1", "s2"]

    def test_first_and_last_dates(self):
        statements = [
            make_statement("s1", "The car was returned.", datetime(2024, 3, 5)),
            make_statement("s2", "The car was collected.", datetime(2024, 3, 1)),
            make_statement("s3", "Undated remark."),
        ]
        timeline = build_timeline(statements)
        assert timeline.first_date == datetime(2024, 3, 1)
        assert timeline.last_date == datetime(2024, 3, 5)

    def test_empty(self):
        timeline = build_timeline([])
        assert timeline.events == []
        assert timeline.first_date is None
        assert timeline.gaps == []


# =============================================================================
# Events
# =============================================================================

class TestEvents:
    """Event typing and significance"""

    def test_payment_event(self):
        timeline = build_timeline([make_statement("s1", "I paid R5000 into his account")])
        event = timeline.events[0]
        assert event.event_type == EventType.PAYMENT
        assert event.significance == Significance.HIGH
        assert event.id == "evt_s1"

    def test_denial_mentioning_payment_stays_denial(self):
        timeline = build_timeline([make_statement("s1", "I never paid anything")])
        assert timeline.events[0].event_type == EventType.DENIAL
        assert timeline.events[0].significance == Significance.HIGH

    def test_promise_is_normal(self):
        timeline = build_timeline([make_statement("s1", "I will call you tomorrow")])
        assert timeline.events[0].event_type == EventType.PROMISE
        assert timeline.events[0].significance == Significance.NORMAL

    def test_received_payment(self):
        timeline = build_timeline([make_statement("s1", "I received the payment of R5000")])
        assert is_received_payment(timeline.events[0])

    def test_received_payment_late_in_long_statement(self):
        text = "Following " + "a long discussion about the lease, " * 5 + "I received the payment of R5000."
        timeline = build_timeline([make_statement("s1", text)])

        event = timeline.events[0]
        assert event.description.endswith("...")
        assert "received" not in event.description
        assert is_received_payment(event)

    def test_entity_mentions_and_actor(self):
        alice = Entity(id="ent_alice", primary_name="Alice")
        bob = Entity(id="ent_bob", primary_name="Bob")
        statement = make_statement(
            "s1", "I sent Bob the money.", datetime(2024, 3, 1), entity_id="ent_alice", speaker="Alice",
        )
        timeline = build_timeline([statement], [alice, bob])

        event = timeline.events[0]
        assert event.actor_id == "ent_alice"
        assert event.entity_ids == ("ent_alice", "ent_bob")
        assert timeline.actor_names == ["Alice"]
        assert [e.id for e in timeline.events_for("ent_bob")] == ["evt_s1"]


# =============================================================================
# Gaps
# =============================================================================

class TestGaps:
    """Silences between dated events"""

    @pytest.mark.parametrize("end,significance", [
        (datetime(2024, 3, 9), Significance.NORMAL),
        (datetime(2024, 3, 20), Significance.HIGH),
        (datetime(2024, 4, 15), Significance.CRITICAL),
    ])
    def test_gap_significance(self, end, significance):
        statements = [
            make_statement("s1", "The car was collected.", datetime(2024, 3, 1)),
            make_statement("s2", "The car was returned.", end),
        ]
        timeline = build_timeline(statements)

        assert len(timeline.gaps) == 1
        gap = timeline.gaps[0]
        assert gap.days == (end - datetime(2024, 3, 1)).days
        assert gap.significance == significance
        assert gap.before_event_id == "evt_s1"
        assert gap.after_event_id == "evt_s2"

    def test_short_silence_is_not_a_gap(self):
        statements = [
            make_statement("s1", "The car was collected.", datetime(2024, 3, 1)),
            make_statement("s2", "The car was returned.", datetime(2024, 3, 4)),
        ]
        assert build_timeline(statements).gaps == []
