"""
Liability Scorer
================

Pure, deterministic per-entity scoring. Five components, each clamped to
[0, 100]:

- contradiction: severity points x multiplier
- behavioral: distinct flagged pattern types x points
- evidence contribution: baseline + withheld evidence - evidence provided
- chronological consistency: TEMPORAL and DIRECT contradictions, plus a
  story change (denial later followed by an admission)
- causal responsibility: initiated significant events, received
  payments, promises

Overall is the weighted sum (weights from Settings), clamped and rounded
to 2 decimal places.
"""

import logging
from typing import List, Optional, Dict

from .config import Settings, get_settings
from .models import (
    BehavioralPattern,
    Contradiction,
    Entity,
    LiabilityBreakdown,
    LiabilityScore,
    TimelineSummary,
)
from .schemas import BehaviorType, ContradictionType, EventType, Severity, Significance
from .timeline import is_received_payment

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


class LiabilityCalculator:
    """Computes LiabilityScore per entity"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def score(
        self,
        entities: List[Entity],
        contradictions: List[Contradiction],
        patterns: List[BehavioralPattern],
        timeline: Optional[TimelineSummary] = None
    ) -> Dict[str, LiabilityScore]:
        """
        Score every entity.

        Returns:
            {entity_id: LiabilityScore} in entity order
        """
        timeline = timeline or TimelineSummary()
        scores = {}
        for entity in entities:
            scores[entity.id] = self._score_entity(
                entity,
                [c for c in contradictions if c.entity_id == entity.id],
                [p for p in patterns if p.entity_id == entity.id],
                timeline,
            )

        if scores:
            top = max(scores.values(), key=lambda s: s.overall_score)
            logger.info(f"Liability scored for {len(scores)} entities (highest {top.entity_id}={top.overall_score})")
        return scores

    def _score_entity(
        self,
        entity: Entity,
        contradictions: List[Contradiction],
        patterns: List[BehavioralPattern],
        timeline: TimelineSummary
    ) -> LiabilityScore:
        settings = self.settings
        points = settings.severity_points()

        by_severity = {severity.value: 0 for severity in Severity}
        for contradiction in contradictions:
            by_severity[contradiction.severity.value] += 1
        contradiction_score = _clamp(
            sum(points[s] * n for s, n in by_severity.items()) * settings.contradiction_multiplier
        )

        flags = []
        for behavior_type in BehaviorType:
            if any(p.type == behavior_type for p in patterns):
                flags.append(behavior_type)
        behavioral_score = _clamp(len(flags) * settings.behavioral_points_per_type)

        provided = len({s.source_id for s in entity.statements if s.source_id})
        withheld = sum(1 for c in contradictions if c.type == ContradictionType.MISSING_EVIDENCE)
        evidence_score = _clamp(
            settings.evidence_baseline
            + settings.evidence_withheld_points * withheld
            - settings.evidence_provided_points * provided
        )

        authored = [e for e in timeline.events if e.actor_id == entity.id]
        temporal = sum(1 for c in contradictions if c.type == ContradictionType.TEMPORAL)
        direct = sum(1 for c in contradictions if c.type == ContradictionType.DIRECT)
        story_changes = self._story_changes(authored)
        consistency_score = _clamp(
            settings.temporal_contradiction_points * temporal
            + settings.direct_contradiction_points * direct
            + (settings.story_change_points if story_changes else 0)
        )

        initiated = sum(
            1 for e in authored if e.significance in (Significance.HIGH, Significance.CRITICAL)
        )
        received = sum(1 for e in authored if is_received_payment(e))
        promises = sum(1 for e in authored if e.event_type == EventType.PROMISE)
        causal_score = _clamp(
            settings.initiated_event_points * initiated
            + settings.received_payment_points * received
            + settings.promise_points * promises
        )

        weights = settings.liability_weights()
        overall = round(_clamp(
            weights["contradiction"] * contradiction_score
            + weights["behavioral"] * behavioral_score
            + weights["evidence"] * evidence_score
            + weights["consistency"] * consistency_score
            + weights["causal"] * causal_score
        ), 2)

        return LiabilityScore(
            entity_id=entity.id,
            overall_score=overall,
            contradiction_score=contradiction_score,
            behavioral_score=behavioral_score,
            evidence_contribution_score=evidence_score,
            chronological_consistency_score=consistency_score,
            causal_responsibility_score=causal_score,
            breakdown=LiabilityBreakdown(
                contradictions_by_severity=by_severity,
                behavioral_flags=tuple(flags),
                evidence_provided=provided,
                evidence_withheld=withheld,
                story_changes=story_changes,
                temporal_contradictions=temporal,
                direct_contradictions=direct,
                initiated_events=initiated,
                received_payments=received,
                promises=promises,
            ),
        )

    @staticmethod
    def _story_changes(events) -> int:
        """Denials later followed by an admission, in timeline order"""
        changes = 0
        denied = False
        for event in events:
            if event.event_type == EventType.DENIAL:
                denied = True
            elif event.event_type == EventType.ADMISSION and denied:
                changes += 1
                denied = False
        return changes


def score_liability(
    entities: List[Entity],
    contradictions: List[Contradiction],
    patterns: List[BehavioralPattern],
    timeline: Optional[TimelineSummary] = None,
    settings: Optional[Settings] = None
) -> Dict[str, LiabilityScore]:
    """Convenience function to score liability per entity"""
    return LiabilityCalculator(settings).score(entities, contradictions, patterns, timeline)
