"""
Timeline Builder
================

One event per statement, ordered chronologically:
- Parseable timestamps first, ascending (stable)
- Undated statements after, in original encounter order

Event types come from content (payment cues) or the claim type. Gaps of
7+ days between consecutive dated events are reported as silences.
"""

import re
import logging
from typing import List, Optional, Dict, Iterable

from .config import Settings, get_settings
from .models import Entity, Statement, TimelineEvent, TimelineGap, TimelineSummary
from .schemas import ClaimType, EventType, Significance
from .tokenizer import excerpt

logger = logging.getLogger(__name__)


PAYMENT_CUES = re.compile(
    r"\b(?:paid|pay|payment|payments|transfer(?:red)?|deposit(?:ed)?|wired|"
    r"sent\s+(?:the\s+)?money|received\s+(?:the\s+)?(?:money|funds|payment)|refund(?:ed)?)\b"
    r"|(?:R|\$|£|€|ZAR|USD|EUR|GBP)\s?\d[\d,]*(?:\.\d{2})?",
    re.IGNORECASE
)

RECEIVED_PAYMENT = re.compile(
    r"\b(?:i|we)\s+(?:have\s+)?(?:received|got|was\s+paid|were\s+paid)\b|\bpaid\s+(?:to\s+)?me\b",
    re.IGNORECASE
)

_CLAIM_EVENT = {
    ClaimType.PROMISE: EventType.PROMISE,
    ClaimType.DENIAL: EventType.DENIAL,
    ClaimType.ADMISSION: EventType.ADMISSION,
}

HIGH_SIGNIFICANCE = {EventType.ADMISSION, EventType.DENIAL, EventType.PAYMENT}


def chronological(statements: Iterable[Statement]) -> List[Statement]:
    """Dated statements ascending (stable), then undated in encounter order"""
    statements = list(statements)
    dated = sorted((s for s in statements if s.timestamp is not None), key=lambda s: s.timestamp)
    undated = [s for s in statements if s.timestamp is None]
    return dated + undated


def event_type_for(statement: Statement) -> EventType:
    if PAYMENT_CUES.search(statement.text) and statement.claim_type != ClaimType.DENIAL:
        return EventType.PAYMENT
    return _CLAIM_EVENT.get(statement.claim_type, EventType.COMMUNICATION)


def is_received_payment(event: TimelineEvent) -> bool:
    """Payment event in which the author says they received the money"""
    return event.event_type == EventType.PAYMENT and event.received_payment


class TimelineBuilder:
    """Builds a TimelineSummary from statements"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def build(self, statements: List[Statement], entities: Optional[List[Entity]] = None) -> TimelineSummary:
        """
        Build the timeline.

        Args:
            statements: Statements (entity_id set where resolved)
            entities: Known entities; used for actor names and to tag
                entities mentioned in each statement

        Returns:
            TimelineSummary
        """
        entities = entities or []
        names_by_id = {e.id: e.primary_name for e in entities}
        mention_patterns = [
            (e.id, re.compile(r"\b(?:" + "|".join(re.escape(n) for n in e.names) + r")\b", re.IGNORECASE))
            for e in entities if e.names
        ]

        ordered = chronological(statements)
        events = [self._to_event(s, mention_patterns) for s in ordered]

        dated = [e for e in events if e.timestamp is not None]
        entity_timelines: Dict[str, List[TimelineEvent]] = {}
        actor_names: List[str] = []
        for statement, event in zip(ordered, events):
            for entity_id in event.entity_ids:
                entity_timelines.setdefault(entity_id, []).append(event)
            name = names_by_id.get(statement.entity_id) or statement.speaker
            if name and name not in actor_names:
                actor_names.append(name)

        gaps = self._find_gaps(dated)

        logger.info(
            f"Timeline built: {len(events)} events ({len(dated)} dated), "
            f"{len(actor_names)} actors, {len(gaps)} gaps"
        )

        return TimelineSummary(
            events=events,
            first_date=dated[0].timestamp if dated else None,
            last_date=dated[-1].timestamp if dated else None,
            actor_names=actor_names,
            entity_timelines=entity_timelines,
            gaps=gaps,
        )

    def _to_event(self, statement: Statement, mention_patterns) -> TimelineEvent:
        event_type = event_type_for(statement)
        entity_ids = []
        if statement.entity_id:
            entity_ids.append(statement.entity_id)
        for entity_id, pattern in mention_patterns:
            if entity_id not in entity_ids and pattern.search(statement.text):
                entity_ids.append(entity_id)

        return TimelineEvent(
            id=f"evt_{statement.id}",
            description=excerpt(statement.text),
            event_type=event_type,
            significance=Significance.HIGH if event_type in HIGH_SIGNIFICANCE else Significance.NORMAL,
            timestamp=statement.timestamp,
            date_text=statement.date_text,
            entity_ids=tuple(entity_ids),
            actor_id=statement.entity_id,
            statement_id=statement.id,
            source_id=statement.source_id,
            received_payment=RECEIVED_PAYMENT.search(statement.text) is not None,
        )

    def _find_gaps(self, dated: List[TimelineEvent]) -> List[TimelineGap]:
        settings = self.settings
        gaps = []
        for before, after in zip(dated, dated[1:]):
            days = (after.timestamp - before.timestamp).days
            if days < settings.timeline_gap_days:
                continue
            if days >= settings.timeline_gap_critical_days:
                significance = Significance.CRITICAL
            elif days >= settings.timeline_gap_high_days:
                significance = Significance.HIGH
            else:
                significance = Significance.NORMAL
            gaps.append(TimelineGap(
                start=before.timestamp,
                end=after.timestamp,
                days=days,
                significance=significance,
                before_event_id=before.id,
                after_event_id=after.id,
            ))
        return gaps


def build_timeline(
    statements: List[Statement],
    entities: Optional[List[Entity]] = None,
    settings: Optional[Settings] = None
) -> TimelineSummary:
    """Convenience function to build a timeline"""
    return TimelineBuilder(settings).build(statements, entities)
