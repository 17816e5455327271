"""
Behavioural Pattern Detector
============================

Scans each entity's statements (chronological where dated) for fixed
linguistic signatures of manipulation, plus ghosting (long silences
between consecutive dated statements).

One pattern per entity per type, carrying every matching excerpt.
Severity is MEDIUM, escalating to HIGH once the instance count reaches
the configured threshold.
"""

import hashlib
import logging
from typing import List, Optional, Dict
from datetime import datetime

from .config import Settings, get_settings
from .models import BehavioralPattern, Entity, Statement
from .schemas import BehaviorType, Severity
from .timeline import chronological
from .tokenizer import excerpt

logger = logging.getLogger(__name__)


# =============================================================================
# Signatures (lowercase substrings)
# =============================================================================

SIGNATURES: Dict[BehaviorType, List[str]] = {
    BehaviorType.GASLIGHTING: [
        "you're imagining", "you are imagining", "that never happened",
        "you're crazy", "you are crazy", "i never said that", "you're confused",
        "you misunderstood", "you're overreacting", "you are overreacting",
        "you're being paranoid", "you're remembering it wrong", "that's not what happened",
        "you're making things up", "no one will believe you",
    ],
    BehaviorType.BLAME_SHIFTING: [
        "it's your fault", "it is your fault", "you made me", "because of you",
        "if you hadn't", "you should have", "i had no choice", "you forced me",
        "that's on you", "blame yourself",
    ],
    BehaviorType.EVASION: [
        "i don't recall", "i do not recall", "i can't remember", "i cannot remember",
        "i wasn't involved", "i was not involved", "i don't know anything about",
        "not that i remember", "i'd have to check", "no comment",
    ],
    BehaviorType.SELECTIVE_DISCLOSURE: [
        "that's all i can say", "i'd rather not say", "i'd rather not get into",
        "it's complicated", "that's not relevant", "i can't go into details",
        "why are you asking", "none of your business", "i refuse to answer",
    ],
    BehaviorType.DEFLECTION: [
        "what about", "but you", "that's not the point", "let's not talk about",
        "why are you bringing", "you're changing the subject", "look at what you did",
        "what about you",
    ],
    BehaviorType.PRESSURE_TACTICS: [
        "take it or leave it", "final offer", "last chance", "decide now",
        "offer expires", "act now", "you'll regret", "or else",
    ],
    BehaviorType.FINANCIAL_MANIPULATION: [
        "trust me", "i'll pay you back", "i will pay you back", "guaranteed return",
        "double your money", "risk free", "risk-free", "just this once",
        "i'll sort it out", "the money is coming",
    ],
    BehaviorType.EMOTIONAL_MANIPULATION: [
        "if you loved me", "you owe me", "after everything i've done",
        "after all i did for you", "you'd do this if you cared", "i thought we were friends",
        "you're abandoning me",
    ],
    BehaviorType.OVER_EXPLAINING: [
        "let me explain", "the reason is", "to be completely honest",
        "to be honest", "i can explain", "what happened was", "you have to understand",
    ],
    BehaviorType.PASSIVE_ADMISSION: [
        "i thought i was in the clear", "technically", "i suppose",
        "i guess i did", "in a way", "sort of", "kind of did",
    ],
    BehaviorType.SLIP_UP_ADMISSION: [
        "well, technically", "okay fine", "ok fine", "i might have",
        "yes, but", "fine, i did", "maybe i did",
    ],
}


class BehavioralAnalyzer:
    """Detects manipulation signatures per entity"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def analyze(self, entities: List[Entity]) -> List[BehavioralPattern]:
        """
        Detect patterns for all entities.

        Returns:
            Patterns in entity order, then BehaviorType declaration order
        """
        start_time = datetime.now()
        patterns: List[BehavioralPattern] = []
        for entity in entities:
            patterns.extend(self._analyze_entity(entity))

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Behavioral analysis complete: {len(patterns)} patterns "
            f"across {len(entities)} entities in {elapsed_ms:.1f}ms"
        )
        return patterns

    def _analyze_entity(self, entity: Entity) -> List[BehavioralPattern]:
        ordered = chronological(entity.statements)
        found: Dict[BehaviorType, List[Statement]] = {}
        excerpts: Dict[BehaviorType, List[str]] = {}

        for statement in ordered:
            lowered = statement.text.lower()
            for behavior_type, phrases in SIGNATURES.items():
                if any(phrase in lowered for phrase in phrases):
                    found.setdefault(behavior_type, []).append(statement)
                    excerpts.setdefault(behavior_type, []).append(excerpt(statement.text))

        ghosting = self._ghosting(ordered)
        if ghosting:
            found[BehaviorType.GHOSTING] = [after for _, after, _ in ghosting]
            excerpts[BehaviorType.GHOSTING] = [
                f"No contact for {days} days before: {excerpt(after.text)}"
                for _, after, days in ghosting
            ]

        patterns = []
        for behavior_type in BehaviorType:
            if behavior_type not in found:
                continue
            supporting = found[behavior_type]
            stamps = [s.timestamp for s in supporting if s.timestamp is not None]
            severity = (
                Severity.HIGH
                if len(supporting) >= self.settings.pattern_escalation_instances
                else Severity.MEDIUM
            )
            digest = hashlib.sha1(f"{entity.id}|{behavior_type.value}".encode("utf-8")).hexdigest()
            patterns.append(BehavioralPattern(
                id=f"pat_{digest[:12]}",
                entity_id=entity.id,
                type=behavior_type,
                instances=tuple(excerpts[behavior_type]),
                severity=severity,
                first_detected_at=min(stamps) if stamps else None,
            ))
            logger.debug(f"{entity.primary_name}: {behavior_type.value} x{len(supporting)}")
        return patterns

    def _ghosting(self, ordered: List[Statement]):
        """(before, after, days) for silences longer than the ghosting threshold"""
        dated = [s for s in ordered if s.timestamp is not None]
        gaps = []
        for before, after in zip(dated, dated[1:]):
            days = (after.timestamp - before.timestamp).days
            if days > self.settings.ghosting_gap_days:
                gaps.append((before, after, days))
        return gaps


def detect_behavioral_patterns(
    entities: List[Entity],
    settings: Optional[Settings] = None
) -> List[BehavioralPattern]:
    """Convenience function to detect behavioural patterns"""
    return BehavioralAnalyzer(settings).analyze(entities)
