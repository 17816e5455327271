"""
Core Records
============

Dataclasses passed between the analysis stages. Everything a stage hands
on is either frozen or only mutated by the stage that created it, so the
same inputs can be analysed concurrently.

Each record exposes to_dict() with JSON-ready values (enum values,
ISO-8601 timestamps).
"""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime

from .schemas import (
    AliasKind,
    BehaviorType,
    ClaimType,
    ContradictionType,
    EntityKind,
    EventType,
    Gender,
    Severity,
    Significance,
    SourceType,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# =============================================================================
# Statements & Entities
# =============================================================================

@dataclass(frozen=True)
class Statement:
    """
    A single classified sentence attributed to a speaker.

    mentioned_dates holds ISO keys (YYYY-MM-DD or YYYY-MM) of every date
    mentioned in the text; timestamp is the normalized date the statement
    is placed at on the timeline.
    """
    id: str
    text: str
    claim_type: ClaimType
    speaker: Optional[str] = None
    entity_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    date_text: Optional[str] = None
    mentioned_dates: Tuple[str, ...] = ()
    source_id: Optional[str] = None
    source_type: SourceType = SourceType.DOCUMENT
    keywords: Tuple[str, ...] = ()
    sequence: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "speaker": self.speaker,
            "text": self.text,
            "claim_type": self.claim_type.value,
            "timestamp": _iso(self.timestamp),
            "date_text": self.date_text,
            "mentioned_dates": list(self.mentioned_dates),
            "source_id": self.source_id,
            "source_type": self.source_type.value,
            "keywords": list(self.keywords),
            "sequence": self.sequence,
        }


@dataclass
class Entity:
    """
    A person or organisation appearing in the evidence.

    Aliases, identifiers and mentions accumulate during discovery; an
    entity is never deleted, only merged into a surviving canonical id.
    """
    id: str
    primary_name: str
    kind: EntityKind = EntityKind.PERSON
    gender: Optional[Gender] = None
    aliases: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    bank_accounts: List[str] = field(default_factory=list)
    mentions: int = 0
    confidence: float = 0.0
    statements: List[Statement] = field(default_factory=list)
    liability_score: Optional[float] = None

    @property
    def names(self) -> List[str]:
        """Primary name followed by aliases"""
        return [self.primary_name] + [a for a in self.aliases if a != self.primary_name]

    @property
    def statement_ids(self) -> List[str]:
        return [s.id for s in self.statements]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "primary_name": self.primary_name,
            "kind": self.kind.value,
            "gender": self.gender.value if self.gender else None,
            "aliases": list(self.aliases),
            "emails": list(self.emails),
            "phone_numbers": list(self.phone_numbers),
            "bank_accounts": list(self.bank_accounts),
            "mentions": self.mentions,
            "confidence": self.confidence,
            "statement_ids": self.statement_ids,
            "liability_score": self.liability_score,
        }


@dataclass(frozen=True)
class AliasResolution:
    """A pronoun or relational phrase resolved (or not) to an entity"""
    mention: str
    entity_id: Optional[str]
    confidence: float
    kind: AliasKind
    sentence_index: int
    relation: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.entity_id is not None

    def to_dict(self) -> dict:
        return {
            "mention": self.mention,
            "entity_id": self.entity_id,
            "confidence": self.confidence,
            "kind": self.kind.value,
            "sentence_index": self.sentence_index,
            "relation": self.relation,
        }


# =============================================================================
# Findings
# =============================================================================

@dataclass(frozen=True)
class Contradiction:
    """
    Two statements that cannot both be true.

    Both statements belong to the subject entity, except THIRD_PARTY where
    statement_b belongs to another entity. MISSING_EVIDENCE uses the same
    statement on both sides.
    """
    id: str
    entity_id: str
    statement_a: Statement
    statement_b: Statement
    type: ContradictionType
    severity: Severity
    description: str
    legal_implication: str
    detected_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "statement_a": self.statement_a.to_dict(),
            "statement_b": self.statement_b.to_dict(),
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "legal_implication": self.legal_implication,
            "detected_at": _iso(self.detected_at),
        }


@dataclass(frozen=True)
class BehavioralPattern:
    """A recurring manipulation signature for one entity"""
    id: str
    entity_id: str
    type: BehaviorType
    instances: Tuple[str, ...]
    severity: Severity
    first_detected_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "type": self.type.value,
            "instances": list(self.instances),
            "first_detected_at": _iso(self.first_detected_at),
            "severity": self.severity.value,
        }


# =============================================================================
# Timeline
# =============================================================================

@dataclass(frozen=True)
class TimelineEvent:
    id: str
    description: str
    event_type: EventType
    significance: Significance
    timestamp: Optional[datetime] = None
    date_text: Optional[str] = None
    entity_ids: Tuple[str, ...] = ()
    actor_id: Optional[str] = None  # entity that authored the statement
    statement_id: Optional[str] = None
    source_id: Optional[str] = None
    received_payment: bool = False  # matched on the full statement, not the excerpt

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": _iso(self.timestamp),
            "date_text": self.date_text,
            "description": self.description,
            "entity_ids": list(self.entity_ids),
            "actor_id": self.actor_id,
            "event_type": self.event_type.value,
            "significance": self.significance.value,
            "statement_id": self.statement_id,
            "source_id": self.source_id,
            "received_payment": self.received_payment,
        }


@dataclass(frozen=True)
class TimelineGap:
    """Silence between two consecutive dated events"""
    start: datetime
    end: datetime
    days: int
    significance: Significance
    before_event_id: str
    after_event_id: str

    def to_dict(self) -> dict:
        return {
            "start": _iso(self.start),
            "end": _iso(self.end),
            "days": self.days,
            "significance": self.significance.value,
            "before_event_id": self.before_event_id,
            "after_event_id": self.after_event_id,
        }


@dataclass
class TimelineSummary:
    events: List[TimelineEvent] = field(default_factory=list)
    first_date: Optional[datetime] = None
    last_date: Optional[datetime] = None
    actor_names: List[str] = field(default_factory=list)
    entity_timelines: Dict[str, List[TimelineEvent]] = field(default_factory=dict)
    gaps: List[TimelineGap] = field(default_factory=list)

    def events_for(self, entity_id: str) -> List[TimelineEvent]:
        return self.entity_timelines.get(entity_id, [])

    def to_dict(self) -> dict:
        return {
            "events": [e.to_dict() for e in self.events],
            "first_date": _iso(self.first_date),
            "last_date": _iso(self.last_date),
            "actor_names": list(self.actor_names),
            "entity_timelines": {
                entity_id: [e.id for e in events]
                for entity_id, events in self.entity_timelines.items()
            },
            "gaps": [g.to_dict() for g in self.gaps],
        }


# =============================================================================
# Liability
# =============================================================================

@dataclass(frozen=True)
class LiabilityBreakdown:
    contradictions_by_severity: Dict[str, int]
    behavioral_flags: Tuple[BehaviorType, ...] = ()
    evidence_provided: int = 0
    evidence_withheld: int = 0
    story_changes: int = 0
    temporal_contradictions: int = 0
    direct_contradictions: int = 0
    initiated_events: int = 0
    received_payments: int = 0
    promises: int = 0

    @property
    def benefited_financially(self) -> bool:
        return self.received_payments > 0

    def to_dict(self) -> dict:
        return {
            "contradictions_by_severity": dict(self.contradictions_by_severity),
            "behavioral_flags": [b.value for b in self.behavioral_flags],
            "evidence_provided": self.evidence_provided,
            "evidence_withheld": self.evidence_withheld,
            "story_changes": self.story_changes,
            "temporal_contradictions": self.temporal_contradictions,
            "direct_contradictions": self.direct_contradictions,
            "initiated_events": self.initiated_events,
            "received_payments": self.received_payments,
            "promises": self.promises,
            "benefited_financially": self.benefited_financially,
        }


@dataclass(frozen=True)
class LiabilityScore:
    """Per-entity liability, every component in [0, 100]"""
    entity_id: str
    overall_score: float
    contradiction_score: float
    behavioral_score: float
    evidence_contribution_score: float
    chronological_consistency_score: float
    causal_responsibility_score: float
    breakdown: LiabilityBreakdown

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "overall_score": self.overall_score,
            "contradiction_score": self.contradiction_score,
            "behavioral_score": self.behavioral_score,
            "evidence_contribution_score": self.evidence_contribution_score,
            "chronological_consistency_score": self.chronological_consistency_score,
            "causal_responsibility_score": self.causal_responsibility_score,
            "breakdown": self.breakdown.to_dict(),
        }


# =============================================================================
# Case
# =============================================================================

@dataclass
class CaseAnalysis:
    """Everything one pipeline run produced for a case"""
    case_id: Optional[str]
    statements: List[Statement]
    entities: List[Entity]
    aliases: List[AliasResolution]
    timeline: TimelineSummary
    contradictions: List[Contradiction]
    behavioral_patterns: List[BehavioralPattern]
    liability_scores: Dict[str, LiabilityScore]
    report_hash: str = ""

    def content_dict(self) -> Dict[str, Any]:
        """Deterministic content, excluding the report hash itself"""
        return {
            "case_id": self.case_id,
            "statements": [s.to_dict() for s in self.statements],
            "entities": [e.to_dict() for e in self.entities],
            "aliases": [a.to_dict() for a in self.aliases],
            "timeline": self.timeline.to_dict(),
            "contradictions": [c.to_dict() for c in self.contradictions],
            "behavioral_patterns": [p.to_dict() for p in self.behavioral_patterns],
            "liability_scores": {
                entity_id: score.to_dict()
                for entity_id, score in self.liability_scores.items()
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.content_dict()
        data["report_hash"] = self.report_hash
        return data
