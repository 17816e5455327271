"""
Pydantic Schemas for Forensic Analysis Engine
=============================================

Enumerations shared by the core, plus stable input/output schemas for the
HTTP surface. All outputs are guaranteed valid JSON.

Core records are dataclasses (see models.py); the output schemas below
mirror their to_dict() shapes so responses can be validated.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime


# =============================================================================
# ENUMS - Statements & Entities
# =============================================================================

class ClaimType(str, Enum):
    """Classification of a single statement"""
    DENIAL = "denial"
    PROMISE = "promise"
    ADMISSION = "admission"
    ASSERTION = "assertion"
    OPINION = "opinion"
    ACTION_CLAIM = "action_claim"


class SourceType(str, Enum):
    """Kind of evidence item a statement came from"""
    DOCUMENT = "document"
    EMAIL = "email"
    MESSAGE = "message"
    TRANSCRIPT = "transcript"


class EntityKind(str, Enum):
    PERSON = "person"
    ORGANIZATION = "organization"


class Gender(str, Enum):
    """Grammatical gender used for pronoun resolution"""
    MALE = "male"
    FEMALE = "female"


class AliasKind(str, Enum):
    PRONOUN = "pronoun"
    RELATIONAL = "relational"


# =============================================================================
# ENUMS - Findings
# =============================================================================

class ContradictionType(str, Enum):
    """
    Contradiction types.

    - DIRECT: Same entity denies what it asserts elsewhere
    - CROSS_DOCUMENT: Denial vs admission across different evidence items
    - BEHAVIORAL: Sudden classification shift between adjacent statements
    - MISSING_EVIDENCE: Reference to evidence that was never supplied
    - TEMPORAL: Dates or sequence of events don't line up
    - THIRD_PARTY: Another party's statement contradicts the entity's denial
    """
    DIRECT = "direct"
    CROSS_DOCUMENT = "cross_document"
    BEHAVIORAL = "behavioral"
    MISSING_EVIDENCE = "missing_evidence"
    TEMPORAL = "temporal"
    THIRD_PARTY = "third_party"


class Severity(str, Enum):
    """Contradiction severity"""
    CRITICAL = "critical"  # Would flip liability
    HIGH = "high"          # Dishonest intent most plausible
    MEDIUM = "medium"      # Explainable by honest error
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, most severe first"""
        return _SEVERITY_RANK[self.value]


_SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}


class BehaviorType(str, Enum):
    """Behavioural manipulation patterns"""
    GASLIGHTING = "gaslighting"
    BLAME_SHIFTING = "blame_shifting"
    EVASION = "evasion"
    SELECTIVE_DISCLOSURE = "selective_disclosure"
    DEFLECTION = "deflection"
    PRESSURE_TACTICS = "pressure_tactics"
    FINANCIAL_MANIPULATION = "financial_manipulation"
    EMOTIONAL_MANIPULATION = "emotional_manipulation"
    OVER_EXPLAINING = "over_explaining"
    PASSIVE_ADMISSION = "passive_admission"
    SLIP_UP_ADMISSION = "slip_up_admission"
    GHOSTING = "ghosting"


class EventType(str, Enum):
    """Timeline event classification"""
    COMMUNICATION = "communication"
    PAYMENT = "payment"
    PROMISE = "promise"
    DENIAL = "denial"
    ADMISSION = "admission"


class Significance(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"


# =============================================================================
# ENUMS - Custody
# =============================================================================

class CustodyAction(str, Enum):
    """Actions recorded in the custody ledger. Values are hashed verbatim."""
    DOCUMENT_UPLOAD = "DOCUMENT_UPLOAD"
    DOCUMENT_PROCESSING = "DOCUMENT_PROCESSING"
    DOCUMENT_SEALED = "DOCUMENT_SEALED"
    SEAL_VERIFIED = "SEAL_VERIFIED"
    REPORT_GENERATED = "REPORT_GENERATED"
    CASE_CREATED = "CASE_CREATED"
    CASE_EXPORTED = "CASE_EXPORTED"
    EVIDENCE_ADDED = "EVIDENCE_ADDED"
    EVIDENCE_ACCESSED = "EVIDENCE_ACCESSED"
    HASH_VERIFIED = "HASH_VERIFIED"
    TAMPERING_DETECTED = "TAMPERING_DETECTED"
    CHAIN_VERIFIED = "CHAIN_VERIFIED"
    ERROR_OCCURRED = "ERROR_OCCURRED"


class IntegrityStatus(str, Enum):
    """Result of walking the custody chain"""
    VERIFIED = "VERIFIED"
    CHAIN_BROKEN = "CHAIN_BROKEN"
    ENTRY_TAMPERED = "ENTRY_TAMPERED"
    PENDING = "PENDING"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class DocumentInput(BaseModel):
    """A single evidence item submitted for analysis"""
    doc_id: str = Field(..., min_length=1, description="Unique id of the evidence item")
    text: str = Field(..., description="Extracted text of the evidence item")
    name: Optional[str] = Field(None, description="Original file name (e.g. invoice.pdf)")
    source_type: SourceType = Field(SourceType.DOCUMENT, description="Kind of evidence item")
    speaker: Optional[str] = Field(None, description="Default speaker for unlabeled lines")


class AnalyzeRequest(BaseModel):
    """Request to analyze a case"""
    case_id: Optional[str] = Field(None, description="Case id; its custody ledger records the run")
    documents: List[DocumentInput] = Field(..., description="Evidence items")
    user_id: Optional[str] = Field(None, description="Operator recorded in custody entries")
    device_id: Optional[str] = Field(None, description="Device recorded in custody entries")


class CustodyEntryRequest(BaseModel):
    """Request to append a custody entry"""
    action: CustodyAction
    target_hash: str = Field(..., description="Hash of the item acted upon")
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    details: str = ""


# =============================================================================
# OUTPUT SCHEMAS - Analysis
# =============================================================================

class StatementOutput(BaseModel):
    id: str
    entity_id: Optional[str] = None
    speaker: Optional[str] = None
    text: str
    claim_type: ClaimType
    timestamp: Optional[datetime] = None
    date_text: Optional[str] = None
    mentioned_dates: List[str] = Field(default_factory=list)
    source_id: Optional[str] = None
    source_type: SourceType = SourceType.DOCUMENT
    keywords: List[str] = Field(default_factory=list)
    sequence: int = 0


class EntityOutput(BaseModel):
    id: str
    primary_name: str
    kind: EntityKind
    gender: Optional[Gender] = None
    aliases: List[str] = Field(default_factory=list)
    emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)
    bank_accounts: List[str] = Field(default_factory=list)
    mentions: int = 0
    confidence: float = 0.0
    statement_ids: List[str] = Field(default_factory=list)
    liability_score: Optional[float] = None


class AliasResolutionOutput(BaseModel):
    mention: str
    entity_id: Optional[str] = None
    confidence: float
    kind: AliasKind
    sentence_index: int
    relation: Optional[str] = None


class ContradictionOutput(BaseModel):
    id: str
    entity_id: str
    statement_a: StatementOutput
    statement_b: StatementOutput
    type: ContradictionType
    severity: Severity
    description: str
    legal_implication: str
    detected_at: Optional[datetime] = None


class BehavioralPatternOutput(BaseModel):
    id: str
    entity_id: str
    type: BehaviorType
    instances: List[str]
    first_detected_at: Optional[datetime] = None
    severity: Severity


class TimelineEventOutput(BaseModel):
    id: str
    timestamp: Optional[datetime] = None
    date_text: Optional[str] = None
    description: str
    entity_ids: List[str] = Field(default_factory=list)
    actor_id: Optional[str] = None
    event_type: EventType
    significance: Significance
    statement_id: Optional[str] = None
    source_id: Optional[str] = None
    received_payment: bool = False


class TimelineGapOutput(BaseModel):
    start: datetime
    end: datetime
    days: int
    significance: Significance
    before_event_id: str
    after_event_id: str


class TimelineOutput(BaseModel):
    events: List[TimelineEventOutput] = Field(default_factory=list)
    first_date: Optional[datetime] = None
    last_date: Optional[datetime] = None
    actor_names: List[str] = Field(default_factory=list)
    entity_timelines: Dict[str, List[str]] = Field(default_factory=dict)
    gaps: List[TimelineGapOutput] = Field(default_factory=list)


class LiabilityBreakdownOutput(BaseModel):
    contradictions_by_severity: Dict[str, int] = Field(default_factory=dict)
    behavioral_flags: List[BehaviorType] = Field(default_factory=list)
    evidence_provided: int = 0
    evidence_withheld: int = 0
    story_changes: int = 0
    temporal_contradictions: int = 0
    direct_contradictions: int = 0
    initiated_events: int = 0
    received_payments: int = 0
    promises: int = 0
    benefited_financially: bool = False


class LiabilityScoreOutput(BaseModel):
    entity_id: str
    overall_score: float = Field(..., ge=0, le=100)
    contradiction_score: float
    behavioral_score: float
    evidence_contribution_score: float
    chronological_consistency_score: float
    causal_responsibility_score: float
    breakdown: LiabilityBreakdownOutput


class AnalysisMetadata(BaseModel):
    """Metadata about a pipeline run"""
    duration_ms: float
    documents: int
    statements: int
    entities: int
    contradictions: int
    behavioral_patterns: int
    custody_entries: int


class AnalysisResponse(BaseModel):
    """Full analysis of one case"""
    case_id: Optional[str] = None
    statements: List[StatementOutput] = Field(default_factory=list)
    entities: List[EntityOutput] = Field(default_factory=list)
    aliases: List[AliasResolutionOutput] = Field(default_factory=list)
    timeline: TimelineOutput
    contradictions: List[ContradictionOutput] = Field(default_factory=list)
    behavioral_patterns: List[BehavioralPatternOutput] = Field(default_factory=list)
    liability_scores: Dict[str, LiabilityScoreOutput] = Field(default_factory=dict)
    report_hash: str
    custody_head_hash: Optional[str] = None
    metadata: Optional[AnalysisMetadata] = None


# =============================================================================
# OUTPUT SCHEMAS - Custody
# =============================================================================

class CustodyEntryOutput(BaseModel):
    """Flat custody record, same field names as the JSON export"""
    id: str
    timestamp: datetime
    action: CustodyAction
    target_hash: str
    user_id: str
    device_id: str
    details: str
    previous_hash: str
    entry_hash: str
    integrity_status: IntegrityStatus


class CustodyLogResponse(BaseModel):
    case_id: str
    head_hash: str
    entries: List[CustodyEntryOutput] = Field(default_factory=list)


class CustodyVerifyResponse(BaseModel):
    case_id: str
    integrity_status: IntegrityStatus
    entries: int
    head_hash: str


# =============================================================================
# OUTPUT SCHEMAS - Service
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Current timestamp")


class ErrorDetail(BaseModel):
    """Structured error detail"""
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Optional error details")


class ErrorResponse(BaseModel):
    """Structured error response"""
    error: ErrorDetail
