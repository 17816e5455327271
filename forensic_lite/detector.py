"""
Contradiction Detector - Rule-based detection across an entity's statements
===========================================================================

Detection Types:
1. DIRECT - Denial vs assertion/admission of the same thing by the same party
2. CROSS_DOCUMENT - Denial vs admission from different evidence items
3. TEMPORAL - Claimed ordering vs dates, broken promises, conflicting dates
4. BEHAVIORAL - Classification flip between temporally adjacent statements
5. MISSING_EVIDENCE - Reference to a document that was never ingested
6. THIRD_PARTY - Another party asserts what this party denies

Severity:
- CRITICAL: Denial meets admission/action-claim (would flip liability)
- HIGH: Dishonest intent most plausible
- MEDIUM: Explainable by honest error
- LOW: Opinion involved

Output is deterministic: ids hash the type and statement ids, and
detected_at is supplied by the caller or taken from the latest statement.
"""

import re
import hashlib
import logging
from typing import List, Optional, Set, Tuple, Iterable
from datetime import datetime, timedelta

from .config import Settings, get_settings
from .dates import extract_dates, compare_keys, keys_conflict
from .models import Contradiction, Entity, Statement
from .schemas import ClaimType, ContradictionType, Severity
from .timeline import chronological
from .tokenizer import extract_keywords, relatedness, excerpt

logger = logging.getLogger(__name__)


# =============================================================================
# Lexicons
# =============================================================================

ASSERTIVE = {ClaimType.ASSERTION, ClaimType.ADMISSION, ClaimType.ACTION_CLAIM}
ADMISSIVE = {ClaimType.ADMISSION, ClaimType.ACTION_CLAIM}

# Word forms folded onto one topic term so "never paid" meets "the payment"
VERB_FORMS = {
    'paid': 'pay', 'pays': 'pay', 'paying': 'pay', 'payment': 'pay', 'payments': 'pay',
    'sent': 'send', 'sends': 'send', 'sending': 'send',
    'received': 'receive', 'receives': 'receive', 'receiving': 'receive', 'receipt': 'receive',
    'signed': 'sign', 'signs': 'sign', 'signing': 'sign', 'signature': 'sign',
    'agreed': 'agree', 'agrees': 'agree', 'agreement': 'agree',
    'promised': 'promise', 'promises': 'promise',
    'transferred': 'transfer', 'transfers': 'transfer',
    'met': 'meet', 'meeting': 'meet', 'meetings': 'meet',
    'took': 'take', 'taken': 'take', 'taking': 'take',
    'gave': 'give', 'given': 'give', 'giving': 'give',
    'borrowed': 'borrow', 'lent': 'lend', 'loaned': 'loan', 'loans': 'loan',
    'owed': 'owe', 'owes': 'owe', 'owing': 'owe',
    'existed': 'exist', 'exists': 'exist', 'existence': 'exist',
    'delivered': 'deliver', 'delivery': 'deliver',
    'returned': 'return', 'returns': 'return',
    'deals': 'deal', 'contracts': 'contract',
}

DATE_WORDS = {
    'january', 'february', 'march', 'april', 'may', 'june', 'july', 'august',
    'september', 'october', 'november', 'december', 'monday', 'tuesday',
    'wednesday', 'thursday', 'friday', 'saturday', 'sunday', 'today',
    'yesterday', 'tomorrow', 'day', 'week', 'month', 'year',
}

ORDER_CUE = re.compile(r"\b(before|prior\s+to|until|after|following)\b(.*)", re.IGNORECASE)

GENERIC_REFERENCES = [
    re.compile(r"\b(?:see|check|find)\s+(?:the\s+)?(?:attached|enclosed)\b", re.IGNORECASE),
    re.compile(r"\battached\s+(?:is|are|please\s+find)?\s*(?:the\s+|a\s+|my\s+)?"
               r"(?:document|file|receipt|proof|invoice|contract|statement|screenshot|photo)s?\b",
               re.IGNORECASE),
    re.compile(r"\bi\s+(?:have\s+|'ve\s+)?attached\b", re.IGNORECASE),
    re.compile(r"\bas\s+shown\s+in\b", re.IGNORECASE),
    re.compile(r"\brefer\s+to\s+(?:the\s+)?(?:document|file|attachment)\b", re.IGNORECASE),
]

FILE_REFERENCE = re.compile(
    r"\b([\w\-]+\.(?:pdf|docx?|xlsx?|csv|txt|eml|msg|jpe?g|png|heic|mp3|mp4|wav|zip))\b",
    re.IGNORECASE
)

LEGAL_IMPLICATIONS = {
    ContradictionType.DIRECT:
        "Contradictory statements by the same party undermine credibility and may indicate deliberate deception.",
    ContradictionType.CROSS_DOCUMENT:
        "The party's account differs between separate evidence items; the version given depends on the document.",
    ContradictionType.BEHAVIORAL:
        "An abrupt change of position between adjacent statements is consistent with consciousness of guilt.",
    ContradictionType.MISSING_EVIDENCE:
        "Reliance on evidence that was never produced may support an adverse inference.",
    ContradictionType.TEMPORAL:
        "Chronological inconsistencies affect the reliability of the party's account of events.",
    ContradictionType.THIRD_PARTY:
        "Another party's independent statement contradicts this denial.",
}


def topic_terms(statement: Statement) -> Set[str]:
    """Statement keywords with verb forms folded and date words dropped"""
    return {VERB_FORMS.get(k, k) for k in statement.keywords if k not in DATE_WORDS}


# =============================================================================
# Rule-Based Detector
# =============================================================================

class ContradictionDetector:
    """
    Rule-based contradiction detector.

    Compares every pair of an entity's own statements (and, for
    THIRD_PARTY, statements of other entities). Deduplicates by
    (statement pair, type) and orders most-severe-first.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def detect(
        self,
        entities: List[Entity],
        ingested_sources: Optional[Iterable[str]] = None,
        detected_at: Optional[datetime] = None
    ) -> List[Contradiction]:
        """
        Detect contradictions for all entities.

        Args:
            entities: Entities with their attributed statements
            ingested_sources: Ids/names of every evidence item supplied;
                defaults to the statements' source ids
            detected_at: Detection timestamp; defaults to the latest
                statement timestamp so output is reproducible

        Returns:
            Contradictions, most severe first
        """
        start_time = datetime.now()
        statements = [s for e in entities for s in e.statements]

        if detected_at is None:
            stamps = [s.timestamp for s in statements if s.timestamp is not None]
            detected_at = max(stamps) if stamps else None

        if ingested_sources is None:
            ingested = {s.source_id.lower() for s in statements if s.source_id}
        else:
            ingested = {str(source).lower() for source in ingested_sources}

        logger.info(f"Rule-based detection: analyzing {len(statements)} statements, {len(entities)} entities")

        direct, cross_doc, temporal, behavioral, missing = [], [], [], [], []
        for entity in entities:
            direct.extend(self._detect_direct(entity, detected_at))
            cross_doc.extend(self._detect_cross_document(entity, detected_at))
            temporal.extend(self._detect_temporal(entity, detected_at))
            behavioral.extend(self._detect_behavioral(entity, detected_at))
            missing.extend(self._detect_missing_evidence(entity, ingested, detected_at))
        third_party = self._detect_third_party(entities, detected_at)

        contradictions = direct + cross_doc + temporal + behavioral + missing + third_party
        contradictions = self._deduplicate(contradictions)
        contradictions.sort(key=lambda c: c.severity.rank)

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Rule-based detection complete: {len(contradictions)} contradictions "
            f"(direct={len(direct)}, cross_doc={len(cross_doc)}, temporal={len(temporal)}, "
            f"behavioral={len(behavioral)}, missing={len(missing)}, third_party={len(third_party)}) "
            f"in {elapsed_ms:.1f}ms"
        )

        return contradictions

    # =========================================================================
    # DIRECT / CROSS_DOCUMENT
    # =========================================================================

    def _detect_direct(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """Denial vs assertive (or opinion) statement sharing a denial target"""
        contradictions = []
        statements = entity.statements
        for i, a in enumerate(statements):
            for b in statements[i + 1:]:
                denial, other = _denial_pair(a, b, ASSERTIVE | {ClaimType.OPINION})
                if denial is None:
                    continue
                shared = topic_terms(denial) & topic_terms(other)
                if not shared:
                    continue

                if other.claim_type in ADMISSIVE:
                    severity = Severity.CRITICAL
                elif other.claim_type == ClaimType.OPINION:
                    severity = Severity.LOW
                else:
                    severity = Severity.HIGH

                contradictions.append(self._make(
                    ContradictionType.DIRECT, severity, entity.id, a, b,
                    f"{entity.primary_name} denies {_terms(shared)} (\"{excerpt(denial.text)}\") "
                    f"but also states \"{excerpt(other.text)}\"",
                    detected_at,
                ))
        return contradictions

    def _detect_cross_document(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """Denial in one evidence item, admission in another"""
        contradictions = []
        statements = entity.statements
        for i, a in enumerate(statements):
            for b in statements[i + 1:]:
                if not a.source_id or not b.source_id or a.source_id == b.source_id:
                    continue
                denial, other = _denial_pair(a, b, ADMISSIVE)
                if denial is None:
                    continue
                shared = topic_terms(denial) & topic_terms(other)
                if not shared:
                    continue
                contradictions.append(self._make(
                    ContradictionType.CROSS_DOCUMENT, Severity.CRITICAL, entity.id, a, b,
                    f"{entity.primary_name} denies {_terms(shared)} in {denial.source_id} "
                    f"but admits it in {other.source_id}",
                    detected_at,
                ))
        return contradictions

    # =========================================================================
    # TEMPORAL
    # =========================================================================

    def _detect_temporal(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        contradictions = []
        contradictions.extend(self._detect_sequence(entity, detected_at))
        contradictions.extend(self._detect_broken_promises(entity, detected_at))
        contradictions.extend(self._detect_date_conflicts(entity, detected_at))
        return contradictions

    def _detect_sequence(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """'X before Y' where the dated statement about Y says otherwise"""
        contradictions = []
        statements = entity.statements
        for i, claim in enumerate(statements):
            match = ORDER_CUE.search(claim.text)
            if not match:
                continue
            own_dates = [m for m in extract_dates(claim.text) if m.start < match.start()]
            if not own_dates:
                continue
            reference_terms = {VERB_FORMS.get(k, k) for k in extract_keywords(match.group(2))} - DATE_WORDS
            if not reference_terms:
                continue
            expects_earlier = match.group(1).lower() not in ('after', 'following')

            for j, other in enumerate(statements):
                if j == i or not other.mentioned_dates:
                    continue
                if not reference_terms & topic_terms(other):
                    continue
                order = compare_keys(own_dates[0].key, other.mentioned_dates[0])
                if order is None or order == 0:
                    continue
                if (order > 0) != expects_earlier:
                    continue
                a, b = (claim, other) if i < j else (other, claim)
                contradictions.append(self._make(
                    ContradictionType.TEMPORAL, Severity.MEDIUM, entity.id, a, b,
                    f"{entity.primary_name} places {own_dates[0].key} {match.group(1).lower()} "
                    f"{_terms(reference_terms)}, but dates that event to {other.mentioned_dates[0]}",
                    detected_at,
                ))
        return contradictions

    def _detect_broken_promises(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """Dated promise later followed by a denial of the same topic"""
        contradictions = []
        dated = [s for s in chronological(entity.statements) if s.timestamp is not None]
        for i, promise in enumerate(dated):
            if promise.claim_type != ClaimType.PROMISE:
                continue
            for denial in dated[i + 1:]:
                if denial.claim_type != ClaimType.DENIAL or denial.timestamp <= promise.timestamp:
                    continue
                shared = topic_terms(promise) & topic_terms(denial)
                if not shared:
                    continue
                contradictions.append(self._make(
                    ContradictionType.TEMPORAL, Severity.HIGH, entity.id, promise, denial,
                    f"{entity.primary_name} promised {_terms(shared)} on {promise.timestamp.date()} "
                    f"and denied it on {denial.timestamp.date()}",
                    detected_at,
                ))
        return contradictions

    def _detect_date_conflicts(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """Two related statements assigning different dates to the same event"""
        contradictions = []
        statements = [s for s in entity.statements if s.mentioned_dates]
        for i, a in enumerate(statements):
            for b in statements[i + 1:]:
                same_kind = a.claim_type == b.claim_type or (
                    a.claim_type in ASSERTIVE and b.claim_type in ASSERTIVE)
                if not same_kind:
                    continue
                if set(a.mentioned_dates) & set(b.mentioned_dates):
                    continue
                terms_a, terms_b = topic_terms(a), topic_terms(b)
                shared = terms_a & terms_b
                if not shared or relatedness(terms_a, terms_b) < self.settings.temporal_min_relatedness:
                    continue
                if not keys_conflict(a.mentioned_dates[0], b.mentioned_dates[0]):
                    continue
                contradictions.append(self._make(
                    ContradictionType.TEMPORAL, Severity.MEDIUM, entity.id, a, b,
                    f"{entity.primary_name} dates {_terms(shared)} to {a.mentioned_dates[0]} "
                    f"and to {b.mentioned_dates[0]}",
                    detected_at,
                ))
        return contradictions

    # =========================================================================
    # BEHAVIORAL
    # =========================================================================

    def _detect_behavioral(self, entity: Entity, detected_at: Optional[datetime]) -> List[Contradiction]:
        """Classification flip between temporally adjacent statements"""
        contradictions = []
        window = timedelta(days=self.settings.behavioral_shift_window_days)
        ordered = chronological(entity.statements)

        for a, b in zip(ordered, ordered[1:]):
            if (a.timestamp is None) != (b.timestamp is None):
                continue
            if a.timestamp is not None and b.timestamp - a.timestamp > window:
                continue

            if a.claim_type in ADMISSIVE and b.claim_type == ClaimType.DENIAL:
                severity, shift = Severity.HIGH, "retracted an admission"
            elif a.claim_type == ClaimType.DENIAL and b.claim_type in ADMISSIVE:
                severity, shift = Severity.MEDIUM, "reversed a denial"
            elif a.claim_type == ClaimType.PROMISE and b.claim_type == ClaimType.DENIAL:
                severity, shift = Severity.MEDIUM, "followed a promise with a denial"
            else:
                continue

            contradictions.append(self._make(
                ContradictionType.BEHAVIORAL, severity, entity.id, a, b,
                f"{entity.primary_name} {shift}: \"{excerpt(a.text)}\" then \"{excerpt(b.text)}\"",
                detected_at,
            ))
        return contradictions

    # =========================================================================
    # MISSING_EVIDENCE
    # =========================================================================

    def _detect_missing_evidence(
        self,
        entity: Entity,
        ingested: Set[str],
        detected_at: Optional[datetime]
    ) -> List[Contradiction]:
        """References to evidence that was never supplied"""
        contradictions = []
        for statement in entity.statements:
            missing = None
            for match in FILE_REFERENCE.finditer(statement.text):
                name = match.group(1).lower()
                if name not in ingested and name.rsplit('.', 1)[0] not in ingested:
                    missing = (Severity.HIGH, f"references {match.group(1)}, which was never produced")
                    break

            if missing is None and any(p.search(statement.text) for p in GENERIC_REFERENCES):
                own = statement.source_id.lower() if statement.source_id else None
                if not (ingested - {own}):
                    missing = (Severity.MEDIUM, "refers to an attachment, but no other evidence was supplied")

            if missing is None:
                continue
            severity, reason = missing
            contradictions.append(self._make(
                ContradictionType.MISSING_EVIDENCE, severity, entity.id, statement, statement,
                f"{entity.primary_name} {reason}: \"{excerpt(statement.text)}\"",
                detected_at,
            ))
        return contradictions

    # =========================================================================
    # THIRD_PARTY
    # =========================================================================

    def _detect_third_party(self, entities: List[Entity], detected_at: Optional[datetime]) -> List[Contradiction]:
        """Entity A denies what entity B asserts"""
        contradictions = []
        minimum = self.settings.third_party_min_shared_keywords
        for subject in entities:
            denials = [s for s in subject.statements if s.claim_type == ClaimType.DENIAL]
            if not denials:
                continue
            for other in entities:
                if other is subject:
                    continue
                assertions = [s for s in other.statements if s.claim_type in ASSERTIVE]
                for denial in denials:
                    denial_terms = topic_terms(denial)
                    for assertion in assertions:
                        shared = denial_terms & topic_terms(assertion)
                        if not shared:
                            continue
                        cross_reference = _mentions(assertion, subject) or _mentions(denial, other)
                        if len(shared) + (1 if cross_reference else 0) < minimum:
                            continue
                        severity = Severity.HIGH if assertion.claim_type in ADMISSIVE else Severity.MEDIUM
                        contradictions.append(self._make(
                            ContradictionType.THIRD_PARTY, severity, subject.id, denial, assertion,
                            f"{subject.primary_name} denies {_terms(shared)}, but {other.primary_name} "
                            f"states \"{excerpt(assertion.text)}\"",
                            detected_at,
                        ))
        return contradictions

    # =========================================================================
    # Helpers
    # =========================================================================

    def _make(
        self,
        contradiction_type: ContradictionType,
        severity: Severity,
        entity_id: str,
        statement_a: Statement,
        statement_b: Statement,
        description: str,
        detected_at: Optional[datetime]
    ) -> Contradiction:
        key = f"{contradiction_type.value}|{statement_a.id}|{statement_b.id}"
        return Contradiction(
            id=f"contr_{hashlib.sha1(key.encode('utf-8')).hexdigest()[:12]}",
            entity_id=entity_id,
            statement_a=statement_a,
            statement_b=statement_b,
            type=contradiction_type,
            severity=severity,
            description=description,
            legal_implication=LEGAL_IMPLICATIONS[contradiction_type],
            detected_at=detected_at,
        )

    def _deduplicate(self, contradictions: List[Contradiction]) -> List[Contradiction]:
        """Remove duplicate contradictions"""
        seen = set()
        unique = []

        for contr in contradictions:
            # Key by statement pair (sorted) and type
            key = (
                tuple(sorted([contr.statement_a.id, contr.statement_b.id])),
                contr.type
            )

            if key not in seen:
                seen.add(key)
                unique.append(contr)

        return unique


def _denial_pair(
    a: Statement,
    b: Statement,
    counterpart_types: Set[ClaimType]
) -> Tuple[Optional[Statement], Optional[Statement]]:
    """(denial, counterpart) if exactly one side is a denial and the other qualifies"""
    if a.claim_type == ClaimType.DENIAL and b.claim_type in counterpart_types:
        return a, b
    if b.claim_type == ClaimType.DENIAL and a.claim_type in counterpart_types:
        return b, a
    return None, None


def _mentions(statement: Statement, entity: Entity) -> bool:
    return any(
        re.search(r'\b' + re.escape(name) + r'\b', statement.text, re.IGNORECASE)
        for name in entity.names
    )


def _terms(terms: Iterable[str]) -> str:
    return ', '.join(f"'{t}'" for t in sorted(terms))


def detect_contradictions(
    entities: List[Entity],
    ingested_sources: Optional[Iterable[str]] = None,
    detected_at: Optional[datetime] = None,
    settings: Optional[Settings] = None
) -> List[Contradiction]:
    """
    Convenience function to detect contradictions.

    Args:
        entities: Entities with attributed statements
        ingested_sources: Ids/names of every evidence item supplied
        detected_at: Detection timestamp (defaults to latest statement timestamp)
        settings: Optional settings override

    Returns:
        List of Contradiction objects, most severe first
    """
    return ContradictionDetector(settings).detect(entities, ingested_sources, detected_at)
