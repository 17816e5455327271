"""
Forensic Analysis Pipeline
==========================

Runs the whole pass for one case:
1. Hash each evidence item and record DOCUMENT_UPLOAD
2. Extract statements per item (thread pool, input order kept) and record
   DOCUMENT_PROCESSING
3. Resolve entities over the combined text
4. Build the timeline
5. Detect contradictions and behavioural patterns
6. Score liability and copy the overall score onto each entity
7. Hash the canonical JSON of the analysis and record REPORT_GENERATED

Failures propagate; there is no partial result.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Dict, Any
from dataclasses import dataclass
from datetime import datetime

from .behavior import BehavioralAnalyzer
from .config import Settings, get_settings
from .custody import CustodyLedger, compute_content_hash
from .detector import ContradictionDetector
from .entities import EntityResolver
from .extractor import ClaimExtractor, RuleBasedClaimExtractor
from .liability import LiabilityCalculator
from .models import CaseAnalysis, Statement
from .schemas import SourceType
from .timeline import TimelineBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvidenceDocument:
    """One evidence item submitted for analysis"""
    doc_id: str
    text: str
    name: Optional[str] = None
    source_type: SourceType = SourceType.DOCUMENT
    speaker: Optional[str] = None
    document_date: Optional[datetime] = None

    @property
    def content_hash(self) -> str:
        return compute_content_hash(self.text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvidenceDocument":
        return cls(
            doc_id=data["doc_id"],
            text=data.get("text", ""),
            name=data.get("name"),
            source_type=SourceType(data.get("source_type") or SourceType.DOCUMENT),
            speaker=data.get("speaker"),
        )


class ForensicAnalyzer:
    """Orchestrates extraction, resolution, detection and scoring for a case"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[ClaimExtractor] = None,
        resolver: Optional[EntityResolver] = None
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or RuleBasedClaimExtractor()
        self.resolver = resolver or EntityResolver(self.settings)
        self.timeline_builder = TimelineBuilder(self.settings)
        self.detector = ContradictionDetector(self.settings)
        self.behavior = BehavioralAnalyzer(self.settings)
        self.liability = LiabilityCalculator(self.settings)

    def analyze(
        self,
        documents: List[EvidenceDocument],
        ledger: Optional[CustodyLedger] = None,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None,
        case_id: Optional[str] = None
    ) -> CaseAnalysis:
        """
        Analyze a case.

        Args:
            documents: Evidence items in submission order
            ledger: Custody ledger recording the run (a fresh one if None)
            user_id: Operator recorded in custody entries
            device_id: Device recorded in custody entries
            case_id: Case id (defaults to the ledger's)

        Returns:
            CaseAnalysis
        """
        start_time = datetime.now()
        ledger = ledger if ledger is not None else CustodyLedger(case_id=case_id, settings=self.settings)
        case_id = case_id or ledger.case_id

        logger.info(f"Analyzing case {case_id}: {len(documents)} documents")

        hashes = [doc.content_hash for doc in documents]
        for doc, doc_hash in zip(documents, hashes):
            ledger.log_document_upload(doc_hash, doc.name or doc.doc_id, user_id, device_id)

        per_document = self._extract_all(documents)
        statements: List[Statement] = []
        for doc, doc_hash, extracted in zip(documents, hashes, per_document):
            statements.extend(extracted)
            ledger.log_document_processing(
                doc_hash, f"{doc.doc_id}: {len(extracted)} statements extracted", user_id, device_id,
            )

        raw_text = "\n\n".join(doc.text for doc in documents)
        resolution = self.resolver.resolve(statements, raw_text)
        entities = resolution.entities

        timeline = self.timeline_builder.build(resolution.statements, entities)

        ingested = [doc.doc_id for doc in documents] + [doc.name for doc in documents if doc.name]
        contradictions = self.detector.detect(entities, ingested_sources=ingested)
        patterns = self.behavior.analyze(entities)
        scores = self.liability.score(entities, contradictions, patterns, timeline)
        for entity in entities:
            entity.liability_score = scores[entity.id].overall_score

        analysis = CaseAnalysis(
            case_id=case_id,
            statements=resolution.statements,
            entities=entities,
            aliases=resolution.aliases,
            timeline=timeline,
            contradictions=contradictions,
            behavioral_patterns=patterns,
            liability_scores=scores,
        )
        analysis.report_hash = compute_content_hash(
            json.dumps(analysis.content_dict(), sort_keys=True, ensure_ascii=False)
        )
        ledger.log_report_generated(
            analysis.report_hash,
            f"{len(contradictions)} contradictions, {len(patterns)} patterns, {len(entities)} entities",
            user_id,
            device_id,
        )

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Case {case_id} analyzed: {len(statements)} statements, {len(entities)} entities, "
            f"{len(contradictions)} contradictions, {len(patterns)} patterns in {elapsed_ms:.1f}ms"
        )
        return analysis

    def _extract_all(self, documents: List[EvidenceDocument]) -> List[List[Statement]]:
        """Extract per document on a thread pool; results keep input order"""
        if not documents:
            return []
        workers = max(1, min(self.settings.max_workers, len(documents)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._extract_document, documents))

    def _extract_document(self, doc: EvidenceDocument) -> List[Statement]:
        return self.extractor.extract(
            doc.text,
            source_id=doc.doc_id,
            source_type=doc.source_type,
            default_speaker=doc.speaker,
            document_date=doc.document_date,
        )


def analyze_case(
    documents: List[EvidenceDocument],
    ledger: Optional[CustodyLedger] = None,
    user_id: Optional[str] = None,
    device_id: Optional[str] = None,
    settings: Optional[Settings] = None
) -> CaseAnalysis:
    """Convenience function to run the full pipeline"""
    return ForensicAnalyzer(settings).analyze(documents, ledger, user_id, device_id)
