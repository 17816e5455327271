"""
Statement Extractor - Extract attributed claims from evidentiary text
=====================================================================

Simple, rule-based statement extraction:
1. Normalize whitespace and split into lines
2. Strip chat timestamp prefixes ([12/03/2024, 10:15] or 12/03/2024, 10:15 -)
3. Track the current speaker from speaker markers ([Name]:, Name:, From: headers)
4. Split attributed lines into sentences
5. Classify each sentence (denial > admission > promise > action_claim > opinion > assertion)

Unattributable lines (no speaker marker, no current speaker, no default
speaker) are dropped.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from datetime import datetime

from .dates import extract_dates, parse_date
from .models import Statement
from .schemas import ClaimType, SourceType
from .tokenizer import split_lines, split_sentences, extract_keywords

logger = logging.getLogger(__name__)

__all__ = [
    'ClaimExtractor',
    'RuleBasedClaimExtractor',
    'classify_claim',
    'extract_statements',
    'get_extractor',
]


# =============================================================================
# Classification cues (checked in priority order)
# =============================================================================

DENIAL_CUES = [
    r"\bnever\b", r"\bdid\s+not\b", r"\bdidn'?t\b", r"\bwas\s+not\b",
    r"\bwasn'?t\b", r"\bwere\s+not\b", r"\bweren'?t\b", r"\bno\b", r"\bnot\b",
    r"\bnothing\b", r"\bdeny\b", r"\bdenied\b", r"\bdon'?t\b", r"\bdoesn'?t\b",
    r"\bhaven'?t\b", r"\bhasn'?t\b", r"\bisn'?t\b", r"\bwon'?t\b",
]

ADMISSION_CUES = [
    r"\bi\s+admit\b", r"\bi\s+confess\b", r"\byes,?\s+i\s+did\b",
    r"\bi\s+was\s+wrong\b", r"\bi\s+acknowledge\b",
    r"\bi\s+accept\s+(?:that|responsibility)\b", r"\bi\s+have\s+to\s+admit\b",
]

PROMISE_CUES = [
    r"\bwill\b", r"\bgoing\s+to\b", r"\bshall\b", r"\bi\s+promise\b",
    r"\bi'll\b", r"\bi\s+commit\s+to\b", r"\bi\s+guarantee\b",
]

ACTION_CLAIM_CUES = [
    r"\bi\s+(?:have\s+)?(?:sent|paid|received|transferred|signed|delivered|"
    r"gave|returned|deposited|wired|got)\b",
]

OPINION_CUES = [
    r"\bi\s+think\b", r"\bi\s+believe\b", r"\bmaybe\b", r"\bperhaps\b",
    r"\bprobably\b", r"\bi\s+feel\b", r"\bin\s+my\s+opinion\b", r"\bi\s+guess\b",
]

# Header words that look like "Name:" speaker markers but aren't
HEADER_WORDS = {
    'subject', 'date', 'to', 'cc', 'bcc', 're', 'fw', 'fwd', 'note', 'sent',
    'time', 'attachment', 'attachments', 'page', 'ref', 'reference', 'tel',
    'phone', 'email', 'address', 'amount', 'total', 'account', 'iban',
    'question', 'answer', 'q', 'a', 'exhibit', 'from',
}

# Chat-export system lines
SYSTEM_LINES = [
    r"<media omitted>", r"messages and calls are end-to-end encrypted",
    r"this message was deleted", r"missed voice call", r"missed video call",
]


def classify_claim(text: str) -> ClaimType:
    """Classify a sentence by keyword families in fixed priority order"""
    lowered = text.lower()
    for cues, claim_type in _CLASSIFIERS:
        if any(cue.search(lowered) for cue in cues):
            return claim_type
    return ClaimType.ASSERTION


_CLASSIFIERS = [
    ([re.compile(c) for c in DENIAL_CUES], ClaimType.DENIAL),
    ([re.compile(c) for c in ADMISSION_CUES], ClaimType.ADMISSION),
    ([re.compile(c) for c in PROMISE_CUES], ClaimType.PROMISE),
    ([re.compile(c) for c in ACTION_CLAIM_CUES], ClaimType.ACTION_CLAIM),
    ([re.compile(c) for c in OPINION_CUES], ClaimType.OPINION),
]


# =============================================================================
# Extractors
# =============================================================================

class ClaimExtractor(ABC):
    """Strategy for turning raw text into classified statements"""

    @abstractmethod
    def extract(
        self,
        text: str,
        source_id: Optional[str] = None,
        source_type: SourceType = SourceType.DOCUMENT,
        default_speaker: Optional[str] = None,
        document_date: Optional[datetime] = None,
    ) -> List[Statement]:
        ...


class RuleBasedClaimExtractor(ClaimExtractor):
    """
    Rule-based extractor for chat exports, emails, transcripts and plain
    documents.

    Speaker markers:
    - [Name]: message
    - Name: message / First Last: message
    - From: Name <email>  (email header, sets the sender)
    - Date: ...           (email header, sets the document date)
    """

    def __init__(self):
        self.chat_prefix = re.compile(
            r'^\[?(\d{1,2}/\d{1,2}/\d{2,4},?\s+\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?)\]?\s*-?\s*'
        )
        self.bracket_speaker = re.compile(r"^\[([A-Za-z][\w.'\- ]{0,60})\]\s*:\s*(.*)$")
        self.plain_speaker = re.compile(
            r"^([A-Z][\w.'\-]*(?:\s+[A-Z][\w.'\-]*){0,3})\s*:\s*(.*)$"
        )
        self.from_header = re.compile(r'^From\s*:\s*(.+)$', re.IGNORECASE)
        self.date_header = re.compile(r'^(?:Date|Sent)\s*:\s*(.+)$', re.IGNORECASE)
        self.email_address = re.compile(r'<?([A-Za-z0-9._%+-]+)@[A-Za-z0-9.-]+\.[A-Za-z]{2,}>?')
        self.system_lines = [re.compile(p, re.IGNORECASE) for p in SYSTEM_LINES]

    def extract(
        self,
        text: str,
        source_id: Optional[str] = None,
        source_type: SourceType = SourceType.DOCUMENT,
        default_speaker: Optional[str] = None,
        document_date: Optional[datetime] = None,
    ) -> List[Statement]:
        """
        Extract statements from text.

        Args:
            text: Raw evidence text
            source_id: Id of the evidence item (used in statement ids)
            source_type: Kind of evidence item
            default_speaker: Actor for lines without any speaker marker
            document_date: Fallback timestamp for undated statements

        Returns:
            Ordered list of Statements (entity_id not yet resolved)
        """
        statements: List[Statement] = []
        if not text or not text.strip():
            return statements

        prefix = source_id or "doc"
        current_speaker: Optional[str] = None
        current_date = document_date

        for line in split_lines(text):
            if any(p.search(line) for p in self.system_lines):
                continue

            header = self._parse_header(line)
            if header is not None:
                kind, value = header
                if kind == 'from' and value:
                    current_speaker = value
                elif kind == 'date':
                    current_date = parse_date(value) or current_date
                continue

            chat_time, line = self._strip_chat_prefix(line)
            speaker, content = self._split_speaker(line)
            if speaker:
                current_speaker = speaker
            if not content:
                continue

            actor = current_speaker or default_speaker
            if not actor:
                logger.debug(f"Dropping unattributed line in {prefix}: {content[:40]!r}")
                continue

            for sentence in split_sentences(content):
                statements.append(self._build_statement(
                    sentence=sentence,
                    speaker=actor,
                    sequence=len(statements),
                    prefix=prefix,
                    source_id=source_id,
                    source_type=source_type,
                    chat_time=chat_time,
                    fallback_date=current_date,
                ))

        logger.debug(f"Extracted {len(statements)} statements from {prefix}")
        return statements

    def _build_statement(
        self,
        sentence: str,
        speaker: str,
        sequence: int,
        prefix: str,
        source_id: Optional[str],
        source_type: SourceType,
        chat_time: Optional[str],
        fallback_date: Optional[datetime],
    ) -> Statement:
        mentions = extract_dates(sentence)

        timestamp = None
        date_text = None
        if chat_time:
            date_text = chat_time
            timestamp = parse_date(chat_time)
        elif mentions:
            date_text = mentions[0].text
            timestamp = mentions[0].value
        elif fallback_date is not None:
            timestamp = fallback_date

        return Statement(
            id=f"{prefix}-s{sequence + 1}",
            text=sentence,
            claim_type=classify_claim(sentence),
            speaker=speaker,
            timestamp=timestamp,
            date_text=date_text,
            mentioned_dates=tuple(m.key for m in mentions),
            source_id=source_id,
            source_type=source_type,
            keywords=extract_keywords(sentence),
            sequence=sequence,
        )

    def _parse_header(self, line: str) -> Optional[Tuple[str, Optional[str]]]:
        """Recognize email From:/Date: headers"""
        match = self.from_header.match(line)
        if match:
            return 'from', self._sender_name(match.group(1))
        match = self.date_header.match(line)
        if match:
            return 'date', match.group(1)
        return None

    def _sender_name(self, raw: str) -> Optional[str]:
        """'Jane Roe <jane@x.com>' -> 'Jane Roe'; 'john.smith@x.com' -> 'John Smith'"""
        email = self.email_address.search(raw)
        name = raw[:email.start()].strip(' "\'') if email else raw.strip(' "\'')
        if name:
            return name
        if email:
            parts = re.split(r'[._\-+]+', email.group(1))
            return ' '.join(p.capitalize() for p in parts if p.isalpha()) or None
        return None

    def _strip_chat_prefix(self, line: str) -> Tuple[Optional[str], str]:
        match = self.chat_prefix.match(line)
        if not match:
            return None, line
        return match.group(1), line[match.end():].strip()

    def _split_speaker(self, line: str) -> Tuple[Optional[str], str]:
        """Return (speaker, content) if the line starts with a speaker marker"""
        match = self.bracket_speaker.match(line)
        if match:
            return match.group(1).strip(), match.group(2).strip()

        match = self.plain_speaker.match(line)
        if match:
            name = match.group(1).strip()
            if name.lower() not in HEADER_WORDS and not any(ch.isdigit() for ch in name):
                return name, match.group(2).strip()

        return None, line


# Singleton instance
_extractor = None


def get_extractor() -> ClaimExtractor:
    """Get singleton extractor instance"""
    global _extractor
    if _extractor is None:
        _extractor = RuleBasedClaimExtractor()
    return _extractor


def extract_statements(
    text: str,
    source_id: Optional[str] = None,
    source_type: SourceType = SourceType.DOCUMENT,
    default_speaker: Optional[str] = None,
    document_date: Optional[datetime] = None,
) -> List[Statement]:
    """
    Convenience function to extract statements from text.

    Args:
        text: Raw evidence text
        source_id: Evidence item id
        source_type: Kind of evidence item
        default_speaker: Actor for unlabeled lines
        document_date: Fallback timestamp

    Returns:
        List of Statement objects
    """
    return get_extractor().extract(
        text=text,
        source_id=source_id,
        source_type=source_type,
        default_speaker=default_speaker,
        document_date=document_date,
    )
