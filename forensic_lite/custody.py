"""
Custody Ledger - Tamper-evident chain of custody
================================================

Append-only, hash-chained log of every analytical action on a case.

Entry hash = SHA-512 (lowercase hex) of the canonical payload:

    ID:<id>|TS:<epoch seconds>|ACTION:<action>|HASH:<target>|USER:<user>|DEVICE:<device>|DETAILS:<details>|PREV:<previous>

The first entry points at the genesis hash (128 zeros). Appends are
linearized through one lock; reads take a snapshot under the lock and
walk it outside. Integrity failures are returned as IntegrityStatus
values and logged, never repaired.
"""

import json
import re
import uuid
import hashlib
import logging
import threading
from typing import List, Optional, Dict, Any, Tuple, Union, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from .config import Settings, get_settings
from .errors import CustodyHashError, CustodyRecordError
from .schemas import CustodyAction, IntegrityStatus

logger = logging.getLogger(__name__)

GENESIS_HASH = "0" * 128

RECORD_FIELDS = (
    "id", "timestamp", "action", "target_hash", "user_id", "device_id",
    "details", "previous_hash", "entry_hash", "integrity_status",
)


# =============================================================================
# Hashing
# =============================================================================

def compute_content_hash(content: Union[str, bytes]) -> str:
    """SHA-512 lowercase hex digest of text or bytes"""
    try:
        digest = hashlib.new("sha512")
    except ValueError as e:
        raise CustodyHashError(f"SHA-512 unavailable: {e}") from e
    digest.update(content.encode("utf-8") if isinstance(content, str) else content)
    return digest.hexdigest()


def build_payload(
    entry_id: str,
    timestamp: datetime,
    action: CustodyAction,
    target_hash: str,
    user_id: str,
    device_id: str,
    details: str,
    previous_hash: str
) -> str:
    """Canonical string hashed for an entry"""
    return (
        f"ID:{entry_id}|TS:{int(timestamp.timestamp())}|ACTION:{action.value}|"
        f"HASH:{target_hash}|USER:{user_id}|DEVICE:{device_id}|"
        f"DETAILS:{details}|PREV:{previous_hash}"
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Entries
# =============================================================================

@dataclass(frozen=True)
class CustodyLogEntry:
    """One immutable ledger entry"""
    id: str
    timestamp: datetime
    action: CustodyAction
    target_hash: str
    user_id: str
    device_id: str
    details: str
    previous_hash: str
    entry_hash: str
    integrity_status: IntegrityStatus = IntegrityStatus.PENDING

    def compute_hash(self) -> str:
        """Recompute this entry's hash from its fields"""
        return compute_content_hash(build_payload(
            self.id, self.timestamp, self.action, self.target_hash,
            self.user_id, self.device_id, self.details, self.previous_hash,
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "target_hash": self.target_hash,
            "user_id": self.user_id,
            "device_id": self.device_id,
            "details": self.details,
            "previous_hash": self.previous_hash,
            "entry_hash": self.entry_hash,
            "integrity_status": self.integrity_status.value,
        }

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "CustodyLogEntry":
        if not isinstance(record, dict):
            raise CustodyRecordError(f"Custody record must be an object, got {type(record).__name__}")
        missing = [f for f in RECORD_FIELDS if f not in record]
        if missing:
            raise CustodyRecordError(f"Custody record missing fields: {', '.join(missing)}")
        try:
            timestamp = record["timestamp"]
            if not isinstance(timestamp, datetime):
                # API output writes UTC as a trailing Z
                timestamp = datetime.fromisoformat(re.sub(r"Z$", "+00:00", str(timestamp)))
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            return cls(
                id=str(record["id"]),
                timestamp=timestamp,
                action=CustodyAction(record["action"]),
                target_hash=str(record["target_hash"]),
                user_id=str(record["user_id"]),
                device_id=str(record["device_id"]),
                details=str(record["details"]),
                previous_hash=str(record["previous_hash"]),
                entry_hash=str(record["entry_hash"]),
                integrity_status=IntegrityStatus(record["integrity_status"]),
            )
        except ValueError as e:
            raise CustodyRecordError(f"Invalid custody record {record.get('id')}: {e}") from e


def verify_entries(entries: Tuple[CustodyLogEntry, ...]) -> IntegrityStatus:
    """
    Walk entries in append order.

    CHAIN_BROKEN if an entry doesn't point at the previous entry's hash,
    ENTRY_TAMPERED if an entry's recomputed hash differs from the recorded
    one, else VERIFIED.
    """
    expected_previous = GENESIS_HASH
    for entry in entries:
        if entry.previous_hash != expected_previous:
            return IntegrityStatus.CHAIN_BROKEN
        if entry.compute_hash() != entry.entry_hash:
            return IntegrityStatus.ENTRY_TAMPERED
        expected_previous = entry.entry_hash
    return IntegrityStatus.VERIFIED


# =============================================================================
# Ledger
# =============================================================================

class CustodyLedger:
    """
    Per-case custody ledger.

    All mutation goes through append() under a single lock, so concurrent
    appenders produce one linear chain.
    """

    def __init__(
        self,
        case_id: Optional[str] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.case_id = case_id
        self.settings = settings or get_settings()
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._entries: List[CustodyLogEntry] = []
        self._head = GENESIS_HASH

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def head_hash(self) -> str:
        with self._lock:
            return self._head

    def entries(self) -> Tuple[CustodyLogEntry, ...]:
        """Snapshot of all entries in append order"""
        with self._lock:
            return tuple(self._entries)

    def entries_for_hash(self, target_hash: str) -> List[CustodyLogEntry]:
        """Entries whose target is the given hash"""
        return [e for e in self.entries() if e.target_hash == target_hash]

    def append(
        self,
        action: Union[CustodyAction, str],
        target_hash: str,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None,
        details: str = ""
    ) -> CustodyLogEntry:
        """
        Append an entry.

        Raises:
            CustodyHashError: digest failure; nothing is appended
            ValueError: unknown action name
        """
        action = CustodyAction(action)
        user_id = user_id or self.settings.default_user_id
        device_id = device_id or self.settings.default_device_id

        with self._lock:
            timestamp = self._clock()
            entry_id = str(uuid.uuid4())
            previous_hash = self._head
            entry_hash = compute_content_hash(build_payload(
                entry_id, timestamp, action, target_hash, user_id, device_id, details, previous_hash,
            ))

            if self.settings.custody_verify_on_append:
                status = verify_entries(tuple(self._entries))
            else:
                status = IntegrityStatus.PENDING

            entry = CustodyLogEntry(
                id=entry_id,
                timestamp=timestamp,
                action=action,
                target_hash=target_hash,
                user_id=user_id,
                device_id=device_id,
                details=details,
                previous_hash=previous_hash,
                entry_hash=entry_hash,
                integrity_status=status,
            )
            self._entries.append(entry)
            self._head = entry_hash

        logger.debug(f"Custody [{self.case_id}] {action.value} {target_hash[:16]} -> {entry_hash[:16]}")
        return entry

    def verify(self) -> IntegrityStatus:
        """Walk a snapshot of the chain"""
        status = verify_entries(self.entries())
        if status != IntegrityStatus.VERIFIED:
            logger.error(f"Custody chain for case {self.case_id} failed verification: {status.value}")
        return status

    def verify_and_record(
        self,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None
    ) -> IntegrityStatus:
        """Verify and record the outcome (CHAIN_VERIFIED or TAMPERING_DETECTED)"""
        status = self.verify()
        if status == IntegrityStatus.VERIFIED:
            self.append(
                CustodyAction.CHAIN_VERIFIED, self.head_hash, user_id, device_id,
                f"Chain verified: {len(self)} entries intact",
            )
        else:
            self.log_tampering_detected(
                self.head_hash, user_id, device_id,
                f"Chain verification failed: {status.value}",
            )
        return status

    def reset(self) -> None:
        """Start over for a new case"""
        with self._lock:
            self._entries = []
            self._head = GENESIS_HASH
        logger.info(f"Custody ledger reset for case {self.case_id}")

    # =========================================================================
    # Convenience recorders
    # =========================================================================

    def log_document_upload(
        self,
        document_hash: str,
        file_name: str,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None
    ) -> CustodyLogEntry:
        return self.append(
            CustodyAction.DOCUMENT_UPLOAD, document_hash, user_id, device_id,
            f"Document added to case evidence: {file_name}",
        )

    def log_document_processing(
        self,
        document_hash: str,
        details: str,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None
    ) -> CustodyLogEntry:
        return self.append(
            CustodyAction.DOCUMENT_PROCESSING, document_hash, user_id, device_id,
            f"Document processed: {details}",
        )

    def log_report_generated(
        self,
        report_hash: str,
        details: str = "",
        user_id: Optional[str] = None,
        device_id: Optional[str] = None
    ) -> CustodyLogEntry:
        return self.append(
            CustodyAction.REPORT_GENERATED, report_hash, user_id, device_id,
            f"Forensic report generated{': ' + details if details else ''}",
        )

    def log_seal_verification(
        self,
        document_hash: str,
        passed: bool,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None
    ) -> CustodyLogEntry:
        return self.append(
            CustodyAction.SEAL_VERIFIED, document_hash, user_id, device_id,
            f"Seal verification {'PASSED' if passed else 'FAILED'}",
        )

    def log_tampering_detected(
        self,
        target_hash: str,
        user_id: Optional[str] = None,
        device_id: Optional[str] = None,
        details: str = ""
    ) -> CustodyLogEntry:
        logger.error(f"ALERT: tampering detected on case {self.case_id}: {details}")
        return self.append(
            CustodyAction.TAMPERING_DETECTED, target_hash, user_id, device_id,
            f"ALERT: {details}",
        )

    # =========================================================================
    # Export / import
    # =========================================================================

    def to_records(self) -> List[Dict[str, Any]]:
        """Flat JSON-ready dict per entry"""
        return [e.to_dict() for e in self.entries()]

    def export_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_records(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_records(
        cls,
        records: List[Dict[str, Any]],
        case_id: Optional[str] = None,
        settings: Optional[Settings] = None
    ) -> "CustodyLedger":
        """
        Rebuild a ledger from exported records without rehashing, so a
        tampered export is detected by verify().

        Raises:
            CustodyRecordError: malformed record
        """
        ledger = cls(case_id=case_id, settings=settings)
        entries = [CustodyLogEntry.from_dict(record) for record in records]
        ledger._entries = entries
        ledger._head = entries[-1].entry_hash if entries else GENESIS_HASH
        return ledger

    @classmethod
    def from_json(
        cls,
        data: str,
        case_id: Optional[str] = None,
        settings: Optional[Settings] = None
    ) -> "CustodyLedger":
        try:
            records = json.loads(data)
        except json.JSONDecodeError as e:
            raise CustodyRecordError(f"Custody export is not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise CustodyRecordError("Custody export must be a list of records")
        return cls.from_records(records, case_id=case_id, settings=settings)

    def render_report(self) -> str:
        """Plain-text chain of custody report"""
        entries = self.entries()
        status = verify_entries(entries)
        lines = [
            "CHAIN OF CUSTODY LOG",
            "=" * 60,
            f"Case: {self.case_id or '-'}",
            f"Entries: {len(entries)}",
            f"Integrity: {status.value}",
            f"Head hash: {entries[-1].entry_hash if entries else GENESIS_HASH}",
            "",
        ]
        for number, entry in enumerate(entries, start=1):
            lines.extend([
                f"[{number}] {entry.timestamp.isoformat()} {entry.action.value}",
                f"    User: {entry.user_id}  Device: {entry.device_id}",
                f"    Target: {entry.target_hash}",
                f"    Details: {entry.details}",
                f"    Previous: {entry.previous_hash}",
                f"    Hash: {entry.entry_hash}",
                f"    Status at append: {entry.integrity_status.value}",
                "",
            ])
        return "\n".join(lines)


# =============================================================================
# Registry
# =============================================================================

class LedgerRegistry:
    """Explicit per-case ledger lifecycle"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._lock = threading.Lock()
        self._ledgers: Dict[str, CustodyLedger] = {}

    def get(self, case_id: str) -> CustodyLedger:
        """Existing ledger for the case, created on first use"""
        with self._lock:
            ledger = self._ledgers.get(case_id)
            if ledger is None:
                ledger = CustodyLedger(case_id=case_id, settings=self.settings)
                self._ledgers[case_id] = ledger
            return ledger

    def reset(self, case_id: str) -> CustodyLedger:
        """Replace the case's ledger with an empty one"""
        with self._lock:
            ledger = CustodyLedger(case_id=case_id, settings=self.settings)
            self._ledgers[case_id] = ledger
        logger.info(f"Custody ledger reset for case {case_id}")
        return ledger

    def put(self, case_id: str, ledger: CustodyLedger) -> CustodyLedger:
        """Register an imported ledger for the case, replacing any existing one"""
        with self._lock:
            self._ledgers[case_id] = ledger
        logger.info(f"Custody ledger for case {case_id} replaced ({len(ledger)} entries)")
        return ledger

    def drop(self, case_id: str) -> bool:
        with self._lock:
            return self._ledgers.pop(case_id, None) is not None

    def case_ids(self) -> List[str]:
        with self._lock:
            return list(self._ledgers)


# Module helpers

def append_custody_entry(
    ledger: CustodyLedger,
    action: Union[CustodyAction, str],
    target_hash: str,
    user_id: Optional[str] = None,
    device_id: Optional[str] = None,
    details: str = ""
) -> CustodyLogEntry:
    """Append an entry to the ledger"""
    return ledger.append(action, target_hash, user_id, device_id, details)


def verify_custody_chain(
    ledger: CustodyLedger,
    user_id: Optional[str] = None,
    device_id: Optional[str] = None
) -> IntegrityStatus:
    """
    Verify the ledger's chain.

    A failed check appends a TAMPERING_DETECTED entry; the broken entries
    are left as they are. A passing check appends nothing.
    """
    status = ledger.verify()
    if status != IntegrityStatus.VERIFIED:
        ledger.log_tampering_detected(
            ledger.head_hash, user_id, device_id,
            f"Chain verification failed: {status.value}",
        )
    return status
