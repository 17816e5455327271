"""
Shared error types.

Analysis functions never raise for malformed input (they return empty
results); only custody hashing and ledger import fail loudly.
"""


class ForensicError(Exception):
    """Base class for engine errors surfaced to callers."""

    code = "forensic_error"


class CustodyHashError(ForensicError):
    """Raised when the SHA-512 digest cannot be computed. The append is aborted."""

    code = "custody_hash_error"


class CustodyRecordError(ForensicError):
    """Raised when an exported custody record is malformed (missing or invalid fields)."""

    code = "custody_record_error"
