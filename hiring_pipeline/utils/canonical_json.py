"""
Deterministic JSON serialization utilities.

Used for hashing evidence submissions into idempotency keys.
"""

import hashlib
import json
from datetime import date, datetime
from typing import Any
from uuid import UUID


def _canonical_default(value: Any) -> Any:
    """Serialize unsupported types into stable JSON-friendly values."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes):
        return hashlib.sha256(value).hexdigest()
    raise TypeError(f"Type {type(value)} not serializable")


def canonical_dumps(value: Any) -> str:
    """Return deterministic JSON with sorted keys and tight separators."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        default=_canonical_default,
        ensure_ascii=True,
    )


def canonical_hash(value: Any) -> str:
    """Compute SHA-256 hash of canonical JSON representation."""
    return hashlib.sha256(canonical_dumps(value).encode("utf-8")).hexdigest()


def submission_key(application_id: UUID, milestone: str, evidence: bytes) -> str:
    """Digest identifying one evidence submission for one milestone."""
    return canonical_hash(
        {
            "application_id": application_id,
            "milestone": milestone.strip().lower(),
            "evidence_sha256": evidence,
        }
    )
