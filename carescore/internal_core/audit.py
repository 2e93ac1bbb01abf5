from __future__ import annotations

import datetime as _dt

from .assessment_store import AssessmentRepository
from .contracts import AuditEvent, AuditEventType


def _ts_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat()


def _sanitize_detail(detail: str, max_chars: int) -> str:
    # Details carry ids and counts only; free-text notes never belong here.
    detail = (detail or "").replace("\n", " ").strip()
    if len(detail) > max_chars:
        detail = detail[:max_chars] + "..."
    return detail


def log_event(
    store: AssessmentRepository,
    subject_id: str,
    event_type: AuditEventType,
    code: str,
    detail: str,
    max_chars: int = 200,
) -> None:
    event = AuditEvent(
        ts_iso=_ts_iso(),
        subject_id=subject_id,
        type=event_type,
        code=code,
        detail=_sanitize_detail(detail, max_chars),
    )
    store.append_audit_event(event)
