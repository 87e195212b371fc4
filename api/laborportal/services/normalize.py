"""Canonical shapes for persisted jobs and applicants.

Stored applicants come in several shapes: bare strings from the earliest local
data, camelCase objects from the local store and snake_case rows from the
relational store. Everything read from a ``Store`` passes through here before
any filter or comparison runs.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import hashlib
from typing import Any

from laborportal.schemas.jobs import Applicant, Job

EPOCH = datetime.fromtimestamp(0, timezone.utc)
UNKNOWN_NAME = "Unknown"


def normalize_applicant(raw: Any, *, fallback_id: str, fallback_time: datetime) -> Applicant:
    if isinstance(raw, str):
        return Applicant(id=fallback_id, name=raw, user=raw, contact="", applied_at=fallback_time)

    if isinstance(raw, Mapping):
        user = _text(raw.get("user"))
        applied_at = _first_datetime(raw, "applied_at", "appliedAt", "created_at", "createdAt")
        return Applicant(
            id=_text(raw.get("id")) or fallback_id,
            name=_text(raw.get("name")) or user or UNKNOWN_NAME,
            user=user,
            contact=_text(raw.get("contact")),
            applied_at=applied_at or fallback_time,
        )

    return Applicant(id=fallback_id, name=UNKNOWN_NAME, applied_at=fallback_time)


def normalize_applicants(raw: Any, *, job_id: str, fallback_time: datetime) -> list[Applicant]:
    if not isinstance(raw, list):
        return []
    return [
        normalize_applicant(item, fallback_id=legacy_applicant_id(job_id, index), fallback_time=fallback_time)
        for index, item in enumerate(raw)
    ]


def normalize_job(raw: Mapping[str, Any]) -> Job | None:
    """Return the canonical job, or ``None`` when the record has no usable id."""
    job_id = _text(raw.get("id"))
    if not job_id:
        return None

    created_at = _first_datetime(raw, "created_at", "createdAt") or EPOCH
    return Job(
        id=job_id,
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        price_per_hour=max(0.0, _coerce_float(_first(raw, "price_per_hour", "pricePerHour")) or 0.0),
        required_count=max(0, _coerce_int(_first(raw, "required_count", "requiredCount")) or 0),
        created_by=_text(_first(raw, "created_by", "createdBy")),
        location=_text(raw.get("location")),
        start_datetime=_first_datetime(raw, "start_datetime", "startDateTime"),
        created_at=created_at,
        applicants=normalize_applicants(raw.get("applicants"), job_id=job_id, fallback_time=created_at),
    )


def legacy_applicant_id(job_id: str, index: int) -> str:
    digest = hashlib.sha256(f"{job_id}:{index}".encode("utf-8")).hexdigest()
    return f"legacy_{digest[:16]}"


def coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _first_datetime(raw: Mapping[str, Any], *keys: str) -> datetime | None:
    for key in keys:
        parsed = coerce_datetime(raw.get(key))
        if parsed is not None:
            return parsed
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_int(value: Any) -> int | None:
    number = _coerce_float(value)
    if number is None:
        return None
    try:
        return int(number)
    except (OverflowError, ValueError):
        return None
