from __future__ import annotations

import asyncio

import pytest

from laborportal.schemas.jobs import ApplicantDetails, Job, JobCreate
from laborportal.services.applicants import ALREADY_SIGNED_UP, JOB_FILLED, JOB_NOT_FOUND, ApplicantManager
from laborportal.services.jobs import JobStore
from laborportal.services.local_store import JOBS_KEY, LocalStore
from laborportal.services.outcome import ErrorKind


def _create_job(store: LocalStore, required_count: int = 2) -> Job:
    fields = JobCreate(title="Loader", price_per_hour=200, required_count=required_count)
    return asyncio.run(JobStore(store).add_job(fields, created_by="r@x.com"))


def _apply(store: LocalStore, job_id: str, name: str, contact: str, passkey: str = "1234"):
    details = ApplicantDetails(name=name, contact=contact, passkey=passkey)
    return asyncio.run(ApplicantManager(store).apply_to_job_with_details(job_id, details))


def test_single_slot_job_rejects_second_applicant(store: LocalStore) -> None:
    job = _create_job(store, required_count=1)

    first = _apply(store, job.id, "A", "1111111111")
    second = _apply(store, job.id, "B", "2222222222")

    assert first.ok is True
    assert first.value is not None
    assert [applicant.contact for applicant in first.value.applicants] == ["1111111111"]
    assert second.ok is False
    assert second.error == JOB_FILLED
    assert second.kind is ErrorKind.CONFLICT


def test_capacity_is_never_exceeded(store: LocalStore) -> None:
    job = _create_job(store, required_count=3)

    outcomes = [_apply(store, job.id, f"Worker {index}", f"{index}" * 10) for index in range(1, 6)]

    assert [outcome.ok for outcome in outcomes] == [True, True, True, False, False]
    assert all(outcome.error == JOB_FILLED for outcome in outcomes[3:])
    stored = asyncio.run(JobStore(store).get_job(job.id))
    assert stored is not None
    assert len(stored.applicants) == 3


def test_duplicate_contact_is_rejected(store: LocalStore) -> None:
    job = _create_job(store)

    assert _apply(store, job.id, "A", "1111111111").ok is True
    duplicate = _apply(store, job.id, "A again", " 1111111111 ")

    assert duplicate.ok is False
    assert duplicate.error == ALREADY_SIGNED_UP
    stored = asyncio.run(JobStore(store).get_job(job.id))
    assert stored is not None
    assert len(stored.applicants) == 1


@pytest.mark.parametrize(
    ("name", "contact", "passkey", "error"),
    [
        ("", "1111111111", "1234", "Missing required details"),
        ("A", "", "bad", "Missing required details"),
        ("A", "11111", "bad", "Contact must be 10 digits"),
        ("A", "1111111111", "bad", "Invalid passkey"),
    ],
)
def test_apply_validation_order(store: LocalStore, name: str, contact: str, passkey: str, error: str) -> None:
    job = _create_job(store)
    before = store.kv.get(JOBS_KEY)

    outcome = _apply(store, job.id, name, contact, passkey)

    assert outcome.ok is False
    assert outcome.error == error
    assert outcome.kind is ErrorKind.VALIDATION
    assert store.kv.get(JOBS_KEY) == before


def test_unknown_job_is_checked_first(store: LocalStore) -> None:
    outcome = _apply(store, "job_missing", "", "", "")

    assert outcome.ok is False
    assert outcome.error == JOB_NOT_FOUND
    assert outcome.kind is ErrorKind.NOT_FOUND


def test_full_job_reports_filled_before_duplicate(store: LocalStore) -> None:
    job = _create_job(store, required_count=1)
    _apply(store, job.id, "A", "1111111111")

    outcome = _apply(store, job.id, "A", "1111111111")

    assert outcome.error == JOB_FILLED


def test_apply_then_unapply_restores_applicants(store: LocalStore) -> None:
    job = _create_job(store, required_count=3)
    _apply(store, job.id, "A", "1111111111")
    before = asyncio.run(JobStore(store).get_job(job.id))

    _apply(store, job.id, "B", "2222222222")
    outcome = asyncio.run(ApplicantManager(store).unapply_from_job_by_contact(job.id, "2222222222"))

    assert outcome.ok is True
    assert outcome.value is not None
    assert before is not None
    assert outcome.value.applicants == before.applicants
    assert all(applicant.contact != "2222222222" for applicant in outcome.value.applicants)


def test_unapply_is_idempotent(store: LocalStore) -> None:
    job = _create_job(store)
    _apply(store, job.id, "A", "1111111111")
    manager = ApplicantManager(store)

    async def run() -> tuple:
        return (
            await manager.unapply_from_job_by_contact(job.id, "9999999999"),
            await manager.unapply_from_job_by_contact(job.id, "1111111111"),
            await manager.unapply_from_job_by_contact(job.id, "1111111111"),
        )

    absent, removed, again = asyncio.run(run())

    assert absent.ok is True and absent.value is not None
    assert len(absent.value.applicants) == 1
    assert removed.ok is True and removed.value is not None
    assert removed.value.applicants == []
    assert again.ok is True and again.value is not None
    assert again.value.applicants == []


def test_unapply_unknown_job_fails(store: LocalStore) -> None:
    outcome = asyncio.run(ApplicantManager(store).unapply_from_job_by_contact("job_missing", "1111111111"))

    assert outcome.ok is False
    assert outcome.error == JOB_NOT_FOUND


def test_legacy_string_applicants_count_toward_capacity() -> None:
    store = LocalStore()
    store.kv.write_json(
        JOBS_KEY,
        [
            {
                "id": "job_legacy",
                "title": "Painter",
                "pricePerHour": 100,
                "requiredCount": 2,
                "createdBy": "r@x.com",
                "createdAt": "2024-01-01T00:00:00.000Z",
                "applicants": ["old-user", {"name": "Dan", "contact": "3333333333"}],
            }
        ],
    )

    outcome = _apply(store, "job_legacy", "New", "4444444444")

    assert outcome.error == JOB_FILLED


def test_lost_race_is_reported_from_current_state(store: LocalStore, monkeypatch: pytest.MonkeyPatch) -> None:
    job = _create_job(store, required_count=1)
    manager = ApplicantManager(store)
    original_add = store.add_applicant

    async def racing_add(job_id, applicant):
        await original_add(job_id, applicant.model_copy(update={"id": "app_other", "contact": "9999999999"}))
        return await original_add(job_id, applicant)

    monkeypatch.setattr(store, "add_applicant", racing_add)
    details = ApplicantDetails(name="A", contact="1111111111", passkey="1234")
    outcome = asyncio.run(manager.apply_to_job_with_details(job.id, details))

    assert outcome.ok is False
    assert outcome.error == JOB_FILLED
