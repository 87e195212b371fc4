from __future__ import annotations

from datetime import datetime, timezone
import logging

from opentelemetry import trace

from laborportal.schemas.jobs import Applicant, ApplicantDetails, Job
from laborportal.services.jobs import JobStore, generate_id
from laborportal.services.laborers import DEFAULT_PASSKEY, INVALID_CONTACT, INVALID_PASSKEY, is_valid_contact
from laborportal.services.outcome import ErrorKind, Outcome
from laborportal.services.store import Store, StoreError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

JOB_NOT_FOUND = "Job not found"
MISSING_DETAILS = "Missing required details"
JOB_FILLED = "Job filled"
ALREADY_SIGNED_UP = "You already signed up"


class ApplicantManager:
    def __init__(self, store: Store, *, expected_passkey: str = DEFAULT_PASSKEY) -> None:
        self.store = store
        self.jobs = JobStore(store)
        self.expected_passkey = expected_passkey

    async def apply_to_job_with_details(self, job_id: str, details: ApplicantDetails) -> Outcome[Job]:
        with tracer.start_as_current_span("applicants.apply") as span:
            span.set_attribute("job.id", job_id)
            try:
                return await self._apply(job_id, details)
            except StoreError as exc:
                logger.exception("apply failed for job=%s", job_id)
                return Outcome.failure(ErrorKind.BACKEND, str(exc), code="backend_error")

    async def unapply_from_job_by_contact(self, job_id: str, contact: str) -> Outcome[Job]:
        """Remove every applicant with this contact. Unknown contacts are a no-op."""
        normalized_contact = str(contact or "").strip()
        with tracer.start_as_current_span("applicants.unapply") as span:
            span.set_attribute("job.id", job_id)
            try:
                job = await self.jobs.get_job(job_id)
                if job is None:
                    return Outcome.failure(ErrorKind.NOT_FOUND, JOB_NOT_FOUND, code="job_not_found")
                if not normalized_contact:
                    return Outcome.success(job)
                await self.store.remove_applicants(job_id, normalized_contact)
                job = await self.jobs.get_job(job_id)
            except StoreError as exc:
                logger.exception("unapply failed for job=%s", job_id)
                return Outcome.failure(ErrorKind.BACKEND, str(exc), code="backend_error")

        if job is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, JOB_NOT_FOUND, code="job_not_found")
        return Outcome.success(job)

    async def _apply(self, job_id: str, details: ApplicantDetails) -> Outcome[Job]:
        job = await self.jobs.get_job(job_id)
        if job is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, JOB_NOT_FOUND, code="job_not_found")

        name = details.name.strip()
        contact = details.contact.strip()
        if not name or not contact:
            return Outcome.failure(ErrorKind.VALIDATION, MISSING_DETAILS, code="missing_fields")
        if not is_valid_contact(contact):
            return Outcome.failure(ErrorKind.VALIDATION, INVALID_CONTACT, code="invalid_contact")
        if (details.passkey or "") != self.expected_passkey:
            return Outcome.failure(ErrorKind.VALIDATION, INVALID_PASSKEY, code="invalid_passkey")

        rejection = self._rejection(job, contact)
        if rejection is not None:
            return rejection

        applicant = Applicant(
            id=generate_id("app"),
            name=name,
            contact=contact,
            applied_at=datetime.now(timezone.utc),
        )
        if not await self.store.add_applicant(job_id, applicant):
            # Lost a race with another writer; report against the state now stored.
            current = await self.jobs.get_job(job_id)
            if current is None:
                return Outcome.failure(ErrorKind.NOT_FOUND, JOB_NOT_FOUND, code="job_not_found")
            return self._rejection(current, contact) or Outcome.failure(
                ErrorKind.CONFLICT, JOB_FILLED, code="job_filled"
            )

        updated = await self.jobs.get_job(job_id)
        if updated is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, JOB_NOT_FOUND, code="job_not_found")
        logger.info("applicant added job=%s applicants=%s/%s", job_id, len(updated.applicants), updated.required_count)
        return Outcome.success(updated)

    @staticmethod
    def _rejection(job: Job, contact: str) -> Outcome[Job] | None:
        if job.is_full:
            return Outcome.failure(ErrorKind.CONFLICT, JOB_FILLED, code="job_filled")
        if any(applicant.contact and applicant.contact == contact for applicant in job.applicants):
            return Outcome.failure(ErrorKind.CONFLICT, ALREADY_SIGNED_UP, code="already_signed_up")
        return None
