"""Single recruiter identity, provisioned by whoever logs in first.

There is exactly one recruiter credential per store. The first call to
``verify_or_setup_recruiter`` defines it permanently and every later call is
checked against it. This suits a low-stakes demo deployment only.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from opentelemetry import trace

from laborportal.core.hashing import hash_secret, secrets_match
from laborportal.schemas.sessions import RecruiterCredential, Session
from laborportal.services.outcome import ErrorKind, Outcome
from laborportal.services.sessions import SessionManager
from laborportal.services.store import Store, StoreError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RECRUITER_NAME = "Recruiter"
DEFAULT_RECRUITER_USERNAME = "recruiter"
EMAIL_MISMATCH = "Email does not match configured recruiter"
INVALID_PASSWORD = "Invalid password"


@dataclass(slots=True)
class RecruiterLogin:
    session: Session
    setup: bool = False


class RecruiterProvisioning:
    def __init__(self, store: Store, sessions: SessionManager) -> None:
        self.store = store
        self.sessions = sessions

    async def verify_or_setup_recruiter(self, email: str, password: str) -> Outcome[RecruiterLogin]:
        with tracer.start_as_current_span("recruiter.verify_or_setup"):
            try:
                return await self._verify_or_setup(str(email or "").strip(), password or "")
            except StoreError as exc:
                logger.exception("recruiter credential store unavailable")
                return Outcome.failure(ErrorKind.BACKEND, str(exc), code="backend_error")

    async def _verify_or_setup(self, email: str, password: str) -> Outcome[RecruiterLogin]:
        password_hash = hash_secret(password)
        credential = await self.store.get_recruiter_credential()
        if credential is None:
            created = await self.store.create_recruiter_credential(
                RecruiterCredential(email=email, password_hash=password_hash)
            )
            if created:
                logger.warning("recruiter credential provisioned by first login email=%s", email or "<empty>")
                session = self._session_for(email)
                await self.sessions.set_session(session)
                return Outcome.success(RecruiterLogin(session=session, setup=True))
            credential = await self.store.get_recruiter_credential()
            if credential is None:
                return Outcome.failure(ErrorKind.BACKEND, "recruiter credential unavailable", code="backend_error")

        if credential.email and email and email != credential.email:
            return Outcome.failure(ErrorKind.AUTHORIZATION, EMAIL_MISMATCH, code="email_mismatch")
        if not secrets_match(credential.password_hash, password):
            return Outcome.failure(ErrorKind.AUTHORIZATION, INVALID_PASSWORD, code="invalid_password")

        session = self._session_for(credential.email)
        await self.sessions.set_session(session)
        return Outcome.success(RecruiterLogin(session=session))

    @staticmethod
    def _session_for(email: str) -> Session:
        return Session(username=email or DEFAULT_RECRUITER_USERNAME, role="recruiter", name=RECRUITER_NAME)
