from __future__ import annotations

from datetime import datetime, timezone
import logging
import re

from laborportal.schemas.sessions import Laborer, Session
from laborportal.services.outcome import ErrorKind, Outcome
from laborportal.services.sessions import SessionManager
from laborportal.services.store import Store, StoreError

logger = logging.getLogger(__name__)

DEFAULT_PASSKEY = "1234"
CONTACT_RE = re.compile(r"[0-9]{10}")

MISSING_NAME_OR_CONTACT = "Missing name or contact"
INVALID_PASSKEY = "Invalid passkey"
INVALID_CONTACT = "Contact must be 10 digits"
NAME_MISMATCH = "Contact already registered with a different name"


def normalize_contact(contact: str | None) -> str:
    return str(contact or "").strip()


def is_valid_contact(contact: str | None) -> bool:
    return CONTACT_RE.fullmatch(normalize_contact(contact)) is not None


class LaborerRegistry:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def register_or_verify_laborer(self, name: str, contact: str) -> Outcome[Laborer]:
        normalized_contact = normalize_contact(contact)
        normalized_name = str(name or "").strip()
        if not is_valid_contact(normalized_contact):
            return Outcome.failure(ErrorKind.VALIDATION, INVALID_CONTACT, code="invalid_contact")

        try:
            existing = await self.store.get_laborer(normalized_contact)
            if existing is None:
                existing = await self.store.insert_laborer(
                    Laborer(
                        contact=normalized_contact,
                        name=normalized_name,
                        created_at=datetime.now(timezone.utc),
                    )
                )
                logger.info("registered laborer contact=%s", normalized_contact)
        except StoreError as exc:
            logger.exception("laborer registry unavailable")
            return Outcome.failure(ErrorKind.BACKEND, str(exc), code="backend_error")

        # A concurrent first login may have stored another name for this contact.
        if existing.name and existing.name != normalized_name:
            return Outcome.failure(ErrorKind.CONFLICT, NAME_MISMATCH, code="name_mismatch")
        return Outcome.success(existing)


async def login_laborer(
    sessions: SessionManager,
    registry: LaborerRegistry,
    name: str,
    contact: str,
    passkey: str,
    *,
    expected_passkey: str = DEFAULT_PASSKEY,
) -> Outcome[Session]:
    """Gate on the shared passkey, then bind the session to the contact number.

    The passkey is the same for every laborer; identity comes from the contact.
    """
    if not str(name or "").strip() or not normalize_contact(contact):
        return Outcome.failure(ErrorKind.VALIDATION, MISSING_NAME_OR_CONTACT, code="missing_fields")
    if (passkey or "") != expected_passkey:
        return Outcome.failure(ErrorKind.VALIDATION, INVALID_PASSKEY, code="invalid_passkey")
    if not is_valid_contact(contact):
        return Outcome.failure(ErrorKind.VALIDATION, INVALID_CONTACT, code="invalid_contact")

    registered = await registry.register_or_verify_laborer(name, contact)
    if not registered.ok or registered.value is None:
        return Outcome.failure(registered.kind or ErrorKind.BACKEND, registered.error or "", code=registered.code)

    laborer = registered.value
    session = Session(
        username=laborer.contact,
        role="laborer",
        name=str(name).strip(),
        contact=laborer.contact,
    )
    try:
        await sessions.set_session(session)
    except StoreError as exc:
        logger.exception("session store unavailable")
        return Outcome.failure(ErrorKind.BACKEND, str(exc), code="backend_error")
    return Outcome.success(session)
