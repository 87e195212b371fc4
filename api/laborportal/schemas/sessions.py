from datetime import datetime
from typing import Literal

from pydantic import BaseModel

Role = Literal["recruiter", "laborer"]


class Session(BaseModel):
    username: str
    role: Role
    name: str
    contact: str | None = None


class RecruiterCredential(BaseModel):
    email: str
    password_hash: str


class Laborer(BaseModel):
    contact: str
    name: str
    created_at: datetime


class RecruiterLoginRequest(BaseModel):
    email: str = ""
    password: str


class LaborerLoginRequest(BaseModel):
    name: str = ""
    contact: str = ""
    passkey: str = ""


class SessionOut(BaseModel):
    session_id: str
    session: Session
    setup: bool = False
