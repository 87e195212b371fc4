from datetime import datetime

from pydantic import BaseModel, Field


class Applicant(BaseModel):
    id: str
    name: str
    contact: str = ""
    user: str = ""
    applied_at: datetime


class Job(BaseModel):
    id: str
    title: str
    description: str = ""
    price_per_hour: float = Field(default=0.0, ge=0)
    required_count: int = Field(default=1, ge=0)
    created_by: str
    location: str = ""
    start_datetime: datetime | None = None
    created_at: datetime
    applicants: list[Applicant] = Field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return len(self.applicants) >= self.required_count


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    price_per_hour: float = Field(ge=0)
    required_count: int = Field(ge=1)
    location: str = ""
    start_datetime: datetime | None = None


class ApplicantDetails(BaseModel):
    name: str = ""
    contact: str = ""
    passkey: str = ""
