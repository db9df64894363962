"""Canonical entities produced by the response normalizers."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class BirthDate(BaseModel):
    year: int | None = None
    month: int | None = None
    day: int | None = None


class Profile(BaseModel):
    """Identity record of the authenticated user."""

    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    profile_image_url: str | None = None
    location: str | None = None
    dob: BirthDate | None = None
    contact_info: dict[str, str] = Field(default_factory=dict)
    provider_id: str | None = None
    raw_response: str | None = Field(default=None, repr=False)

    @property
    def full_name(self) -> str | None:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or None


class Contact(BaseModel):
    """One connection of the authenticated user."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    profile_url: str | None = None
    profile_image_url: str | None = None
    raw_response: str | None = Field(default=None, repr=False)

    @property
    def display_name(self) -> str | None:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or None


class Feed(BaseModel):
    """Timeline entry; created_at is None when the provider date was unparseable."""

    created_at: dt.datetime | None = None
    message: str | None = None
    author_id: str | None = None
    author_name: str | None = None
    screen_name: str | None = None


class Position(BaseModel):
    id: str | None = None
    title: str | None = None
    company_name: str | None = None
    start_year: int | None = None
    start_month: int | None = None
    end_year: int | None = None
    end_month: int | None = None
    is_current: bool = False


class Education(BaseModel):
    school_name: str | None = None
    degree: str | None = None
    field_of_study: str | None = None
    start_year: int | None = None
    end_year: int | None = None


class Career(BaseModel):
    """Professional history of the authenticated user."""

    id: str | None = None
    headline: str | None = None
    positions: list[Position] = Field(default_factory=list)
    educations: list[Education] = Field(default_factory=list)
