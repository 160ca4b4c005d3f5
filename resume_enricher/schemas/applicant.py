from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_YEAR_RE = re.compile(r"(?:19|20)\d{2}")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float, bool)):
        return str(value)
    return ""


def _first_mapping(value: Any) -> Any:
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                return item
        return {}
    if value is None:
        return {}
    return value


class Education(BaseModel):
    model_config = ConfigDict(extra="ignore")

    degree: str = ""
    branch: str = ""
    institution: str = ""
    year: int | None = None

    @field_validator("degree", "branch", "institution", mode="before")
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("year", mode="before")
    @classmethod
    def _validate_year(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else None
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.isdecimal():
                return int(stripped)
            years = _YEAR_RE.findall(stripped)
            return int(years[-1]) if years else None
        return None


class Experience(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_title: str = ""
    company: str = ""

    @field_validator("job_title", "company", mode="before")
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        return _as_text(value)


class ExtractedResume(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    education: Education = Field(default_factory=Education)
    experience: Experience = Field(default_factory=Experience)
    skills: list[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator("name", "email", "summary", mode="before")
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("education", "experience", mode="before")
    @classmethod
    def _validate_section(cls, value: Any) -> Any:
        section = _first_mapping(value)
        return section if isinstance(section, dict) else {}

    @field_validator("skills", mode="before")
    @classmethod
    def _validate_skills(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items: list[Any] = value.split(",")
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            return []
        skills = [_as_text(item) for item in items]
        return [skill for skill in skills if skill]


class EnrichRequest(BaseModel):
    raw_text: str | None = None
    url: str | None = None


class EnrichResponse(BaseModel):
    message: str


class SearchRequest(BaseModel):
    name: str | None = None


class ApplicantOut(BaseModel):
    id: int
    name: str
    email: str
    education: Education
    experience: Experience
    skills: list[str]
    summary: str
    created_at: str


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    JWT: str
