"""Person and institution records built from raw spreadsheet rows."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from workforce_report.fields import (
    extract_district,
    get_all,
    get_field,
    get_flag,
    normalize_code,
    normalize_district,
    normalize_resident_id,
    normalize_text,
    parse_count,
    strip_text,
)

SENIOR_CASE_WORKER = "senior-case-worker"
CASE_WORKER = "case-worker"
LIFE_SUPPORT_WORKER = "life-support-worker"
OTHER_JOB = "other"
JOB_TYPES = (SENIOR_CASE_WORKER, CASE_WORKER, LIFE_SUPPORT_WORKER, OTHER_JOB)
SOCIAL_WORKER_JOBS = {SENIOR_CASE_WORKER, CASE_WORKER}

SOURCE_EMPLOYEE = "employee"
SOURCE_PARTICIPANT = "participant"

EDUCATION_FIELDS = ("basic_education", "advanced_education")


def classify_job_type(value: Any) -> str:
    """Map a raw job title onto the fixed job-type vocabulary."""
    text = normalize_text(value).replace(" ", "").casefold()
    if not text:
        return OTHER_JOB
    if text in JOB_TYPES:
        return text
    if "선임" in text and ("전담" in text or "사회복지사" in text):
        return SENIOR_CASE_WORKER
    if "전담" in text or "사회복지사" in text:
        return CASE_WORKER
    if "생활지원" in text:
        return LIFE_SUPPORT_WORKER
    return OTHER_JOB


@dataclass(frozen=True)
class Person:
    name: str
    job_type: str = OTHER_JOB
    hire_date: Any = ""
    termination_date: Any = ""
    institution_code: str = ""
    legacy_institution_code: str = ""
    institution_name_raw: str = ""
    district_raw: str = ""
    resident_id: str = ""
    status_marker: str = ""
    career_type: str = ""
    education_status_fields: Mapping[str, str] = field(default_factory=dict)
    source: str = SOURCE_EMPLOYEE
    row: int = 0

    @property
    def is_social_worker(self) -> bool:
        return self.job_type in SOCIAL_WORKER_JOBS

    @property
    def is_life_support(self) -> bool:
        return self.job_type == LIFE_SUPPORT_WORKER

    @property
    def identity_key(self) -> tuple:
        """Deduplication key: name plus resident id when one is known."""
        if self.resident_id:
            return (self.name, self.resident_id)
        return (self.name,)


@dataclass(frozen=True)
class Institution:
    code: str
    name: str
    district: str = ""
    region: str = ""
    allocated_course_social_workers: int = 0
    allocated_course_life_support: int = 0
    allocated_budget_social_workers: int = 0
    allocated_budget_life_support: int = 0
    hired_social_workers: int = 0
    hired_life_support: int = 0
    served_persons: int = 0
    closed: bool = False

    def allocation(self, basis: str = "course") -> tuple:
        """Return ``(social_workers, life_support)`` for the allocation basis."""
        if basis == "budget":
            return self.allocated_budget_social_workers, self.allocated_budget_life_support
        return self.allocated_course_social_workers, self.allocated_course_life_support


def person_from_record(
    record: Mapping[str, Any],
    source: str = SOURCE_EMPLOYEE,
    row: int = 0,
) -> Person:
    institution_name = strip_text(get_field(record, "institution_name"))
    district = get_field(record, "district") or extract_district(institution_name)
    education: Dict[str, str] = {}
    for logical in EDUCATION_FIELDS:
        education.update(get_all(record, logical))
    return Person(
        name=normalize_text(get_field(record, "name")),
        job_type=classify_job_type(get_field(record, "job_type")),
        hire_date=get_field(record, "hire_date"),
        termination_date=get_field(record, "termination_date"),
        institution_code=normalize_code(get_field(record, "institution_code")),
        legacy_institution_code=normalize_code(get_field(record, "legacy_institution_code")),
        institution_name_raw=institution_name,
        district_raw=normalize_district(district),
        resident_id=normalize_resident_id(get_field(record, "resident_id")),
        status_marker=normalize_text(get_field(record, "status")),
        career_type=normalize_text(get_field(record, "career_type")),
        education_status_fields=education,
        source=source,
        row=row,
    )


def institution_from_record(record: Mapping[str, Any]) -> Institution:
    name = strip_text(get_field(record, "institution_name") or get_field(record, "name"))
    district = get_field(record, "district") or extract_district(name)
    return Institution(
        code=normalize_code(get_field(record, "code")),
        name=name,
        district=normalize_district(district),
        region=normalize_text(get_field(record, "region")),
        allocated_course_social_workers=parse_count(get_field(record, "allocated_course_social_workers")),
        allocated_course_life_support=parse_count(get_field(record, "allocated_course_life_support")),
        allocated_budget_social_workers=parse_count(get_field(record, "allocated_budget_social_workers")),
        allocated_budget_life_support=parse_count(get_field(record, "allocated_budget_life_support")),
        hired_social_workers=parse_count(get_field(record, "hired_social_workers")),
        hired_life_support=parse_count(get_field(record, "hired_life_support")),
        served_persons=parse_count(get_field(record, "served_persons")),
        closed=get_flag(record, "closed"),
    )


def build_institutions(records) -> tuple:
    """Build institutions keeping the first row per code.

    Returns ``(institutions, duplicate_codes)``; rows without a code are kept
    since they can still be matched by name.
    """
    institutions = []
    seen = set()
    duplicates = []
    for record in records:
        institution = record if isinstance(record, Institution) else institution_from_record(record)
        if institution.code and institution.code in seen:
            duplicates.append(institution.code)
            continue
        if institution.code:
            seen.add(institution.code)
        institutions.append(institution)
    return institutions, duplicates


def build_persons(records, source: str = SOURCE_EMPLOYEE) -> list:
    persons = []
    for row, record in enumerate(records):
        if isinstance(record, Person):
            persons.append(record)
        else:
            persons.append(person_from_record(record, source=source, row=row))
    return persons
