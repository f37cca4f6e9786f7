"""Field aliasing and value normalisation for roster and registry records."""
from __future__ import annotations

import math
import unicodedata
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd
import regex

# Ordered aliases per logical field. The first present alias wins.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "name": ("name", "이름", "성명", "회원명", "수강생명"),
    "resident_id": ("residentId", "resident_id", "주민번호", "birthDate", "birth_date", "생년월일"),
    "job_type": ("jobType", "job_type", "직군", "직종", "직무구분"),
    "hire_date": ("hireDate", "hire_date", "입사일", "입사일자", "근무시작일"),
    "termination_date": (
        "terminationDate",
        "termination_date",
        "resignDate",
        "퇴사일",
        "퇴사일자",
        "근무종료일",
    ),
    "institution_code": ("institutionCode", "institution_code", "기관코드"),
    "legacy_institution_code": ("legacyInstitutionCode", "수행기관코드", "code"),
    "institution_name": ("institution", "institutionName", "institution_name", "기관명", "수행기관명", "소속"),
    "district": ("district", "시군구", "시·군·구", "지자체"),
    "region": ("region", "시도", "시·도", "광역시", "광역명"),
    "status": ("status", "상태", "재직상태", "employmentStatus", "memberStatus"),
    "career_type": ("careerType", "career_type", "경력구분", "경력"),
    "basic_education": ("basicTraining", "basicEducationStatus", "기초직무", "기초교육"),
    "advanced_education": ("advancedEducation", "advancedEducationStatus", "심화교육", "finalCompletion", "최종수료"),
    "code": ("code", "institutionCode", "기관코드"),
    "allocated_course_social_workers": (
        "allocatedCourseSocialWorkers",
        "allocatedSocialWorkers",
        "배정인원_전담사회복지사",
    ),
    "allocated_course_life_support": (
        "allocatedCourseLifeSupport",
        "allocatedLifeSupport",
        "배정인원_생활지원사",
    ),
    "allocated_budget_social_workers": (
        "allocatedBudgetSocialWorkers",
        "allocatedSocialWorkersGov",
        "예산배정_전담사회복지사",
    ),
    "allocated_budget_life_support": (
        "allocatedBudgetLifeSupport",
        "allocatedLifeSupportGov",
        "예산배정_생활지원사",
    ),
    "hired_social_workers": ("hiredSocialWorkers", "채용인원_전담사회복지사"),
    "hired_life_support": ("hiredLifeSupport", "채용인원_생활지원사"),
    "served_persons": ("servedPersons", "served_persons", "서비스제공인원", "이용자수"),
    "closed": ("closed", "isClosed", "폐지여부", "운영상태"),
}

DATE_FIELDS = {"hire_date", "termination_date"}
BOOLEAN_FIELDS = {"closed"}
DATE_ABSENT_MARKERS = {"", "-"}
TRUE_MARKERS = {"true", "y", "yes", "1", "o", "폐지", "종료", "폐쇄", "closed"}

SPACE_PATTERN = regex.compile(r"[\s\u00A0\u2000-\u200F\u202F\u205F\u3000]+")
DATE_PATTERN = regex.compile(r"^(\d{4})\s*[-./년]\s*(\d{1,2})\s*[-./월]\s*(\d{1,2})\s*[.일]?$")
COMPACT_DATE_PATTERN = regex.compile(r"^(\d{4})(\d{2})(\d{2})$")
TIME_SUFFIX_PATTERN = regex.compile(r"(?:T|\s+)\d{1,2}:\d{2}.*$")
CODE_STRIP_PATTERN = regex.compile(r"[^A-Z0-9]")
RESIDENT_ID_STRIP_PATTERN = regex.compile(r"[-./\s]")
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_SERIAL_RANGE = (20000, 80000)

NAME_REWRITES: List[Tuple[regex.Pattern, str]] = [
    (regex.compile(r"^\(광역\)|^광역|\*?광역지원기관"), ""),
    (regex.compile(r"\((?:재|사|주)\)|재단법인|사단법인|주식회사"), ""),
    (regex.compile(r"종합사회복지관"), "사회복지관"),
    (regex.compile(r"노인종합복지관"), "노인복지관"),
    (regex.compile(r"장애인종합복지관"), "장애인복지관"),
    (regex.compile(r"통합지원센터"), "지원센터"),
    (regex.compile(r"경상남도|경남도"), "경남"),
    (regex.compile(r"[().,]"), ""),
]

DISTRICTS = (
    "창원시", "진주시", "통영시", "사천시", "김해시", "밀양시", "거제시", "양산시",
    "의령군", "함안군", "창녕군", "고성군", "남해군", "하동군", "산청군", "함양군",
    "거창군", "합천군",
)
DISTRICT_SUFFIX_PATTERN = regex.compile(r"(시|군|구)$")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def is_present(value: Any, field: Optional[str] = None) -> bool:
    """Return ``True`` when ``value`` counts as present for ``field``."""
    if _is_missing(value):
        return False
    if field in DATE_FIELDS and isinstance(value, str) and value.strip() in DATE_ABSENT_MARKERS:
        return False
    return True


def field_default(field: str) -> Any:
    return False if field in BOOLEAN_FIELDS else ""


def get_field(record: Mapping[str, Any], field: str, default: Any = None) -> Any:
    """Return the first present alias value of a logical field.

    Parameters
    ----------
    record:
        Raw row as loaded from a spreadsheet; any alias may be missing.
    field:
        Logical field name, a key of :data:`FIELD_ALIASES`.
    default:
        Value returned when no alias is present. When ``None`` the field's
        own default is used: ``False`` for boolean fields, ``""`` otherwise.
    """
    for alias in FIELD_ALIASES.get(field, (field,)):
        if alias in record and is_present(record[alias], field):
            value = record[alias]
            return value.strip() if isinstance(value, str) else value
    return field_default(field) if default is None else default


def get_all(record: Mapping[str, Any], field: str) -> Dict[str, str]:
    """Return every present alias value of ``field`` keyed by alias."""
    found: Dict[str, str] = {}
    for alias in FIELD_ALIASES.get(field, (field,)):
        if alias in record and is_present(record[alias], field):
            found[alias] = str(record[alias]).strip()
    return found


def get_flag(record: Mapping[str, Any], field: str) -> bool:
    value = get_field(record, field)
    if isinstance(value, bool):
        return value
    return normalize_text(value).casefold() in TRUE_MARKERS


def normalize_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    text = unicodedata.normalize("NFC", str(value))
    return SPACE_PATTERN.sub(" ", text).strip()


def normalize_code(value: Any) -> str:
    """Upper-case the code and keep only ASCII letters and digits."""
    return CODE_STRIP_PATTERN.sub("", normalize_text(value).upper())


def normalize_institution_name(value: Any) -> str:
    """Unify legal-form markers, facility spellings and punctuation."""
    text = normalize_text(value)
    for pattern, replacement in NAME_REWRITES:
        text = pattern.sub(replacement, text)
    return SPACE_PATTERN.sub(" ", text).strip()


def compact(value: Any) -> str:
    """Drop all whitespace, keeping every other character."""
    return SPACE_PATTERN.sub("", normalize_text(value))


def extract_district(text: Any) -> str:
    """Find a district name embedded in free text, full name first."""
    name = normalize_text(text)
    if not name:
        return ""
    for district in DISTRICTS:
        if district in name:
            return district
    for district in DISTRICTS:
        if DISTRICT_SUFFIX_PATTERN.sub("", district) in name:
            return district
    return ""


def normalize_district(value: Any) -> str:
    """Map short district spellings such as ``창원`` onto ``창원시``."""
    text = compact(value)
    if not text:
        return ""
    for district in DISTRICTS:
        if text == district or text == DISTRICT_SUFFIX_PATTERN.sub("", district):
            return district
    return text


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date, returning ``None`` when nothing sensible is found."""
    if not is_present(value, "termination_date"):
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if EXCEL_SERIAL_RANGE[0] <= value <= EXCEL_SERIAL_RANGE[1]:
            return EXCEL_EPOCH + timedelta(days=int(value))
        value = str(int(value))
    text = TIME_SUFFIX_PATTERN.sub("", normalize_text(value))
    match = DATE_PATTERN.match(text) or COMPACT_DATE_PATTERN.match(text)
    if match is None:
        if text.isdigit() and EXCEL_SERIAL_RANGE[0] <= int(text) <= EXCEL_SERIAL_RANGE[1]:
            return EXCEL_EPOCH + timedelta(days=int(text))
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_resident_id(value: Any) -> str:
    """Canonical resident id: ``YYYYMMDD`` for birth dates, separators dropped otherwise."""
    if not is_present(value):
        return ""
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.strftime("%Y%m%d")
    return RESIDENT_ID_STRIP_PATTERN.sub("", normalize_text(value))


def strip_text(value: Any) -> str:
    """Trim surrounding whitespace only; inner spacing is kept."""
    if _is_missing(value):
        return ""
    return str(value).strip()


def parse_count(value: Any) -> int:
    """Parse a non-negative headcount; junk and negatives become ``0``."""
    if _is_missing(value) or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = regex.sub(r"[^0-9.\-]", "", str(value))
        try:
            number = float(cleaned)
        except ValueError:
            return 0
    if math.isnan(number) or number < 0:
        return 0
    return int(number)
