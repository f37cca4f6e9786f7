"""
Pytest configuration and shared fixtures.
"""

from datetime import date
from typing import Any, Dict, List

import pytest

from workforce_report.models import Institution


@pytest.fixture
def as_of() -> date:
    """Snapshot date shared by the roster fixtures."""
    return date(2024, 6, 30)


@pytest.fixture
def registry() -> List[Institution]:
    """Three institutions in two districts."""
    return [
        Institution(code="A001", name="창원시노인종합복지관", district="창원시"),
        Institution(code="B002", name="마산재가노인복지센터", district="창원시"),
        Institution(code="C003", name="진주시노인통합지원센터", district="진주시"),
    ]


@pytest.fixture
def institution_records() -> List[Dict[str, Any]]:
    """Registry rows with Korean headers, one closed with zero allocation."""
    return [
        {
            "기관코드": "A48120001",
            "수행기관명": "창원시노인종합복지관",
            "시군구": "창원시",
            "배정인원_전담사회복지사": "1",
            "배정인원_생활지원사": "16",
            "채용인원_전담사회복지사": "1",
            "채용인원_생활지원사": "14",
            "서비스제공인원": "240",
        },
        {
            "기관코드": "A48120002",
            "수행기관명": "마산재가노인복지센터",
            "시군구": "창원시",
            "배정인원_전담사회복지사": "1",
            "배정인원_생활지원사": "5",
            "채용인원_전담사회복지사": "1",
            "채용인원_생활지원사": "4",
            "서비스제공인원": "60",
        },
        {
            "기관코드": "A48170001",
            "수행기관명": "진주시노인통합지원센터",
            "시군구": "진주시",
            "배정인원_전담사회복지사": "2",
            "배정인원_생활지원사": "20",
            "채용인원_전담사회복지사": "2",
            "채용인원_생활지원사": "18",
            "서비스제공인원": "300",
        },
        {
            "기관코드": "A48880001",
            "수행기관명": "합천군노인복지관",
            "시군구": "합천군",
            "배정인원_전담사회복지사": "0",
            "배정인원_생활지원사": "0",
            "폐지여부": "폐지",
        },
    ]


@pytest.fixture
def employee_records() -> List[Dict[str, Any]]:
    """Employee roster: one terminated, one unparseable termination, one unmatched."""
    return [
        {
            "이름": "김민수",
            "생년월일": "1980-03-02",
            "직군": "선임전담사회복지사",
            "경력구분": "경력",
            "입사일": "2018-03-01",
            "퇴사일": "",
            "기관코드": "A48120001",
            "수행기관명": "창원 노인복지관",
            "시군구": "창원시",
        },
        {
            "이름": "이영희",
            "생년월일": "1975-11-20",
            "직군": "생활지원사",
            "입사일": "2020-04-01",
            "퇴사일": "N/A",
            "수행기관명": "창원 노인복지관",
            "시군구": "창원시",
        },
        {
            "이름": "정미경",
            "생년월일": "1972-09-09",
            "직군": "생활지원사",
            "입사일": "2019-05-13",
            "퇴사일": "2024-03-31",
            "수행기관명": "마산재가노인복지센터",
            "시군구": "창원시",
        },
        {
            "이름": "최지은",
            "생년월일": "1990-01-30",
            "직군": "전담사회복지사",
            "입사일": "2022-07-01",
            "수행기관명": "마산재가노인복지센터",
            "시군구": "창원시",
        },
        {
            "이름": "임재현",
            "직군": "생활지원사",
            "입사일": "2015-03-01",
            "수행기관명": "해운대 청소년수련관",
            "시군구": "부산",
        },
    ]


@pytest.fixture
def participant_records() -> List[Dict[str, Any]]:
    """Education roster overlapping three employees."""
    return [
        {
            "회원명": "김민수",
            "생년월일": "1980-03-02",
            "직군": "선임전담사회복지사",
            "소속": "창원시노인종합복지관",
            "시군구": "창원시",
            "기초직무": "수료",
            "심화교육": "수료",
        },
        {
            "회원명": "이영희",
            "생년월일": "1975-11-20",
            "직군": "생활지원사",
            "소속": "창원시노인종합복지관",
            "기초직무": "진행중",
        },
        {
            "회원명": "최지은",
            "생년월일": "1990-01-30",
            "직군": "전담사회복지사",
            "소속": "마산재가노인복지센터",
            "기초직무": "수료",
        },
    ]
