"""Streamlit dashboard for the welfare workforce reconciliation report."""
from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from workforce_report.data_loader import frame_to_records, load_sample_snapshot
from workforce_report.fields import get_field, normalize_district
from workforce_report.pipeline import build_report
from workforce_report.plots import completion_pie, district_fill_rate, ranking_bar, sub_score_box
from workforce_report.processing import (
    district_summary,
    education_frame,
    population_filter,
    review_frame,
    scores_frame,
)
from workforce_report.settings import ALLOCATION_BASES, DEFAULT_SETTINGS

st.set_page_config(page_title="종사자 현황 분석", layout="wide")

UPLOAD_LABELS = {
    "employees": "종사자 명단",
    "participants": "교육 참여자 명단",
    "institutions": "수행기관 목록",
}


def read_uploaded(file: st.runtime.uploaded_file_manager.UploadedFile | None) -> list | None:
    if file is None:
        return None
    if file.name.endswith(".csv"):
        return frame_to_records(pd.read_csv(file, dtype=str, keep_default_na=False))
    if file.name.endswith((".xlsx", ".xls")):
        return frame_to_records(pd.read_excel(file, dtype=str, keep_default_na=False))
    st.warning("CSV 또는 Excel 파일만 지원합니다")
    return None


def load_inputs() -> dict:
    st.sidebar.header("원본 데이터")
    uploads = {
        kind: read_uploaded(st.sidebar.file_uploader(label, type=["csv", "xlsx", "xls"], key=kind))
        for kind, label in UPLOAD_LABELS.items()
    }
    if uploads["employees"] is None or uploads["institutions"] is None:
        st.sidebar.caption("종사자 명단과 수행기관 목록이 없으면 예시 데이터를 사용합니다.")
        return load_sample_snapshot()
    uploads["participants"] = uploads["participants"] or []
    return uploads


def sidebar_controls(institutions: list) -> dict:
    st.sidebar.header("분석 조건")
    as_of = st.sidebar.date_input("기준일", value=date.today())
    allocation_basis = st.sidebar.selectbox(
        "배정 기준",
        options=list(ALLOCATION_BASES),
        format_func=lambda v: {"course": "수기관리 등록기준", "budget": "예산내시 등록기준"}[v],
    )
    exclude_closed = st.sidebar.checkbox("폐지 기관 제외", value=True)
    district_options = sorted({normalize_district(get_field(row, "district")) for row in institutions} - {""})
    districts = st.sidebar.multiselect("시군구", district_options)
    require_id = st.sidebar.checkbox("생년월일 없는 인원 중복제거 제외", value=False)
    return {
        "as_of": as_of,
        "allocation_basis": allocation_basis,
        "exclude_closed": exclude_closed,
        "districts": districts,
        "require_id": require_id,
    }


def main():
    st.title("노인맞춤돌봄 종사자 현황 및 기관 평가")
    st.markdown(
        """
        세 개의 명단(종사자, 교육 참여자, 수행기관)을 연결해 기관별 충원율,
        인력 균형, 근속 안정성, 전문성, 서비스 효율을 백분위 점수로 비교합니다.
        점수는 현재 선택한 기관 집단 안에서의 상대 순위입니다.
        """
    )

    snapshot = load_inputs()
    controls = sidebar_controls(snapshot["institutions"])
    settings = DEFAULT_SETTINGS.with_overrides(
        allocation_basis=controls["allocation_basis"],
        require_secondary_id=controls["require_id"] or None,
    )
    report = build_report(
        snapshot["employees"],
        snapshot["participants"],
        snapshot["institutions"],
        controls["as_of"],
        settings=settings,
        population_filter=population_filter(controls["exclude_closed"], controls["districts"]),
    )
    diagnostics = report.diagnostics

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("평가 대상 기관", diagnostics.population_size)
    col2.metric("재직 인원", diagnostics.active_count)
    col3.metric("중복 매칭", diagnostics.duplicate_count, help=f"원본 매칭 {diagnostics.raw_match_count}건")
    col4.metric("미매칭 인원", diagnostics.unmatched_count)

    scores = scores_frame(report.scored)
    education = education_frame(report.education)

    left, right = st.columns(2)
    with left:
        st.subheader("종합 순위")
        if scores.empty:
            st.info("배정 인원이 있는 기관이 없습니다.")
        else:
            st.plotly_chart(ranking_bar(scores), use_container_width=True)
    with right:
        st.subheader("세부점수")
        if not scores.empty:
            st.plotly_chart(sub_score_box(scores), use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.subheader("시군구별 충원율")
        st.plotly_chart(district_fill_rate(district_summary(report.metrics)), use_container_width=True)
    with right:
        st.subheader("직무교육 이수")
        if not education.empty:
            st.plotly_chart(completion_pie(education), use_container_width=True)

    st.markdown("### 기관별 점수")
    st.caption("실제 매칭이 없는 기관은 수행기관 목록의 채용인원으로 추정한 값입니다.")
    st.dataframe(scores)

    if diagnostics.excluded_institutions:
        st.markdown("### 배정 인원 0명으로 평가에서 제외된 기관")
        st.write(", ".join(diagnostics.excluded_institutions))

    with st.expander("미매칭 인원 검토"):
        st.dataframe(review_frame(report.unmatched, report.institutions))

    with st.expander("진단 정보"):
        st.json(diagnostics.as_dict())


if __name__ == "__main__":
    main()
