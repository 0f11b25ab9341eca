from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ==========================================================
# [점수 묶음]
# ==========================================================
class MarkSet(BaseModel):
    """검증을 통과한 세부 점수 6종 (누락 항목은 0)"""
    mid_exam: float = 0          # 중간고사 (/20)
    final_exam: float = 0        # 기말고사 (/40)
    assessment: float = 0        # 평가 (/10)
    project: float = 0           # 프로젝트 (/10)
    assignment: float = 0        # 과제 (/10)
    presentation: float = 0      # 발표 (/10)

    model_config = ConfigDict(frozen=True)


class MarkSetPatch(BaseModel):
    """수정 요청: 보낸 항목만 바꾸고 나머지는 기존 값 유지"""
    mid_exam: Optional[float] = None
    final_exam: Optional[float] = None
    assessment: Optional[float] = None
    project: Optional[float] = None
    assignment: Optional[float] = None
    presentation: Optional[float] = None


# ==========================================================
# [입력용 스키마]
# ==========================================================
class ExamRecordCreate(MarkSetPatch):
    student_id: int                      # 내부 학생 ID
    course_id: int                       # 과목 ID
    semester: str                        # 학기 이름 (semesters 테이블에 등록된 값)
    year: int                            # 연도


# ==========================================================
# [출력용 스키마]
# ==========================================================
class StudentBrief(BaseModel):
    id: int
    student_id: str                      # 학번
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class CourseBrief(BaseModel):
    id: int
    code: str
    name: str
    credit_hours: int

    model_config = ConfigDict(from_attributes=True)


class ExamRecord(BaseModel):
    id: int
    student_id: int
    course_id: int
    semester: str
    year: int
    mid_exam: Optional[float] = None
    final_exam: Optional[float] = None
    assessment: Optional[float] = None
    project: Optional[float] = None
    assignment: Optional[float] = None
    presentation: Optional[float] = None
    total_marks: Optional[float] = None
    grade: Optional[str] = None
    grade_points: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    student: Optional[StudentBrief] = None
    course: Optional[CourseBrief] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================================================
# [일괄 업로드 결과]
# ==========================================================
class ImportBatch(BaseModel):
    """엑셀 1회 업로드 결과 (저장하지 않음)"""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list, description='행 단위 오류 (예: "Row 3: Student "S-9" not found")')


class ImportResponse(BaseModel):
    created: int
    updated: int
    errors: list[str]
    error_preview: list[str]             # 화면에 먼저 보여줄 앞부분 오류
    has_more_errors: bool


# ==========================================================
# [성적 리포트]
# ==========================================================
class ExamReportSummary(BaseModel):
    total: int
    by_grade: dict[str, int]
    avg_grade_points: float


class ExamReport(BaseModel):
    records: list[ExamRecord]
    summary: ExamReportSummary
