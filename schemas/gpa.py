from typing import Optional

from pydantic import BaseModel, Field

from schemas.exam_records import ExamRecord, StudentBrief


class SemesterGPA(BaseModel):
    semester: str
    year: int
    gpa: float                                   # 소수 둘째 자리 반올림
    total_credits: int
    total_grade_points: float                    # Σ(평점 × 학점)
    course_count: int


class GPASummary(BaseModel):
    cumulative_gpa: float = 0.0                  # 전체 기록의 학점 가중 평균 (학기 GPA의 단순 평균 아님)
    total_credits: int = 0
    semesters: list[SemesterGPA] = Field(default_factory=list)   # 연도 → 학기 순서


class StudentGPA(BaseModel):
    student: StudentBrief
    department_id: Optional[int] = None
    records: list[ExamRecord]
    gpa: GPASummary
