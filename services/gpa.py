"""
services/gpa.py

학생 GPA 집계 (저장하지 않고 조회할 때마다 계산)
- (학기, 연도)별로 묶어 학점 가중 평균: Σ(평점 × 학점) / Σ학점, 소수 둘째 자리 반올림
- 학기 정렬: 연도 오름차순 → 학기 순서(레지스트리 sort_order) 오름차순, 모르는 학기는 0
- 누적 GPA는 전체 기록의 학점 가중 평균 (학기별 GPA의 단순 평균이 아님)
"""

from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from models.exam_records import ExamRecord as ExamRecordModel
from schemas.gpa import GPASummary, SemesterGPA, StudentGPA
from schemas.exam_records import ExamRecord as ExamRecordSchema, StudentBrief
from services import directories
from services.errors import ReferentialError


class GradedCourse(NamedTuple):
    semester: str
    year: int
    grade_points: Optional[float]
    credit_hours: int


def _weighted(total_grade_points: float, total_credits: float) -> float:
    return round(total_grade_points / total_credits, 2) if total_credits > 0 else 0.0


def calculate_gpa(
    records: Iterable[GradedCourse],
    semester_order: Optional[Mapping[str, int]] = None,
) -> GPASummary:
    order = directories.DEFAULT_SEMESTER_ORDER if semester_order is None else semester_order

    groups: Dict[Tuple[str, int], List[GradedCourse]] = {}
    for r in records:
        groups.setdefault((r.semester, r.year), []).append(r)

    ordered = sorted(groups.items(), key=lambda item: (item[0][1], order.get(item[0][0], 0)))

    semesters = []
    cumulative_credits = 0
    cumulative_points = 0.0
    for (semester, year), items in ordered:
        credits = sum(i.credit_hours for i in items)
        points = sum((i.grade_points or 0) * i.credit_hours for i in items)
        semesters.append(SemesterGPA(
            semester=semester,
            year=year,
            gpa=_weighted(points, credits),
            total_credits=credits,
            total_grade_points=round(points, 2),
            course_count=len(items),
        ))
        cumulative_credits += credits
        cumulative_points += points

    return GPASummary(
        cumulative_gpa=_weighted(cumulative_points, cumulative_credits),
        total_credits=cumulative_credits,
        semesters=semesters,
    )


def compute_student_gpa(db: Session, student_id: int) -> StudentGPA:
    student = directories.get_student(db, student_id)
    if student is None:
        raise ReferentialError("Student not found")

    records = (
        db.query(ExamRecordModel)
        .options(joinedload(ExamRecordModel.course))
        .filter(ExamRecordModel.student_id == student_id)
        .order_by(ExamRecordModel.year.desc(), ExamRecordModel.semester.asc())
        .all()
    )

    summary = calculate_gpa(
        (GradedCourse(r.semester, r.year, r.grade_points, r.course.credit_hours) for r in records),
        directories.semester_order(db),
    )

    return StudentGPA(
        student=StudentBrief.model_validate(student),
        department_id=student.department_id,
        records=[ExamRecordSchema.model_validate(r) for r in records],
        gpa=summary,
    )
