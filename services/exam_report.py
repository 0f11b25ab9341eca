"""
services/exam_report.py

성적 리포트: 조건(학과 / 분반 / 학기 / 연도)에 맞는 성적 기록과 등급 분포, 평균 평점
- 분반이 주어지면 해당 분반의 (과목, 학기, 연도)로 한정하고 학과·학기·연도 조건은 무시
- 없는 분반이면 ReferentialError
"""

from collections import Counter
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from models.courses import Course as CourseModel
from models.exam_records import ExamRecord as ExamRecordModel
from models.students import Student as StudentModel
from schemas.exam_records import ExamRecord as ExamRecordSchema, ExamReport, ExamReportSummary
from services import directories
from services.errors import ReferentialError


def build_exam_report(
    db: Session,
    department_id: Optional[int] = None,
    class_id: Optional[int] = None,
    semester: Optional[str] = None,
    year: Optional[int] = None,
) -> ExamReport:
    query = (
        db.query(ExamRecordModel)
        .join(StudentModel, StudentModel.id == ExamRecordModel.student_id)
        .join(CourseModel, CourseModel.id == ExamRecordModel.course_id)
        .options(joinedload(ExamRecordModel.student), joinedload(ExamRecordModel.course))
    )

    if class_id is not None:
        ctx = directories.get_class_context(db, class_id)
        if ctx is None:
            raise ReferentialError("Class not found")
        query = query.filter(
            ExamRecordModel.course_id == ctx.course_id,
            ExamRecordModel.semester == ctx.semester,
            ExamRecordModel.year == ctx.year,
        )
    else:
        if department_id is not None:
            query = query.filter(CourseModel.department_id == department_id)
        # "all"은 전체 학기
        if semester and semester != "all":
            query = query.filter(ExamRecordModel.semester == semester)
        if year is not None:
            query = query.filter(ExamRecordModel.year == year)

    records = query.order_by(
        ExamRecordModel.year.desc(), ExamRecordModel.semester.asc(), StudentModel.first_name.asc()
    ).all()

    by_grade = Counter(r.grade or "N/A" for r in records)
    avg = sum((r.grade_points or 0) for r in records) / len(records) if records else 0.0

    return ExamReport(
        records=[ExamRecordSchema.model_validate(r) for r in records],
        summary=ExamReportSummary(total=len(records), by_grade=dict(by_grade), avg_grade_points=round(avg, 2)),
    )
