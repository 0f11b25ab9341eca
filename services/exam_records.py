"""
services/exam_records.py

성적 기록 저장 엔진 (단건 입력과 엑셀 일괄 업로드가 공유하는 유일한 쓰기 경로)

- 총점/등급/평점 계산 후 자연키 (student_id, course_id, semester, year)로 저장
- 저장은 "INSERT 시도 → 유일 제약 위반 시 정책에 따라 UPDATE 또는 거부" 한 번의 조건부 쓰기
  · 조회 후 생성 순서로 처리하지 않으므로 동시 업로드에서도 중복 행이 생기지 않음
  · 중복 여부의 최종 판단은 DB의 uq_exam_record_key 제약조건
- 커밋은 호출자 책임 (라우터 또는 일괄 업로드 파이프라인)
"""

import enum
import logging
from typing import Any, List, Mapping, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.exam_records import ExamRecord as ExamRecordModel
from models.students import Student as StudentModel
from schemas.exam_records import MarkSet
from services import directories
from services.errors import ConflictError, ReferentialError, ValidationError
from services.grade_scale import MARK_KEYS, calculate_total, resolve_grade
from services.mark_validator import validate_marks

logger = logging.getLogger(__name__)


class ConflictPolicy(str, enum.Enum):
    REJECT = "reject"          # 단건 생성: 같은 키가 있으면 ConflictError
    OVERWRITE = "overwrite"    # 일괄 업로드: 같은 키가 있으면 덮어쓰기


class UpsertResult(NamedTuple):
    record: ExamRecordModel
    created: bool              # True: 신규 생성 / False: 기존 기록 갱신


def derive_values(marks: MarkSet) -> dict:
    """세부 점수 + 총점/등급/평점"""
    values = marks.model_dump()
    total = calculate_total(values)
    info = resolve_grade(total)
    values.update(total_marks=total, grade=info.grade, grade_points=info.grade_points)
    return values


# ==========================================================
# [저장 엔진]
# ==========================================================
def upsert_record(
    db: Session,
    student_id: int,
    course_id: int,
    semester: str,
    year: int,
    marks: MarkSet,
    on_conflict: ConflictPolicy = ConflictPolicy.OVERWRITE,
) -> UpsertResult:
    semester = (semester or "").strip()

    # ✅ 등록되지 않은 학기는 계산 전에 거부 (GPA 집계에 임의 학기명이 섞이지 않도록)
    if not directories.is_valid_semester(db, semester):
        raise ValidationError("Invalid semester. Use a semester from the Semesters settings.")

    if directories.get_student(db, student_id) is None:
        raise ReferentialError(f"Student {student_id} not found")
    if directories.get_course(db, course_id) is None:
        raise ReferentialError(f"Course {course_id} not found")

    key = {"student_id": student_id, "course_id": course_id, "semester": semester, "year": year}
    values = derive_values(marks)

    # ✅ 1차: INSERT (SAVEPOINT 안에서 실행 → 실패해도 바깥 트랜잭션은 유지)
    record = ExamRecordModel(**key, **values)
    try:
        with db.begin_nested():
            db.add(record)
            db.flush()
        return UpsertResult(record, True)
    except IntegrityError as exc:
        conflict = exc

    if on_conflict == ConflictPolicy.REJECT:
        raise ConflictError(
            f"Exam record for student {student_id} / course {course_id} / {semester} {year} already exists"
        )

    # ✅ 2차: 같은 키의 기존 기록을 제자리에서 갱신 (id 유지)
    existing = db.query(ExamRecordModel).filter_by(**key).first()
    if existing is None:
        # 자연키 충돌이 아닌 무결성 오류 (FK 등)
        raise conflict

    for field, value in values.items():
        setattr(existing, field, value)
    db.flush()
    return UpsertResult(existing, False)


def create_record(
    db: Session,
    student_id: int,
    course_id: int,
    semester: str,
    year: int,
    raw_marks: Mapping[str, Any],
) -> ExamRecordModel:
    """단건 수동 입력: 중복 키는 거부 (수정은 update_record_marks 사용)"""
    if not directories.is_valid_semester(db, semester):
        raise ValidationError("Invalid semester. Use a semester from the Semesters settings.")
    marks = validate_marks(raw_marks)
    result = upsert_record(db, student_id, course_id, semester, year, marks, on_conflict=ConflictPolicy.REJECT)
    logger.info(f"Exam record created: id={result.record.id} student={student_id} course={course_id} {semester} {year}")
    return result.record


# ==========================================================
# [조회 / 수정 / 삭제]
# ==========================================================
def get_record(db: Session, record_id: int) -> ExamRecordModel:
    record = (
        db.query(ExamRecordModel)
        .options(joinedload(ExamRecordModel.student), joinedload(ExamRecordModel.course))
        .filter(ExamRecordModel.id == record_id)
        .first()
    )
    if record is None:
        raise ReferentialError("Exam record not found")
    return record


def list_records(
    db: Session,
    student_id: Optional[int] = None,
    course_id: Optional[int] = None,
    semester: Optional[str] = None,
    year: Optional[int] = None,
) -> List[ExamRecordModel]:
    query = (
        db.query(ExamRecordModel)
        .join(StudentModel, StudentModel.id == ExamRecordModel.student_id)
        .options(joinedload(ExamRecordModel.student), joinedload(ExamRecordModel.course))
    )
    if student_id is not None:
        query = query.filter(ExamRecordModel.student_id == student_id)
    if course_id is not None:
        query = query.filter(ExamRecordModel.course_id == course_id)
    if semester:
        query = query.filter(ExamRecordModel.semester == semester)
    if year is not None:
        query = query.filter(ExamRecordModel.year == year)
    return query.order_by(
        ExamRecordModel.year.desc(), ExamRecordModel.semester.asc(), StudentModel.first_name.asc()
    ).all()


def update_record_marks(db: Session, record_id: int, patch: Mapping[str, Any]) -> ExamRecordModel:
    """명시적 수정: 보낸 항목만 교체, 나머지는 저장된 값 유지 → 재검증 후 총점/등급 재계산"""
    record = get_record(db, record_id)

    merged = {key: (getattr(record, key) or 0) for key in MARK_KEYS}
    merged.update({key: value for key, value in patch.items() if key in MARK_KEYS and value is not None})
    marks = validate_marks(merged)

    for field, value in derive_values(marks).items():
        setattr(record, field, value)
    db.flush()
    logger.info(f"Exam record updated: id={record.id} total={record.total_marks} grade={record.grade}")
    return record


def delete_record(db: Session, record_id: int) -> None:
    record = get_record(db, record_id)
    db.delete(record)
    db.flush()
    logger.info(f"Exam record deleted: id={record_id}")
