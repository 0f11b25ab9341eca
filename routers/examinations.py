from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from schemas.common import SuccessEnvelope
from schemas.exam_records import (
    ExamRecord as ExamRecordSchema,
    ExamRecordCreate,
    ExamReport,
    ImportResponse,
    MarkSetPatch,
)
from schemas.gpa import StudentGPA
from services import exam_records
from services.exam_import import import_class_marks
from services.exam_report import build_exam_report
from services.exam_template import XLSX_MEDIA_TYPE, generate_template
from services.gpa import compute_student_gpa

router = APIRouter(prefix="/examinations", tags=["examinations"])


# ==========================================================
# [1단계] 정적 라우터 (업로드 / 템플릿 / GPA / 리포트)
# ==========================================================

# ✅ [IMPORT] 분반 성적 엑셀 일괄 업로드
# - 행 단위 오류는 모아서 반환, 유효한 행은 모두 저장
@router.post("/import", response_model=ImportResponse)
async def import_marks(
    class_id: int = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    content = await file.read()
    batch = import_class_marks(db, class_id, content)
    preview = batch.errors[: settings.IMPORT_ERROR_PREVIEW]
    return ImportResponse(
        created=batch.created,
        updated=batch.updated,
        errors=batch.errors,
        error_preview=preview,
        has_more_errors=len(batch.errors) > len(preview),
    )


# ✅ [TEMPLATE] 분반 명단이 채워진 빈 성적 입력 엑셀
@router.get("/template")
def download_template(
    class_id: int,
    department_id: Optional[int] = None,
    faculty_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    template = generate_template(db, class_id, department_id, faculty_id)
    return Response(
        content=template.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{template.filename}"'},
    )


# ✅ [GPA] 학생별 학기 GPA + 누적 GPA
@router.get("/gpa", response_model=SuccessEnvelope[StudentGPA])
def get_student_gpa(student_id: int, db: Session = Depends(get_db)):
    return SuccessEnvelope(data=compute_student_gpa(db, student_id))


# ✅ [REPORT] 조건별 성적 목록 + 등급 분포
@router.get("/report", response_model=SuccessEnvelope[ExamReport])
def get_exam_report(
    department_id: Optional[int] = None,
    class_id: Optional[int] = None,
    semester: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    report = build_exam_report(db, department_id, class_id, semester, year)
    return SuccessEnvelope(data=report)


# ==========================================================
# [2단계] CRUD 기본 라우터
# ==========================================================

# ✅ [READ] 성적 목록 (학생 / 과목 / 학기 / 연도 필터)
@router.get("/", response_model=SuccessEnvelope[list[ExamRecordSchema]])
def read_exam_records(
    student_id: Optional[int] = None,
    course_id: Optional[int] = None,
    semester: Optional[str] = Query(default=None),
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    records = exam_records.list_records(db, student_id, course_id, semester, year)
    return SuccessEnvelope(data=[ExamRecordSchema.model_validate(r) for r in records])


# ✅ [CREATE] 성적 단건 입력
# - 같은 학생/과목/학기/연도 기록이 있으면 409 (수정은 PATCH 사용)
@router.post("/", response_model=SuccessEnvelope[ExamRecordSchema])
def create_exam_record(payload: ExamRecordCreate, db: Session = Depends(get_db)):
    marks = payload.model_dump(exclude={"student_id", "course_id", "semester", "year"})
    record = exam_records.create_record(
        db, payload.student_id, payload.course_id, payload.semester, payload.year, marks
    )
    db.commit()
    record = exam_records.get_record(db, record.id)
    return SuccessEnvelope(data=ExamRecordSchema.model_validate(record), message="Exam record created")


# ==========================================================
# [3단계] 완전 동적 라우터
# ==========================================================

# ✅ [READ] 성적 상세
@router.get("/{record_id}", response_model=SuccessEnvelope[ExamRecordSchema])
def read_exam_record(record_id: int, db: Session = Depends(get_db)):
    record = exam_records.get_record(db, record_id)
    return SuccessEnvelope(data=ExamRecordSchema.model_validate(record))


# ✅ [UPDATE] 세부 점수 수정 (보낸 항목만)
@router.patch("/{record_id}", response_model=SuccessEnvelope[ExamRecordSchema])
def update_exam_record(record_id: int, patch: MarkSetPatch, db: Session = Depends(get_db)):
    record = exam_records.update_record_marks(db, record_id, patch.model_dump(exclude_none=True))
    db.commit()
    db.refresh(record)
    return SuccessEnvelope(data=ExamRecordSchema.model_validate(record), message="Exam record updated")


# ✅ [DELETE] 성적 삭제
@router.delete("/{record_id}", response_model=SuccessEnvelope[dict])
def delete_exam_record(record_id: int, db: Session = Depends(get_db)):
    exam_records.delete_record(db, record_id)
    db.commit()
    return SuccessEnvelope(data={"record_id": record_id}, message="Exam record deleted")
