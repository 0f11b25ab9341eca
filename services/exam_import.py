"""
services/exam_import.py

분반 단위 엑셀 성적 일괄 업로드

처리 순서
1) 분반 → (과목, 학기, 연도) 확인. 없으면 배치 전체 중단
2) 헤더 행에서 컬럼 위치 탐지 (대소문자 무시, 부분 일치)
   - Student ID 컬럼은 필수, 점수 컬럼은 없으면 모든 행에서 0
3) 행 단위 처리: 빈 행/빈 학번은 건너뜀, 학생 없음·범위 초과·저장 실패는 행 오류로 기록 후 계속
4) 생성/갱신 건수와 행 오류 목록 반환 (행 번호는 엑셀 기준, 헤더가 1행)

한 행의 실패가 나머지 행 저장을 막지 않음 (행마다 SAVEPOINT)
"""

import logging
import math
import re
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import load_workbook
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import settings
from schemas.exam_records import ImportBatch
from services import directories
from services.errors import GradingError, StructuralError, ValidationError
from services.exam_records import ConflictPolicy, upsert_record
from services.mark_validator import collect_mark_errors

logger = logging.getLogger(__name__)


# ==========================================================
# [컬럼 탐지 규칙] 헤더 문구(정규식) → 필드
# ==========================================================
STUDENT_ID_FIELD = "student_id"

COLUMN_PATTERNS = (
    (re.compile(r"student\s*id", re.IGNORECASE), STUDENT_ID_FIELD),
    (re.compile(r"mid", re.IGNORECASE), "mid_exam"),
    (re.compile(r"final", re.IGNORECASE), "final_exam"),
    (re.compile(r"assessment", re.IGNORECASE), "assessment"),
    (re.compile(r"project", re.IGNORECASE), "project"),
    (re.compile(r"assignment", re.IGNORECASE), "assignment"),
    (re.compile(r"presentation", re.IGNORECASE), "presentation"),
)


def detect_columns(header: Sequence[Any]) -> Dict[str, int]:
    """필드 → 컬럼 인덱스 (패턴마다 가장 왼쪽 컬럼 1개, 못 찾은 필드는 제외)"""
    labels = ["" if cell is None else str(cell) for cell in header]
    columns = {}
    for pattern, field in COLUMN_PATTERNS:
        for idx, label in enumerate(labels):
            if pattern.search(label):
                columns[field] = idx
                break
    return columns


# ==========================================================
# [셀 값 변환]
# ==========================================================
def _cell(row: Sequence[Any], idx: Optional[int]) -> Any:
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def parse_number(value: Any) -> float:
    """관대한 숫자 변환: 비어 있거나 숫자가 아니면 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return 0.0 if math.isnan(number) else number


def normalize_student_code(value: Any) -> str:
    """엑셀이 숫자로 저장한 학번(1001.0)은 정수 문자열로"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_blank(row: Sequence[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in row)


def read_rows(content: bytes) -> List[tuple]:
    """첫 번째 시트의 모든 행 (값만)"""
    try:
        wb = load_workbook(BytesIO(content), data_only=True)
    except Exception as e:
        logger.error(f"[EXAM IMPORT] Failed to load workbook: {e}")
        raise StructuralError(f"Invalid Excel file: {e}")
    try:
        ws = wb.worksheets[0]
        return [tuple(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


# ==========================================================
# [일괄 업로드]
# ==========================================================
def import_class_marks(db: Session, class_id: int, spreadsheet: bytes) -> ImportBatch:
    ctx = directories.get_class_context(db, class_id)
    if ctx is None:
        raise StructuralError("Class not found")
    if not directories.is_valid_semester(db, ctx.semester):
        raise ValidationError(f'Class semester "{ctx.semester}" is not a recognized semester')

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    if len(spreadsheet) > max_bytes:
        raise StructuralError(f"File exceeds {settings.MAX_UPLOAD_MB} MB upload limit")

    logger.info(
        f"[EXAM IMPORT] Starting - class_id={class_id} course_id={ctx.course_id} "
        f"{ctx.semester} {ctx.year}, file_size={len(spreadsheet)} bytes"
    )

    rows = read_rows(spreadsheet)
    if len(rows) < 2:
        raise StructuralError("Excel file must have a header row and at least one student row")

    columns = detect_columns(rows[0])
    logger.info(f"[EXAM IMPORT] Detected columns: {columns}")
    if STUDENT_ID_FIELD not in columns:
        raise StructuralError("Excel must contain a 'Student ID' column")

    mark_columns = {field: idx for field, idx in columns.items() if field != STUDENT_ID_FIELD}
    batch = ImportBatch()

    for row_number, row in enumerate(rows[1:], start=2):
        if not row or _is_blank(row):
            continue

        code = normalize_student_code(_cell(row, columns[STUDENT_ID_FIELD]))
        if not code:
            batch.skipped += 1
            continue

        student = directories.find_student_by_code(db, code)
        if student is None:
            _row_error(batch, row_number, f'Student "{code}" not found')
            continue

        raw = {field: parse_number(_cell(row, idx)) for field, idx in mark_columns.items()}
        marks, problems = collect_mark_errors(raw)
        if problems:
            for problem in problems:
                _row_error(batch, row_number, problem)
            continue

        try:
            with db.begin_nested():
                result = upsert_record(
                    db, student.id, ctx.course_id, ctx.semester, ctx.year, marks,
                    on_conflict=ConflictPolicy.OVERWRITE,
                )
        except GradingError as e:
            _row_error(batch, row_number, e.message)
            continue
        except SQLAlchemyError as e:
            logger.exception(f"[EXAM IMPORT] Row {row_number} write failed")
            _row_error(batch, row_number, f"Could not save record ({e.__class__.__name__})")
            continue

        if result.created:
            batch.created += 1
        else:
            batch.updated += 1

    db.commit()
    logger.info(
        f"[EXAM IMPORT] Done - class_id={class_id} created={batch.created} updated={batch.updated} "
        f"skipped={batch.skipped} errors={len(batch.errors)}"
    )
    return batch


def _row_error(batch: ImportBatch, row_number: int, message: str) -> None:
    error = f"Row {row_number}: {message}"
    logger.warning(f"[EXAM IMPORT] {error}")
    batch.errors.append(error)
