"""
services/exam_template.py

분반 성적 입력용 엑셀 템플릿 생성 (일괄 업로드와 같은 컬럼 규약 사용)

명단 우선순위
1) 해당 분반 출석 기록이 있는 학생 (실제 수강생으로 간주)
2) 없으면 학과(기본: 과목 개설 학과, 또는 요청한 학과) 소속 + 기본 상태 학생
   - 단과대학 ID가 주어지면 해당 단과대학 학과로 한정
"""

import logging
from io import BytesIO
from typing import List, NamedTuple, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from config.settings import settings
from models.students import Student as StudentModel
from services import directories
from services.errors import ReferentialError
from services.grade_scale import MARK_COMPONENTS

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TEMPLATE_HEADERS = [
    "Student ID",
    "First Name",
    "Last Name",
    *[f"{c.label} (/{c.max_marks})" for c in MARK_COMPONENTS],
]

COLUMN_WIDTHS = [18, 15, 15, 14, 14, 14, 12, 14, 16]

# 엑셀 시트 이름 최대 길이
MAX_SHEET_TITLE = 31


class TemplateFile(NamedTuple):
    filename: str
    content: bytes


def resolve_roster(
    db: Session,
    class_id: int,
    department_id: Optional[int] = None,
    faculty_id: Optional[int] = None,
    ctx: Optional[directories.ClassContext] = None,
) -> List[StudentModel]:
    # 이미 조회한 분반 정보가 있으면 재사용
    if ctx is None:
        ctx = directories.get_class_context(db, class_id)
    if ctx is None:
        raise ReferentialError("Class not found")

    students = directories.attendance_roster(db, class_id)
    if students:
        return students

    dept_id = department_id if department_id is not None else ctx.department_id
    logger.info(f"No attendance roster for class {class_id}, falling back to department {dept_id}")
    return directories.department_roster(db, dept_id, faculty_id, status=settings.DEFAULT_STUDENT_STATUS)


def generate_template(
    db: Session,
    class_id: int,
    department_id: Optional[int] = None,
    faculty_id: Optional[int] = None,
) -> TemplateFile:
    ctx = directories.get_class_context(db, class_id)
    if ctx is None:
        raise ReferentialError("Class not found")

    students = resolve_roster(db, class_id, department_id, faculty_id, ctx=ctx)

    wb = Workbook()
    ws = wb.active
    ws.title = f"Exam {ctx.course_code} {ctx.semester} {ctx.year}"[:MAX_SHEET_TITLE]

    ws.append(TEMPLATE_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    # 점수 칸은 비워 둠
    for s in students:
        ws.append([s.student_id, s.first_name, s.last_name])

    for idx, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    buf = BytesIO()
    wb.save(buf)

    filename = f"Exam_Template_{ctx.course_code}_{ctx.name}_{ctx.semester}_{ctx.year}.xlsx"
    logger.info(f"Template generated for class {class_id}: {len(students)} students")
    return TemplateFile(filename, buf.getvalue())
