"""
services/directories.py

성적 엔진이 사용하는 외부 협력자 조회 모음
- 학기 레지스트리: 학기 유효성 / 정렬 순서
- 학생 디렉터리: 학번 → 학생, 학과별 명단
- 과목 카탈로그: 과목 → 학점
- 분반 디렉터리: 분반 → (과목, 학기, 연도), 출석 기반 명단
"""

from typing import Dict, List, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.attendance import AttendanceRecord as AttendanceRecordModel
from models.attendance import AttendanceSession as AttendanceSessionModel
from models.classes import Class as ClassModel
from models.courses import Course as CourseModel
from models.departments import Department as DepartmentModel
from models.semesters import Semester as SemesterModel
from models.students import Student as StudentModel


# ✅ 레지스트리가 비어 있을 때 사용할 기본 학기 순서
DEFAULT_SEMESTER_ORDER: Dict[str, int] = {"Spring": 1, "Summer": 2, "Fall": 3}


class ClassContext(NamedTuple):
    class_id: int
    name: str
    course_id: int
    course_code: str
    department_id: Optional[int]
    semester: str
    year: int


# ==========================================================
# [학기 레지스트리]
# ==========================================================
def is_valid_semester(db: Session, name: Optional[str]) -> bool:
    """활성 상태로 등록된 학기 이름인지 확인"""
    if not name or not str(name).strip():
        return False
    semester = (
        db.query(SemesterModel)
        .filter(SemesterModel.name == str(name).strip(), SemesterModel.is_active.is_(True))
        .first()
    )
    return semester is not None


def active_semester_names(db: Session) -> List[str]:
    rows = (
        db.query(SemesterModel.name)
        .filter(SemesterModel.is_active.is_(True))
        .order_by(SemesterModel.sort_order.asc(), SemesterModel.name.asc())
        .all()
    )
    return [r.name for r in rows]


def semester_order(db: Session) -> Dict[str, int]:
    """학기 이름 → sort_order. 등록된 학기가 없으면 기본 순서 사용"""
    rows = db.query(SemesterModel.name, SemesterModel.sort_order).all()
    if not rows:
        return dict(DEFAULT_SEMESTER_ORDER)
    return {r.name: r.sort_order for r in rows}


# ==========================================================
# [학생 디렉터리]
# ==========================================================
def get_student(db: Session, student_id: int) -> Optional[StudentModel]:
    return db.query(StudentModel).filter(StudentModel.id == student_id).first()


def find_student_by_code(db: Session, code: str) -> Optional[StudentModel]:
    """학번(엑셀의 Student ID)으로 학생 조회"""
    return db.query(StudentModel).filter(StudentModel.student_id == code).first()


def department_roster(
    db: Session,
    department_id: Optional[int],
    faculty_id: Optional[int] = None,
    status: str = "Admitted",
) -> List[StudentModel]:
    """학과 소속 + 상태 조건 학생 명단 (단과대학 조건은 선택)"""
    query = db.query(StudentModel).filter(
        StudentModel.department_id == department_id,
        StudentModel.status == status,
    )
    if faculty_id is not None:
        query = query.join(DepartmentModel, DepartmentModel.id == StudentModel.department_id).filter(
            DepartmentModel.faculty_id == faculty_id
        )
    return query.order_by(StudentModel.first_name.asc(), StudentModel.last_name.asc()).all()


# ==========================================================
# [과목 카탈로그]
# ==========================================================
def get_course(db: Session, course_id: int) -> Optional[CourseModel]:
    return db.query(CourseModel).filter(CourseModel.id == course_id).first()


# ==========================================================
# [분반 디렉터리]
# ==========================================================
def get_class_context(db: Session, class_id: int) -> Optional[ClassContext]:
    row = (
        db.query(ClassModel, CourseModel)
        .join(CourseModel, CourseModel.id == ClassModel.course_id)
        .filter(ClassModel.id == class_id)
        .first()
    )
    if row is None:
        return None
    cls, course = row
    return ClassContext(
        class_id=cls.id,
        name=cls.name,
        course_id=course.id,
        course_code=course.code,
        department_id=course.department_id,
        semester=cls.semester,
        year=cls.year,
    )


def attendance_roster(db: Session, class_id: int) -> List[StudentModel]:
    """해당 분반 출석 기록이 1건 이상 있는 학생 (중복 제거)"""
    student_ids = (
        select(AttendanceRecordModel.student_id)
        .join(AttendanceSessionModel, AttendanceSessionModel.id == AttendanceRecordModel.session_id)
        .where(AttendanceSessionModel.class_id == class_id)
        .distinct()
    )
    return (
        db.query(StudentModel)
        .filter(StudentModel.id.in_(student_ids))
        .order_by(StudentModel.first_name.asc(), StudentModel.last_name.asc())
        .all()
    )
