import os
from datetime import date
from io import BytesIO

# ✅ 앱/설정 임포트 전에 테스트용 환경변수 지정 (.env 보다 우선)
os.environ["DB_DRIVER"] = "sqlite"
os.environ["DB_NAME"] = ":memory:"
os.environ["ENV"] = "stage"

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import configure_sqlite, get_db
from database.init_db import create_tables
from main import app
from models.attendance import AttendanceRecord, AttendanceSession
from models.classes import Class
from models.courses import Course
from models.departments import Department
from models.students import Student
from scripts.import_semesters import seed_semesters


def seed_reference_data(db):
    """학기 · 학과 · 과목 · 분반 · 학생 · 출석 기본 데이터 → 테스트에서 쓸 ID 묶음 반환"""
    seed_semesters(db)

    cs = Department(name="Computer Science", code="CS", faculty_id=1)
    ba = Department(name="Business Administration", code="BA", faculty_id=2)
    db.add_all([cs, ba])
    db.flush()

    cs101 = Course(code="CS101", name="Intro to Programming", credit_hours=3, department_id=cs.id)
    cs102 = Course(code="CS102", name="Lab Seminar", credit_hours=1, department_id=cs.id)
    cs201 = Course(code="CS201", name="Data Structures", credit_hours=10, department_id=cs.id)
    db.add_all([cs101, cs102, cs201])
    db.flush()

    class_a = Class(name="A", course_id=cs101.id, semester="Fall", year=2024)
    class_b = Class(name="B", course_id=cs102.id, semester="Spring", year=2025)
    db.add_all([class_a, class_b])
    db.flush()

    students = {
        "S1001": Student(student_id="S1001", first_name="Amina", last_name="Yusuf", department_id=cs.id),
        "S1002": Student(student_id="S1002", first_name="Bashir", last_name="Ali", department_id=cs.id),
        "S1003": Student(student_id="S1003", first_name="Deqa", last_name="Omar", department_id=cs.id),
        "S1004": Student(student_id="S1004", first_name="Farah", last_name="Hassan", department_id=cs.id),
        "S1005": Student(student_id="S1005", first_name="Guled", last_name="Nur", department_id=cs.id),
        "S1009": Student(student_id="S1009", first_name="Hodan", last_name="Abdi", department_id=cs.id,
                         status="Graduated"),
        "S2001": Student(student_id="S2001", first_name="Idil", last_name="Warsame", department_id=ba.id),
        "1001": Student(student_id="1001", first_name="Jama", last_name="Elmi", department_id=ba.id),
    }
    db.add_all(students.values())
    db.flush()

    # ✅ 분반 A: 두 세션에 걸쳐 S1001, S1002 출석 (S1001은 두 번 → 명단에는 1번)
    first = AttendanceSession(class_id=class_a.id, date=date(2024, 9, 2))
    second = AttendanceSession(class_id=class_a.id, date=date(2024, 9, 9))
    db.add_all([first, second])
    db.flush()
    db.add_all([
        AttendanceRecord(session_id=first.id, student_id=students["S1001"].id, status="Present"),
        AttendanceRecord(session_id=first.id, student_id=students["S1002"].id, status="Absent"),
        AttendanceRecord(session_id=second.id, student_id=students["S1001"].id, status="Present"),
    ])
    db.commit()

    return {
        "departments": {"CS": cs.id, "BA": ba.id},
        "courses": {"CS101": cs101.id, "CS102": cs102.id, "CS201": cs201.id},
        "classes": {"A": class_a.id, "B": class_b.id},
        "students": {code: s.id for code, s in students.items()},
    }


def make_workbook(rows) -> bytes:
    """행 목록(첫 행은 헤더) → xlsx 바이트"""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


IMPORT_HEADER = [
    "Student ID", "First Name", "Last Name",
    "Mid Exam (/20)", "Final Exam (/40)", "Assessment (/10)",
    "Project (/10)", "Assignment (/10)", "Presentation (/10)",
]


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(test_engine)
    create_tables(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def ids(session_factory):
    session = session_factory()
    try:
        return seed_reference_data(session)
    finally:
        session.close()


@pytest.fixture
def db(session_factory, ids):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, ids):
    # 요청마다 새 세션 (서비스 테스트용 db 세션과 함께 쓰지 말 것: 연결 1개를 공유함)
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
