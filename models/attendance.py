from sqlalchemy import Column, Integer, String, Date, ForeignKey
from database.db import Base

class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"  # 분반별 출석 세션 (수업 1회)

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)   # 분반 ID
    date = Column(Date)                                                                # 수업 일자


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"  # 세션별 학생 출결

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    status = Column(String(20))                                                        # 출결 상태 (예: Present, Absent)
