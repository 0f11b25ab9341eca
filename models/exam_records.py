from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ExamRecord(Base):
    __tablename__ = "exam_records"  # 과목별 성적 기록 (학생 · 과목 · 학기 · 연도 당 1건)

    # ✅ 자연키 유일성은 DB 제약조건으로 보장 (동시 업로드 시에도 중복 생성 불가)
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "semester", "year", name="uq_exam_record_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)   # 학생 ID
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)     # 과목 ID
    semester = Column(String(50), nullable=False)                                         # 학기 이름
    year = Column(Integer, nullable=False)                                                # 연도

    # ✅ 세부 점수 (만점: 20 / 40 / 10 / 10 / 10 / 10)
    mid_exam = Column(Float, default=0)
    final_exam = Column(Float, default=0)
    assessment = Column(Float, default=0)
    project = Column(Float, default=0)
    assignment = Column(Float, default=0)
    presentation = Column(Float, default=0)

    # ✅ 파생 값
    total_marks = Column(Float)                 # 총점 (/100)
    grade = Column(String(5))                   # 등급 (예: A, B+)
    grade_points = Column(Float)                # 평점 (예: 4.0)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    student = relationship("Student")
    course = relationship("Course")
