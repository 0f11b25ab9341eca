from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

class Class(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)      # 분반 고유 ID (PK)
    name = Column(String(50), nullable=False)               # 분반 이름 (예: A, B)
    semester = Column(String(50), nullable=False)           # 개설 학기 (semesters.name)
    year = Column(Integer, nullable=False)                  # 개설 연도

    # ==========================================================
    # [관계 설정]
    # ==========================================================

    # ✅ 개설 과목 ID (FK)
    #    - courses.id를 참조
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)

    # ✅ 과목과의 관계 (N:1)
    #    - 한 과목은 학기/연도별로 여러 분반을 가질 수 있음
    course = relationship("Course")
