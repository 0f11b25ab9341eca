from sqlalchemy import Column, Integer, String, Boolean
from database.db import Base

class Semester(Base):
    __tablename__ = "semesters"  # 학기 등록 테이블 (Spring, Summer, Fall ...)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)     # 학기 이름
    sort_order = Column(Integer, nullable=False, default=0)    # 연도 내 정렬 순서 (GPA 학기 정렬에 사용)
    is_active = Column(Boolean, nullable=False, default=True)  # 사용 여부
