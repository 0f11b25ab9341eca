from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base

class Course(Base):
    __tablename__ = "courses"  # 교과목 정보 테이블

    id = Column(Integer, primary_key=True, index=True)                 # 과목 고유 ID (Primary Key)
    code = Column(String(20), nullable=False)                          # 과목 코드 (예: CS101)
    name = Column(String(100), nullable=False)                         # 과목 이름
    credit_hours = Column(Integer, nullable=False, default=3)          # 학점 (GPA 가중치)
    department_id = Column(Integer, ForeignKey("departments.id"))      # 개설 학과 ID
