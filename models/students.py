from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(Integer, primary_key=True, index=True)                          # 내부 학생 ID (Primary Key)
    student_id = Column(String(30), unique=True, nullable=False, index=True)    # 학번 (엑셀의 "Student ID" 컬럼과 대응)
    first_name = Column(String(100), nullable=False)                            # 이름
    last_name = Column(String(100), nullable=False)                             # 성
    department_id = Column(Integer, ForeignKey("departments.id"))               # 소속 학과 ID
    status = Column(String(20), default="Admitted")                             # 학적 상태 (예: Admitted, Graduated)
