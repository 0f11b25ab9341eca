from sqlalchemy import Column, Integer, String
from database.db import Base

class Department(Base):
    __tablename__ = "departments"  # 학과 정보 테이블

    id = Column(Integer, primary_key=True, index=True)     # 학과 고유 ID (Primary Key)
    name = Column(String(100), nullable=False)             # 학과 이름
    code = Column(String(20))                              # 학과 코드 (예: CS)
    faculty_id = Column(Integer, index=True)               # 소속 단과대학 ID
