"""
database/init_db.py

- 모든 모델 모듈을 임포트해 매퍼 레지스트리에 등록한 뒤 테이블을 생성합니다.
- relationship("Course") 처럼 문자열로 참조하는 관계가 해석되려면 먼저 이 모듈이 로드되어야 합니다.
"""

from sqlalchemy.engine import Engine

from database.db import Base, engine as default_engine

# ✅ 매퍼 등록용 임포트 (사용하지 않아도 반드시 필요)
from models import attendance, classes, courses, departments, exam_records, semesters, students  # noqa: F401


def create_tables(bind: Engine = None) -> None:
    Base.metadata.create_all(bind=bind or default_engine)


if __name__ == "__main__":
    create_tables()
    print("✅ 테이블 생성 완료")
