from sqlalchemy.orm import Session
from database.db import SessionLocal
from database.init_db import create_tables
from models.semesters import Semester as SemesterModel  # ✅ 모델 import

# ✅ 기본 학기 (연도 내 순서)
DEFAULT_SEMESTERS = [
    {"name": "Spring", "sort_order": 1},
    {"name": "Summer", "sort_order": 2},
    {"name": "Fall", "sort_order": 3},
]

def seed_semesters(db: Session = None) -> int:
    """기본 학기 등록 (이미 있으면 순서만 갱신) → 새로 만든 개수 반환"""
    own_session = db is None
    db = db or SessionLocal()
    created = 0
    try:
        for s in DEFAULT_SEMESTERS:
            semester = db.query(SemesterModel).filter(SemesterModel.name == s["name"]).first()
            if semester:
                semester.sort_order = s["sort_order"]
            else:
                db.add(SemesterModel(name=s["name"], sort_order=s["sort_order"], is_active=True))
                created += 1
        db.commit()
    finally:
        if own_session:
            db.close()
    return created

if __name__ == "__main__":
    create_tables()
    count = seed_semesters()
    print(f"✅ 기본 학기 등록 완료 (신규 {count}건)")
