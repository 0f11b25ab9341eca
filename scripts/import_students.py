import csv
from typing import Iterable, Mapping
from sqlalchemy.orm import Session
from database.db import SessionLocal
from models.students import Student as StudentModel  # ✅ 모델 import

CSV_PATH = "data/students.csv"  # ✅ 파일 경로

def load_students(db: Session, rows: Iterable[Mapping[str, str]]) -> int:
    """CSV 행 → 학생 (학번 기준, 이미 있는 학번은 건너뜀)"""
    added = 0
    for row in rows:
        code = row["student_id"].strip()
        if db.query(StudentModel).filter(StudentModel.student_id == code).first():
            continue
        db.add(StudentModel(
            student_id=code,                                      # 학번
            first_name=row["first_name"].strip(),                 # 이름
            last_name=row["last_name"].strip(),                   # 성
            department_id=int(row["department_id"]) if row.get("department_id") else None,  # 소속 학과
            status=(row.get("status") or "Admitted").strip(),     # 학적 상태
        ))
        added += 1
    db.commit()
    return added

def migrate_students():
    db: Session = SessionLocal()

    with open(CSV_PATH, newline="", encoding="utf-8-sig") as csvfile:
        added = load_students(db, csv.DictReader(csvfile))

    db.close()
    print(f"✅ 학생 정보 CSV → DB 마이그레이션 완료 ({added}명)")

if __name__ == "__main__":
    migrate_students()
