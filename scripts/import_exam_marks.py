"""
엑셀 성적 파일을 명령줄에서 바로 업로드 (웹 화면의 /v1/examinations/import 와 같은 파이프라인)

사용법: python -m scripts.import_exam_marks <class_id> <xlsx 경로>
"""

import sys
from pathlib import Path

from sqlalchemy.orm import Session
from database.db import SessionLocal
from database.init_db import create_tables
from services.exam_import import import_class_marks
from services.errors import GradingError


def run(class_id: int, path: str) -> int:
    db: Session = SessionLocal()
    try:
        batch = import_class_marks(db, class_id, Path(path).read_bytes())
    except GradingError as e:
        print(f"❌ 업로드 실패: {e.message}")
        return 1
    finally:
        db.close()

    print(f"✅ {batch.created} created, {batch.updated} updated")
    for error in batch.errors:
        print(f"  - {error}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    create_tables()
    sys.exit(run(int(sys.argv[1]), sys.argv[2]))
