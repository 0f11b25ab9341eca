from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.common import SuccessEnvelope
from services.directories import active_semester_names

router = APIRouter(prefix="/semesters", tags=["semesters"])


# ✅ [READ] 활성 학기 이름 (연도 내 순서대로)
@router.get("/", response_model=SuccessEnvelope[list[str]])
def read_active_semesters(db: Session = Depends(get_db)):
    return SuccessEnvelope(data=active_semester_names(db))
