"""
services/grade_scale.py

총점 → 등급/평점 변환
- 세부 점수 만점: Mid Exam /20, Final Exam /40, Assessment /10,
  Project /10, Assignment /10, Presentation /10 → 합계 /100
- 등급표는 고정값이며 최소 점수 내림차순으로 스캔, 처음으로 min <= total 인 행을 사용
"""

from typing import Mapping, NamedTuple, Optional


class GradeBand(NamedTuple):
    min: float
    grade: str
    points: float


class GradeInfo(NamedTuple):
    grade: str
    grade_points: float


class MarkComponent(NamedTuple):
    key: str
    label: str
    max_marks: int


# ✅ 고정 등급표 (수정 불가, 내림차순)
GRADE_SCALE = (
    GradeBand(90, "A", 4.0),
    GradeBand(85, "A-", 3.7),
    GradeBand(80, "B+", 3.3),
    GradeBand(75, "B", 3.0),
    GradeBand(70, "B-", 2.7),
    GradeBand(65, "C+", 2.3),
    GradeBand(60, "C", 2.0),
    GradeBand(50, "D", 1.0),
    GradeBand(0, "F", 0.0),
)

# ✅ 세부 점수 항목 (엑셀 템플릿 컬럼 순서와 동일)
MARK_COMPONENTS = (
    MarkComponent("mid_exam", "Mid Exam", 20),
    MarkComponent("final_exam", "Final Exam", 40),
    MarkComponent("assessment", "Assessment", 10),
    MarkComponent("project", "Project", 10),
    MarkComponent("assignment", "Assignment", 10),
    MarkComponent("presentation", "Presentation", 10),
)

MARK_KEYS = tuple(c.key for c in MARK_COMPONENTS)


def calculate_total(marks: Mapping[str, Optional[float]]) -> float:
    """세부 점수 합계 (없는 항목은 0, 소수 둘째 자리 반올림)"""
    # 부동소수 합계 오차 제거 (49.99999999999999 → 50.0)
    return round(sum((marks.get(key) or 0) for key in MARK_KEYS), 2)


def resolve_grade(total: float) -> GradeInfo:
    """총점 → (등급, 평점). 범위를 벗어난 값도 예외 없이 처리 (음수 → F, 100 초과 → A)"""
    for band in GRADE_SCALE:
        if total >= band.min:
            return GradeInfo(band.grade, band.points)
    return GradeInfo("F", 0.0)
