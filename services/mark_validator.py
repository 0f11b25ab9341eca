"""
services/mark_validator.py

세부 점수 범위 검증
- 빈 값/누락 항목은 0으로 채움
- 범위를 벗어난 항목마다 오류 1건씩 생성 (첫 오류에서 멈추지 않음)
"""

from typing import Any, List, Mapping, Tuple

from schemas.exam_records import MarkSet
from services.errors import ValidationError
from services.grade_scale import MARK_COMPONENTS


def _coerce(value: Any) -> Tuple[float, bool]:
    """(값, 숫자 여부) 반환. None/빈 문자열은 0으로 간주"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0, True
    if isinstance(value, bool):
        return 0.0, False
    try:
        return float(value), True
    except (TypeError, ValueError):
        return 0.0, False


def collect_mark_errors(raw: Mapping[str, Any]) -> Tuple[MarkSet, List[str]]:
    """검증 결과를 예외 없이 반환: (기본값이 채워진 MarkSet, 오류 메시지 목록)"""
    values = {}
    errors: List[str] = []

    for component in MARK_COMPONENTS:
        value, numeric = _coerce(raw.get(component.key))
        if not numeric:
            errors.append(f"{component.label} must be a number")
            continue
        if not (0 <= value <= component.max_marks):
            errors.append(f"{component.label} must be 0-{component.max_marks}")
            continue
        values[component.key] = value

    return MarkSet(**values), errors


def validate_marks(raw: Mapping[str, Any]) -> MarkSet:
    marks, errors = collect_mark_errors(raw)
    if errors:
        raise ValidationError(errors[0], errors)
    return marks
