"""
services/errors.py

성적 엔진 도메인 예외 정의
- 각 예외는 에러 코드(code)와 HTTP 상태(status_code)를 가지며,
  middlewares/error_handler.py 에서 표준 에러 JSON으로 변환됩니다.
"""

from typing import List, Optional


class GradingError(Exception):
    """성적 엔진 공통 예외"""
    code = "GRADING_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GradingError):
    """점수 범위 초과, 등록되지 않은 학기 등 입력 값 오류"""
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        # 항목별 오류 메시지 전체 (단건 입력에서는 첫 번째만 노출)
        self.errors = errors or [message]


class ReferentialError(GradingError):
    """존재하지 않는 학생/과목/분반/성적 기록 참조"""
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(GradingError):
    """엄격 생성 경로에서 자연키(학생·과목·학기·연도) 중복"""
    code = "CONFLICT"
    status_code = 409


class StructuralError(GradingError):
    """엑셀 파일 구조 오류 (Student ID 컬럼 없음, 파일 손상, 분반 없음 등) → 배치 전체 중단"""
    code = "STRUCTURAL_ERROR"
    status_code = 400
