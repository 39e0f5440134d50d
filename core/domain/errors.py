"""
도메인 예외

거래 변경 흐름에서 발생하는 오류 분류.
HTTP 레이어(web/app.py)에서 상태 코드로 변환됨.

- ValidationError: 입력 검증 실패 (4xx, 재시도 없음)
- NotFoundError: 거래 없음 또는 타인 소유 (404)
- VersionConflictError: 낙관적 락 충돌 (409)
- PersistenceError: 저장소 장애 (5xx, 잔고/알림 단계 진행 안 함)
- BalanceApplyError: 저장 후 잔고 반영 실패 (정합성 복구 대상)
- DataIntegrityError: 저장된 데이터 손상 (예: 숫자가 아닌 금액)
"""


class LedgerError(Exception):
    """가계부 도메인 예외 기본 클래스"""

    pass


class ValidationError(LedgerError):
    """입력 검증 실패"""

    pass


class InsufficientBalanceError(ValidationError):
    """잔고 이체 시 출금 측 잔고 부족"""

    pass


class NotFoundError(LedgerError):
    """대상 없음 (타인 소유 포함)"""

    pass


class VersionConflictError(LedgerError):
    """동시 수정 충돌 (version 불일치)"""

    def __init__(self, transaction_id: int, expected: int, actual: int | None):
        self.transaction_id = transaction_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict on transaction {transaction_id}: "
            f"expected {expected}, got {actual}"
        )


class PersistenceError(LedgerError):
    """저장소 읽기/쓰기 실패"""

    pass


class DataIntegrityError(LedgerError):
    """저장된 데이터가 손상된 경우"""

    pass


class AmountError(DataIntegrityError):
    """금액 파싱 실패

    저장된 값이면 데이터 무결성 오류, 요청 값이면 검증 오류로 다뤄짐.
    """

    pass


class BalanceApplyError(LedgerError):
    """거래는 저장되었으나 잔고 반영에 실패

    거래 ID를 포함하여 사후 정합성 복구(reconcile)에 사용.
    """

    def __init__(self, transaction_id: int | None, user_id: int, cause: Exception):
        self.transaction_id = transaction_id
        self.user_id = user_id
        self.cause = cause
        super().__init__(
            f"Balance apply failed for user {user_id} "
            f"(transaction {transaction_id}): {cause}"
        )
