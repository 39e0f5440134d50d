"""
타입 정의 모듈

Enum 등 핵심 타입 정의
문자열 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum, IntEnum


class AppMode(str, Enum):
    """실행 모드 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class TransactionKind(IntEnum):
    """거래 유형 (transaction_type_id)

    닫힌 열거형. DB와 API에는 정수 ID로 저장됨.
    """

    INCOME = 1
    EXPENSE = 2
    TRANSFER = 3


class MutationKind(str, Enum):
    """거래 변경 종류"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    TRANSFER = "transfer"  # 개인 ↔ 가족 잔고 이체


class IntegrityStatus(str, Enum):
    """잔고 정합성 이슈 상태"""

    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class AlertLevel(str, Enum):
    """운영 알림 레벨"""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
