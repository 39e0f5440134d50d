"""
유틸리티 패키지

키 단위 락, 타임존 처리 등 공통 유틸리티
"""

from core.utils.locks import KeyedLock, balance_key
from core.utils.timezone import now_utc, parse_utc, to_utc

__all__ = [
    "KeyedLock",
    "balance_key",
    "now_utc",
    "parse_utc",
    "to_utc",
]
