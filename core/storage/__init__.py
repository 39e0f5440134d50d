"""
스토리지 모듈

거래, 사용자/가구 잔고, 잔고 이체, 정합성 이슈 저장소 제공
"""

from core.storage.integrity_store import IntegrityStore
from core.storage.transaction_store import TransactionStore
from core.storage.transfer_store import TransferStore
from core.storage.user_store import HouseholdDirectory, UserStore

__all__ = [
    "IntegrityStore",
    "TransactionStore",
    "HouseholdDirectory",
    "TransferStore",
    "UserStore",
]
