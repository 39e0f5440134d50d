"""
잔고 원장 (Balance Ledger)

거래 변경마다 개인/가족 잔고 델타를 계산하고,
변경 순서(저장 → 델타 반영 → 알림)를 조율하는 모듈.

사용 예시:
```python
from core.ledger import MutationOrchestrator, create_delta

delta = create_delta(transaction)          # 순수 계산
result = await orchestrator.create_transaction(actor_id, draft)
```
"""

from core.ledger.balance import (
    BalanceDelta,
    create_delta,
    delete_delta,
    effect_of,
    mutation_deltas,
    parse_amount,
    parse_balance,
    transaction_effect,
    transfer_delta,
    update_delta,
)
from core.ledger.orchestrator import MutationOrchestrator, MutationResult
from core.ledger.reconciler import BalanceDrift, BalanceReconciler

__all__ = [
    # 델타 계산
    "BalanceDelta",
    "create_delta",
    "delete_delta",
    "effect_of",
    "mutation_deltas",
    "parse_amount",
    "parse_balance",
    "transaction_effect",
    "transfer_delta",
    "update_delta",
    # 변경 조율
    "MutationOrchestrator",
    "MutationResult",
    # 정합성 복구
    "BalanceDrift",
    "BalanceReconciler",
]
