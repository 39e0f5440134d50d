#!/usr/bin/env python3
"""
잔고 정합성 복구 스크립트

거래/이체 이력으로 기대 잔고를 재계산하여 저장된 잔고와 비교.
--apply를 주면 보정 델타를 적용하고 미해결 정합성 이슈를 해결 처리.

사용법:
    python scripts/reconcile_balances.py                 # 미해결 이슈가 있는 사용자 전체 점검
    python scripts/reconcile_balances.py --user-id 3     # 특정 사용자 점검
    python scripts/reconcile_balances.py --user-id 3 --apply

서버 실행 중에는 POST /api/integrity/reconcile 사용 (잔고 락은 프로세스 단위).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.ledger.reconciler import BalanceReconciler
from core.logging import setup_logging
from core.storage.integrity_store import IntegrityStore
from core.storage.transaction_store import TransactionStore
from core.storage.transfer_store import TransferStore
from core.storage.user_store import UserStore
from core.types import IntegrityStatus

logger = logging.getLogger(__name__)


async def main(mode: str, user_id: int | None, apply: bool) -> int:
    """
    Returns:
        불일치가 남아 있는 사용자 수 (종료 코드로 사용)
    """
    db_path = get_db_path(mode)
    logger.info(f"DB: {db_path}, apply={apply}")

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)

        integrity = IntegrityStore(db)
        reconciler = BalanceReconciler(
            transactions=TransactionStore(db),
            transfers=TransferStore(db),
            balances=UserStore(db),
            integrity=integrity,
        )

        if user_id is not None:
            user_ids = [user_id]
        else:
            issues = await integrity.list_issues(status=IntegrityStatus.OPEN)
            user_ids = sorted({issue["userId"] for issue in issues})
            logger.info(f"미해결 이슈 {len(issues)}건, 대상 사용자 {len(user_ids)}명")

        remaining = 0
        for uid in user_ids:
            drift = await reconciler.reconcile(uid, apply=apply)

            if drift is None:
                print(f"user {uid}: OK")
                continue

            correction = drift.correction
            print(
                f"user {uid}: DRIFT personal {format(correction.personal, '+f')} "
                f"family {format(correction.family, '+f')}"
                f"{' (applied)' if apply else ''}"
            )
            if not apply:
                remaining += 1

    return remaining


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="잔고 정합성 점검/복구")
    parser.add_argument(
        "--mode",
        choices=["development", "production"],
        default="development",
        help="실행 모드 (기본: development)",
    )
    parser.add_argument("--user-id", type=int, default=None, help="점검할 사용자 ID")
    parser.add_argument("--apply", action="store_true", help="보정 델타 적용")
    args = parser.parse_args()

    setup_logging("scripts")
    sys.exit(1 if asyncio.run(main(args.mode, args.user_id, args.apply)) else 0)
