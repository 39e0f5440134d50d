"""
키 단위 비동기 락

같은 키(예: 거래 ID)에 대한 작업을 직렬화.
서로 다른 키는 동시에 진행 가능.
대기자가 없어진 락은 즉시 제거하여 메모리 누수 방지.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """키별 asyncio.Lock 관리자

    사용 예시:
    ```python
    locks = KeyedLock()

    async with locks.hold(("transaction", 42)):
        ...  # 거래 42에 대한 load → persist → delta 구간
    ```
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """키에 대한 락 획득 (컨텍스트 매니저)"""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock

        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        """현재 추적 중인 키 수"""
        return len(self._locks)


def balance_key(user_id: int) -> tuple[str, int]:
    """사용자 잔고 구간 락 키

    거래 저장 → 증감, 잔고 이체, 정합성 보정이 같은 키를 공유하여
    보정이 저장과 증감 사이에 끼어들지 못하게 함.
    """
    return ("balance", user_id)
