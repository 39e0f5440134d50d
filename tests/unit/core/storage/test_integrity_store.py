"""
IntegrityStore 테스트
"""

from decimal import Decimal

import pytest

from adapters.interfaces import IIntegrityRecorder
from core.storage import IntegrityStore
from core.types import IntegrityStatus


@pytest.fixture
def store(db) -> IntegrityStore:
    return IntegrityStore(db)


class TestIntegrityStore:
    def test_implements_protocol(self, store) -> None:
        assert isinstance(store, IIntegrityRecorder)

    @pytest.mark.asyncio
    async def test_record_and_list(self, store) -> None:
        issue_id = await store.record_issue(1, 7, "update", Decimal("-30"), Decimal("30"), "locked")

        issues = await store.list_issues()

        assert len(issues) == 1
        issue = issues[0]
        assert issue["id"] == issue_id
        assert issue["transactionId"] == 7
        assert issue["personalDelta"] == "-30"
        assert issue["status"] == "OPEN"
        assert issue["resolvedAt"] is None

    @pytest.mark.asyncio
    async def test_resolve_only_user_open_issues(self, store) -> None:
        await store.record_issue(1, 7, "update", Decimal("1"), Decimal("0"), "e")
        await store.record_issue(1, None, "transfer", Decimal("1"), Decimal("-1"), "e")
        await store.record_issue(2, 8, "create", Decimal("1"), Decimal("0"), "e")

        assert await store.resolve_user_issues(1) == 2
        assert await store.resolve_user_issues(1) == 0

        open_issues = await store.list_issues(status=IntegrityStatus.OPEN)
        resolved = await store.list_issues(status=IntegrityStatus.RESOLVED, user_id=1)

        assert [i["userId"] for i in open_issues] == [2]
        assert len(resolved) == 2
        assert all(i["resolvedAt"] for i in resolved)
