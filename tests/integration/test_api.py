"""
HTTP API 통합 테스트

거래 생성/수정/삭제 → 잔고 반영, 조회 가시성, 도메인 예외 → HTTP 상태 코드.
"""

import pytest


pytestmark = pytest.mark.integration


def expense(amount="50", shared=False, **extra) -> dict:
    body = {
        "amount": amount,
        "transactionTypeId": 2,
        "isShared": shared,
        "date": "2026-03-01",
        "categoryId": 1,
    }
    body.update(extra)
    return body


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["mode"] == "development"
        assert data["connections"]["connections"] == 0


class TestAuth:
    def test_missing_token(self, client) -> None:
        assert client.get("/api/balance").status_code == 401

    def test_invalid_token(self, client) -> None:
        response = client.get("/api/balance", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestTransactionFlow:
    """거래 변경 → 잔고"""

    def test_create_shared_expense(self, client, auth) -> None:
        response = client.post("/api/transactions", json=expense("50", shared=True), headers=auth(1))

        assert response.status_code == 201
        data = response.json()
        assert data["transaction"]["version"] == 1
        assert data["balance"] == {"userId": 1, "personalBalance": "-50", "familyBalance": "50"}

    def test_update_then_delete_nets_zero(self, client, auth) -> None:
        created = client.post("/api/transactions", json=expense("50"), headers=auth(1)).json()
        tx_id = created["transaction"]["id"]

        updated = client.put(
            f"/api/transactions/{tx_id}",
            json={"amount": "80", "isShared": True},
            headers=auth(1),
        )
        assert updated.status_code == 200
        assert updated.json()["balance"] == {
            "userId": 1,
            "personalBalance": "-80",
            "familyBalance": "80",
        }

        deleted = client.delete(f"/api/transactions/{tx_id}", headers=auth(1))
        assert deleted.status_code == 204

        balance = client.get("/api/balance", headers=auth(1)).json()
        assert balance == {"userId": 1, "personalBalance": "0", "familyBalance": "0"}

    def test_income(self, client, auth) -> None:
        client.post(
            "/api/transactions",
            json=expense("1000", transactionTypeId=1),
            headers=auth(3),
        )

        balance = client.get("/api/balance", headers=auth(3)).json()
        assert balance["personalBalance"] == "1000"

    def test_description_only_update_has_no_balance(self, client, auth) -> None:
        created = client.post("/api/transactions", json=expense(), headers=auth(1)).json()

        response = client.put(
            f"/api/transactions/{created['transaction']['id']}",
            json={"description": "feria"},
            headers=auth(1),
        )

        assert response.json()["balance"] is None
        assert response.json()["transaction"]["description"] == "feria"


class TestTransactionErrors:
    """도메인 예외 → HTTP 상태 코드"""

    @pytest.mark.parametrize("amount", ["abc", "-10", "0", 12.5])
    def test_invalid_amount_422(self, client, auth, amount) -> None:
        response = client.post("/api/transactions", json=expense(amount), headers=auth(1))
        assert response.status_code == 422

    def test_unknown_transaction_404(self, client, auth) -> None:
        assert client.put("/api/transactions/999", json={"amount": "1"}, headers=auth(1)).status_code == 404
        assert client.delete("/api/transactions/999", headers=auth(1)).status_code == 404

    def test_other_users_transaction_404(self, client, auth) -> None:
        created = client.post("/api/transactions", json=expense(), headers=auth(1)).json()
        tx_id = created["transaction"]["id"]

        assert client.delete(f"/api/transactions/{tx_id}", headers=auth(2)).status_code == 404
        assert client.get(f"/api/transactions/{tx_id}", headers=auth(2)).status_code == 404

    def test_version_conflict_409(self, client, auth) -> None:
        created = client.post("/api/transactions", json=expense(), headers=auth(1)).json()
        tx_id = created["transaction"]["id"]

        first = client.put(
            f"/api/transactions/{tx_id}", json={"amount": "60", "expectedVersion": 1}, headers=auth(1)
        )
        second = client.put(
            f"/api/transactions/{tx_id}", json={"amount": "70", "expectedVersion": 1}, headers=auth(1)
        )

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["currentVersion"] == 2
        assert second.json()["transactionId"] == tx_id


class TestVisibility:
    """목록/단건 조회 가시성"""

    def test_shared_visible_to_household(self, client, auth) -> None:
        shared = client.post("/api/transactions", json=expense(shared=True), headers=auth(1)).json()
        client.post("/api/transactions", json=expense(), headers=auth(1))

        listed = client.get("/api/transactions", headers=auth(2)).json()
        single = client.get(f"/api/transactions/{shared['transaction']['id']}", headers=auth(2))

        assert [t["id"] for t in listed] == [shared["transaction"]["id"]]
        assert single.status_code == 200

    def test_not_visible_outside_household(self, client, auth) -> None:
        client.post("/api/transactions", json=expense(shared=True), headers=auth(1))

        assert client.get("/api/transactions", headers=auth(3)).json() == []

    def test_filters(self, client, auth) -> None:
        client.post("/api/transactions", json=expense(date="2026-01-10"), headers=auth(3))
        client.post(
            "/api/transactions",
            json=expense(transactionTypeId=1, date="2026-02-10"),
            headers=auth(3),
        )

        incomes = client.get("/api/transactions?transactionTypeId=1", headers=auth(3)).json()
        january = client.get(
            "/api/transactions?startDate=2026-01-01&endDate=2026-01-31", headers=auth(3)
        ).json()

        assert [t["transactionTypeId"] for t in incomes] == [1]
        assert [t["date"] for t in january] == ["2026-01-10"]


class TestBalanceTransfers:
    def test_transfer_and_list(self, client, auth) -> None:
        client.post("/api/transactions", json=expense("100", transactionTypeId=1), headers=auth(1))

        response = client.post(
            "/api/balance/transfers",
            json={"amount": "40", "fromPersonal": True},
            headers=auth(1),
        )

        assert response.status_code == 201
        assert response.json()["balance"]["familyBalance"] == "40"
        transfers = client.get("/api/balance/transfers", headers=auth(1)).json()
        assert [t["amount"] for t in transfers] == ["40"]

    def test_insufficient_400(self, client, auth) -> None:
        response = client.post(
            "/api/balance/transfers",
            json={"amount": "1", "fromPersonal": False},
            headers=auth(1),
        )
        assert response.status_code == 400


class TestHouseholdAndInvitations:
    def test_members(self, client, auth) -> None:
        data = client.get("/api/household/members", headers=auth(2)).json()

        assert data["name"] == "Casa"
        assert [m["username"] for m in data["members"]] == ["ana", "bruno"]

    def test_no_household(self, client, auth) -> None:
        assert client.get("/api/household/members", headers=auth(3)).json()["members"] == []

    def test_invite_and_accept(self, client, auth) -> None:
        created = client.post(
            "/api/invitations", json={"invitedUsername": "carla"}, headers=auth(1)
        )
        assert created.status_code == 201
        code = created.json()["code"]

        assert client.get(f"/api/invitations/{code}", headers=auth(3)).status_code == 200

        wrong = client.post(f"/api/invitations/{code}/accept", headers=auth(2))
        assert wrong.status_code == 400

        accepted = client.post(f"/api/invitations/{code}/accept", headers=auth(3))
        assert accepted.status_code == 200
        assert accepted.json() == {"userId": 3, "householdId": 1}

        assert client.get(f"/api/invitations/{code}", headers=auth(3)).status_code == 404

    def test_unknown_code_404(self, client, auth) -> None:
        assert client.get("/api/invitations/deadbeef", headers=auth(1)).status_code == 404


class TestIntegrity:
    def test_reconcile_consistent(self, client, auth) -> None:
        client.post("/api/transactions", json=expense("10"), headers=auth(1))

        data = client.post("/api/integrity/reconcile", json={}, headers=auth(1)).json()

        assert data["consistent"] is True
        assert data["applied"] is False
        assert client.get("/api/integrity/issues", headers=auth(1)).json() == []
