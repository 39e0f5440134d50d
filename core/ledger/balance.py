"""
잔고 델타 계산 (Balance Ledger)

거래 변경(생성/수정/삭제)마다 소유자의 개인 잔고(personal)와
가족 잔고(family)에 적용할 델타를 계산하는 순수 함수 모음.
I/O 없음, 결정적, Decimal 전용.

거래 1건이 활성 상태로 존재하는 동안의 "효과(effect)":

    | 유형        | is_shared | personal | family |
    |-------------|-----------|----------|--------|
    | 1 수입      | 무관      | +A       | 0      |
    | 2 지출      | False     | -A       | 0      |
    | 2 지출      | True      | -A       | +A     |
    | 3 이체      | 무관      | 0        | 0      |

- 생성 델타 = effect(new)
- 삭제 델타 = -effect(old)
- 수정 델타 = effect(new) - effect(old)

수정 델타를 효과의 차이로 계산하면 금액 변경, 공유 전환(개인→공유,
공유→개인), 유형 변경이 모두 같은 규칙으로 처리되며, 생성 → 수정(N회)
→ 삭제 전체의 합은 항상 0이 됨.

주의: 개인→공유 전환 시 개인 잔고는 금액 차이만큼만 바뀌고 가족 잔고에
전체 금액이 더해짐. 개인 측 최초 차감을 되돌리지 않는 이 비대칭이 의도된
것인지는 미결 사항 (DESIGN.md 참조). 동작은 그대로 유지.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from core.domain.errors import AmountError
from core.domain.models import TransactionState
from core.types import TransactionKind


ZERO = Decimal("0")


@dataclass(frozen=True)
class BalanceDelta:
    """잔고 델타 (personal, family)"""

    personal: Decimal = ZERO
    family: Decimal = ZERO

    def __add__(self, other: "BalanceDelta") -> "BalanceDelta":
        return BalanceDelta(
            personal=self.personal + other.personal,
            family=self.family + other.family,
        )

    def __sub__(self, other: "BalanceDelta") -> "BalanceDelta":
        return self + (-other)

    def __neg__(self) -> "BalanceDelta":
        return BalanceDelta(personal=-self.personal, family=-self.family)

    @property
    def is_zero(self) -> bool:
        return self.personal == ZERO and self.family == ZERO

    def to_dict(self) -> dict[str, str]:
        return {
            "personalDelta": format(self.personal, "f"),
            "familyDelta": format(self.family, "f"),
        }


def _to_decimal(raw: Any) -> Decimal:
    """문자열/정수/Decimal → 유한 Decimal. float은 이진 부동소수점 오차 때문에 거부."""
    if isinstance(raw, bool) or isinstance(raw, float):
        raise AmountError(f"금액은 문자열 또는 정수여야 합니다: {raw!r}")

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, str)):
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation as e:
            raise AmountError(f"숫자가 아닌 금액: {raw!r}") from e
    else:
        raise AmountError(f"지원하지 않는 금액 타입: {type(raw).__name__}")

    if not value.is_finite():
        raise AmountError(f"유한하지 않은 금액: {raw!r}")

    return value


def parse_amount(raw: Any) -> Decimal:
    """금액 파싱

    Args:
        raw: 금액 원본 값

    Returns:
        0 이상의 유한 Decimal

    Raises:
        AmountError: 숫자가 아니거나, 음수이거나, NaN/Infinity인 경우
    """
    value = _to_decimal(raw)

    if value < ZERO:
        raise AmountError(f"금액은 음수일 수 없습니다: {raw!r}")

    return value


def effect_of(kind: TransactionKind | int, amount: Decimal, is_shared: bool) -> BalanceDelta:
    """유형/금액/공유 여부로 활성 거래의 잔고 효과 계산"""
    kind = TransactionKind(kind)

    if kind == TransactionKind.INCOME:
        return BalanceDelta(personal=amount)

    if kind == TransactionKind.EXPENSE:
        if is_shared:
            return BalanceDelta(personal=-amount, family=amount)
        return BalanceDelta(personal=-amount)

    # TRANSFER: 사용자 잔고에 영향 없음
    return BalanceDelta()


def transaction_effect(state: TransactionState) -> BalanceDelta:
    """활성 거래가 소유자 잔고에 미치는 효과"""
    return effect_of(state.transaction_type_id, state.amount, state.is_shared)


def create_delta(new: TransactionState) -> BalanceDelta:
    """생성 델타"""
    return transaction_effect(new)


def delete_delta(old: TransactionState) -> BalanceDelta:
    """삭제 델타 (생성 효과의 정확한 역)"""
    return -transaction_effect(old)


def update_delta(old: TransactionState, new: TransactionState) -> BalanceDelta:
    """수정 델타 (동일 소유자 기준)

    예:
        공유 지출 50 → 80: personal -30, family +30
        개인 지출 50 → 공유 지출 50: personal 0, family +50
        공유 지출 50 → 개인 지출 50: personal 0, family -50
    """
    return transaction_effect(new) - transaction_effect(old)


def mutation_deltas(
    old: TransactionState | None,
    new: TransactionState | None,
) -> dict[int, BalanceDelta]:
    """변경 1건에 대한 사용자별 델타

    Args:
        old: 변경 전 상태 (생성이면 None)
        new: 변경 후 상태 (삭제면 None)

    Returns:
        {user_id: BalanceDelta}. 델타가 0인 사용자는 제외.
        소유자가 바뀐 수정이면 이전/새 소유자 각각 포함.
    """
    if old is None and new is None:
        raise ValueError("old와 new 중 하나는 있어야 합니다")

    deltas: dict[int, BalanceDelta] = {}

    if old is not None:
        deltas[old.user_id] = delete_delta(old)

    if new is not None:
        deltas[new.user_id] = deltas.get(new.user_id, BalanceDelta()) + create_delta(new)

    return {user_id: delta for user_id, delta in deltas.items() if not delta.is_zero}


def transfer_delta(from_personal: bool, amount: Decimal) -> BalanceDelta:
    """개인 ↔ 가족 잔고 이체 델타

    from_personal=True: personal -A, family +A
    from_personal=False: personal +A, family -A
    """
    if from_personal:
        return BalanceDelta(personal=-amount, family=amount)
    return BalanceDelta(personal=amount, family=-amount)


def parse_balance(raw: Any) -> Decimal:
    """잔고/델타 파싱 (음수 허용)

    Raises:
        AmountError: 숫자가 아니거나 NaN/Infinity인 경우
    """
    return _to_decimal(raw)
