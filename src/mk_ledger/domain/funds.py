"""FundsBook — the ledger's accumulated balance and its movement log."""

from src.mk_common.errors import InsufficientFundsError
from src.mk_ledger.domain.models import FundMovement


class FundsBook:
    def __init__(self, balance: int = 0) -> None:
        self._balance = balance
        self._pending: list[FundMovement] = []

    @property
    def balance(self) -> int:
        return self._balance

    def receive(self, entry_type: str, party_id: str, amount: int, item_id: int) -> FundMovement:
        self._balance += amount
        return self._record(entry_type, party_id, amount, item_id)

    def pay_out(self, entry_type: str, party_id: str, amount: int, item_id: int) -> FundMovement:
        if amount > self._balance:
            raise InsufficientFundsError(required=amount, available=self._balance)
        self._balance -= amount
        return self._record(entry_type, party_id, -amount, item_id)

    def drain(self) -> list[FundMovement]:
        """Return and forget the movements recorded since the last drain."""
        pending, self._pending = self._pending, []
        return pending

    def mark(self) -> tuple[int, int]:
        return self._balance, len(self._pending)

    def reset_to(self, mark: tuple[int, int]) -> None:
        self._balance, pending_len = mark
        del self._pending[pending_len:]

    def _record(self, entry_type: str, party_id: str, amount: int, item_id: int) -> FundMovement:
        movement = FundMovement(
            entry_type=entry_type,
            party_id=party_id,
            amount=amount,
            balance_after=self._balance,
            item_id=item_id,
        )
        self._pending.append(movement)
        return movement
