"""Trade form state: amount validation, window selection, submission."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from stocked.models.bet import BetDirection, BetRequest

INVALID_NUMBER = "Please enter a valid number"
EXCEEDS_BALANCE = "Amount exceeds balance"
NOT_POSITIVE = "Amount must be greater than zero"

DEFAULT_DURATIONS = (120, 300)
DEFAULT_PAYOUT_PCT = 50


class BetValidationError(Exception):
    """Raised when a bet cannot be submitted from the current form state."""


def parse_amount(value: str) -> Decimal | None:
    """Parse user input; None when it is not a finite number."""
    try:
        amount = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not amount.is_finite():
        return None
    return amount


class BetForm:
    """Mirrors the trade panel: the entered amount, its error and the window."""

    def __init__(
        self,
        asset: str,
        balance: Decimal | None = None,
        durations: tuple[int, ...] | list[int] = DEFAULT_DURATIONS,
        selected: int | None = None,
    ) -> None:
        self.asset = asset.strip().lower()
        self.balance = balance
        self.durations = tuple(durations)
        self._selected = self.durations[0] if selected is None else selected
        if self._selected not in self.durations:
            msg = f"duration {self._selected} not in {self.durations}"
            raise ValueError(msg)
        self.amount = ""
        self.error = ""

    @property
    def selected(self) -> int:
        return self._selected

    def select_duration(self, duration: int) -> None:
        if duration not in self.durations:
            msg = f"duration {duration} not in {self.durations}"
            raise ValueError(msg)
        self._selected = duration

    def set_amount(self, value: str) -> str:
        """Apply an edit to the amount field; returns the resulting error.

        An invalid edit leaves the previous amount in place.
        """
        if value == "":
            self.amount = ""
            self.error = ""
            return self.error

        number = parse_amount(value)
        if number is None:
            self.error = INVALID_NUMBER
            return self.error

        if self.balance is not None and number > self.balance:
            self.error = EXCEEDS_BALANCE
            return self.error

        self.amount = value
        self.error = ""
        return self.error

    @property
    def can_submit(self) -> bool:
        return bool(self.amount) and not self.error

    def build_request(self, direction: BetDirection) -> BetRequest:
        """Turn the form into a BetRequest.

        Raises:
            BetValidationError: If the form is empty, has an error or the
                amount is not positive.
        """
        if not self.can_submit:
            raise BetValidationError(self.error or INVALID_NUMBER)
        amount = parse_amount(self.amount)
        if amount is None:
            raise BetValidationError(INVALID_NUMBER)
        if amount <= 0:
            raise BetValidationError(NOT_POSITIVE)
        return BetRequest(
            asset=self.asset,
            direction=direction,
            amount=amount,
            duration=self._selected,
        )
