from dataclasses import dataclass


@dataclass(frozen=True)
class PartialTransaction:
    """A transaction found by local extraction, before any enhancement."""

    raw_date: str
    amount_minor_units: int
    currency: str | None
    raw_description: str

    @property
    def is_credit(self) -> bool:
        return self.amount_minor_units > 0

    @property
    def is_debit(self) -> bool:
        return self.amount_minor_units < 0

    @property
    def amount_formatted(self) -> str:
        """Amount as "major.minor" with the sign kept, e.g. "-3700.00"."""
        sign = "-" if self.amount_minor_units < 0 else ""
        major, minor = divmod(abs(self.amount_minor_units), 100)
        return f"{sign}{major}.{minor:02d}"


@dataclass(frozen=True)
class AmountMatch:
    """A parsed amount and the exact text it was parsed from."""

    minor_units: int
    raw_value: str
    start: int
    end: int
