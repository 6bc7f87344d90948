from dataclasses import dataclass
from enum import Enum
from typing import Optional

NEEDS = "Needs"
SAVINGS = "Savings"
WANTS = "Wants"
BUCKETS = (NEEDS, SAVINGS, WANTS)


class OnboardingState(str, Enum):
    NOT_ONBOARDED = "not_onboarded"
    ONBOARDED = "onboarded"


@dataclass(frozen=True)
class Expense:
    id: str
    title: str
    amount: float      # non-negative, in the selected currency
    bucket: str        # Needs / Savings / Wants
    subcategory: str   # joins Category.name
    date: str          # ISO-8601, e.g. "2025-01-03T10:00:00"
    icon: str = ""


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str
    bucket: str


@dataclass(frozen=True)
class BudgetRule:
    needs: int = 50
    savings: int = 30
    wants: int = 20

    @property
    def total(self) -> int:
        return self.needs + self.savings + self.wants

    def percentage(self, bucket: str) -> int:
        return {NEEDS: self.needs, SAVINGS: self.savings, WANTS: self.wants}.get(bucket, 0)


# at most one goal per category, keyed by category id
@dataclass(frozen=True)
class SavingsGoal:
    amount: float
    target_date: Optional[str] = None  # "MM/YYYY"
    note: Optional[str] = None


@dataclass(frozen=True)
class AdditionalIncome:
    id: str
    description: str
    amount: float
    date: str


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


CURRENCIES = (
    Currency("USD", "$", "US Dollar"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("JPY", "¥", "Japanese Yen"),
    Currency("CAD", "C$", "Canadian Dollar"),
    Currency("AUD", "A$", "Australian Dollar"),
    Currency("INR", "₹", "Indian Rupee"),
    Currency("CNY", "¥", "Chinese Yuan"),
)


def currency_by_code(code: Optional[str]) -> Currency:
    for c in CURRENCIES:
        if c.code == (code or "").upper():
            return c
    return CURRENCIES[0]
