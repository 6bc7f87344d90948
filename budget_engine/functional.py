from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, Optional, TypeVar

from budget_engine.domain import BUCKETS, BudgetRule, Category, Expense

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self.error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Left({self.error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self.error == other.error


def parse_int(text) -> Maybe[int]:
    try:
        return Some(int(str(text).strip()))
    except (TypeError, ValueError):
        return Nothing()


def find_category(cats: Iterable[Category], name: Optional[str]) -> Maybe[Category]:
    """Case-insensitive lookup of a category by display name; first match wins."""
    if not name:
        return Nothing()
    wanted = name.strip().casefold()
    for cat in cats:
        if cat.name.strip().casefold() == wanted:
            return Some(cat)
    return Nothing()


def validate_budget_rule(rule: BudgetRule) -> Either[dict, BudgetRule]:
    for bucket in BUCKETS:
        pct = rule.percentage(bucket)
        if pct < 0:
            return Left({
                "error": "negative_percentage",
                "message": f"{bucket} percentage cannot be negative",
                "bucket": bucket,
                "percentage": pct,
            })
    if rule.total != 100:
        return Left({
            "error": "rule_total_mismatch",
            "message": f"Percentages add up to {rule.total}%, expected 100%",
            "total": rule.total,
        })
    return Right(rule)


def validate_expense(e: Expense, cats: Iterable[Category]) -> Either[dict, Expense]:
    if e.bucket not in BUCKETS:
        return Left({
            "error": "unknown_bucket",
            "message": f"Expense {e.id} has bucket {e.bucket!r}, not one of {', '.join(BUCKETS)}",
            "expense_id": e.id,
        })
    if e.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": f"Expense {e.id} has a negative amount",
            "expense_id": e.id,
            "amount": e.amount,
        })
    category = find_category(cats, e.subcategory).get_or_else(None)
    if category is not None and category.bucket != e.bucket:
        return Left({
            "error": "bucket_mismatch",
            "message": f"Category {category.name} belongs to {category.bucket}, expense is filed under {e.bucket}",
            "expense_id": e.id,
            "category_id": category.id,
        })
    return Right(e)
