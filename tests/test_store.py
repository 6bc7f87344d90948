import json
from datetime import date, datetime

from budget_engine.domain import AdditionalIncome, Expense
from budget_engine.store import (
    add_expense,
    add_income,
    clear_sample_expenses,
    delete_expense,
    delete_income,
    expense_from_dict,
    has_sample_expenses,
    load_seed,
    sample_expenses,
    update_expense,
    update_income,
)


def make_exp(id, amount=10.0, date_value="2025-01-01T00:00:00"):
    return Expense(id=id, title=id, amount=amount, bucket="Needs", subcategory="Housing", date=date_value)


def test_add_expense_prepends_and_keeps_original():
    first = (make_exp("e1"),)
    updated = add_expense(first, make_exp("e2"))
    assert [e.id for e in updated] == ["e2", "e1"]
    assert len(first) == 1


def test_add_expense_normalizes_date_values():
    updated = add_expense((), make_exp("e1", date_value=date(2025, 3, 4)))
    assert updated[0].date == "2025-03-04T00:00:00"
    updated = add_expense((), make_exp("e2", date_value=datetime(2025, 3, 4, 9, 30)))
    assert updated[0].date == "2025-03-04T09:30:00"


def test_update_expense_changes_fields_but_not_id():
    records = (make_exp("e1"), make_exp("e2"))
    updated = update_expense(records, "e2", id="hijack", amount=99.5, bucket="Wants", date=date(2025, 2, 1))
    assert updated[1].id == "e2"
    assert updated[1].amount == 99.5
    assert updated[1].bucket == "Wants"
    assert updated[1].date == "2025-02-01T00:00:00"
    assert records[1].amount == 10.0
    assert updated[0] == records[0]


def test_update_missing_expense_is_noop():
    records = (make_exp("e1"),)
    assert update_expense(records, "nope", amount=1) == records


def test_delete_expense():
    records = (make_exp("e1"), make_exp("e2"))
    assert [e.id for e in delete_expense(records, "e1")] == ["e2"]
    assert delete_expense(records, "zzz") == records


def test_sample_expenses_and_clearing():
    samples = sample_expenses(today=date(2025, 5, 10))
    assert all(e.id.startswith("sample-") for e in samples)
    assert samples[1].date == "2025-05-08T00:00:00"

    records = add_expense(samples, make_exp("real"))
    assert has_sample_expenses(records)
    cleared = clear_sample_expenses(records)
    assert [e.id for e in cleared] == ["real"]
    assert not has_sample_expenses(cleared)


def test_additional_income_operations():
    items = add_income((), AdditionalIncome("i1", "Bonus", 500, date(2025, 1, 20)))
    items = add_income(items, AdditionalIncome("i2", "Gift", 50, "2025-02-01T00:00:00"))
    assert [i.id for i in items] == ["i1", "i2"]
    assert items[0].date == "2025-01-20T00:00:00"

    items = update_income(items, "i1", amount=600)
    assert items[0].amount == 600
    assert [i.id for i in delete_income(items, "i2")] == ["i1"]


def test_expense_from_dict_accepts_legacy_category_key():
    e = expense_from_dict({"id": "x", "title": "Rent", "amount": "12.5", "category": "Needs",
                           "subcategory": "Housing", "date": "2025-01-01"})
    assert e.bucket == "Needs"
    assert e.amount == 12.5


def test_expense_from_dict_skips_malformed():
    assert expense_from_dict({"title": "no id"}) is None
    assert expense_from_dict({"id": "x", "amount": "lots"}) is None


def test_load_seed(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({
        "categories": [{"id": "housing", "name": "Housing", "icon": "🏠", "bucket": "Needs"}],
        "expenses": [
            {"id": "s1", "title": "Rent", "amount": 1200, "bucket": "Needs", "subcategory": "Housing",
             "date": "2025-01-01T09:00:00"},
            {"title": "broken"},
        ],
    }), encoding="utf-8")
    categories, expenses = load_seed(str(path))
    assert categories[0].name == "Housing"
    assert [e.id for e in expenses] == ["s1"]
