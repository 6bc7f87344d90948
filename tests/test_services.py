from dataclasses import replace
from datetime import date

from budget_engine.domain import AdditionalIncome, BudgetRule, Category, Expense, SavingsGoal
from budget_engine.services import BudgetService, default_budget_service
from budget_engine.settings import BudgetConfig


def make_config(**overrides):
    base = BudgetConfig(
        monthly_income=4000,
        rule=BudgetRule(50, 30, 20),
        categories=(
            Category("housing", "Housing", "🏠", "Needs"),
            Category("emergency", "Emergency Fund", "💰", "Savings"),
            Category("dining", "Dining Out", "🍽️", "Wants"),
        ),
    )
    return replace(base, **overrides)


def make_expenses():
    return (
        Expense("e1", "Rent", 1200, "Needs", "Housing", "2025-01-01T09:00:00"),
        Expense("e2", "Dinner", 200, "Wants", "Dining Out", "2025-01-12T20:00:00"),
        Expense("e3", "Save", 300, "Savings", "Emergency Fund", "2024-12-20T12:00:00"),
        Expense("e4", "Save", 100, "Savings", "Emergency Fund", "2025-01-20T12:00:00"),
    )


def test_budgetservice_runs_validators_and_calculators_in_order():
    def v_ok(month, config, expenses):
        return []

    def c_count(month, config, expenses, all_expenses, acc, today):
        return {"count": len(expenses)}

    def c_double(month, config, expenses, all_expenses, acc, today):
        return {"double": acc["count"] * 2}

    svc = BudgetService(validators=[v_ok], calculators=[c_count, c_double])
    rpt = svc.monthly_report("2025-1", make_config(), make_expenses())
    assert rpt["month"] == "2025-1"
    assert rpt["validation"] == [{"validator": "v_ok", "messages": []}]
    assert rpt["steps"][0]["output"] == {"count": 3}
    assert rpt["result"] == {"count": 3, "double": 6}


def test_budgetservice_validator_error_is_reported():
    def bad_validator(month, config, expenses):
        raise RuntimeError("oops")

    svc = BudgetService(validators=[bad_validator], calculators=[])
    rpt = svc.monthly_report("2025-1", make_config(), ())
    assert rpt["validation"][0]["messages"] == ["validator_error: oops"]
    assert svc.warnings(rpt) == ["validator_error: oops"]


def test_default_service_report():
    config = make_config(
        additional_income=(AdditionalIncome("i1", "Bonus", 1000, "2025-01-15T00:00:00"),),
        savings_goals={"emergency": SavingsGoal(1600, "05/2025")},
    )
    svc = default_budget_service()
    rpt = svc.monthly_report("2025-1", config, make_expenses(), today=date(2025, 1, 25))
    result = rpt["result"]

    assert svc.warnings(rpt) == []
    assert result["income"] == 5000
    assert result["buckets"]["Needs"].target == 2500
    assert result["buckets"]["Needs"].spent == 1200
    assert result["buckets"]["Savings"].spent == 100
    assert result["overall"]["spent"] == 1500
    assert [r.name for r in result["spending"]] == ["Housing", "Dining Out", "Emergency Fund"]

    goal = result["goals"][0]
    assert goal.saved == 400
    assert goal.contributed_this_month == 100
    assert goal.plan.months_remaining == 4
    assert goal.plan.monthly_amount == 300
    assert goal.status == "behind"


def test_default_service_warns_about_rule_and_income():
    config = make_config(monthly_income=0, rule=BudgetRule(50, 30, 30))
    records = (Expense("x", "?", 5, "Other", "Housing", "2025-01-02"),)
    svc = default_budget_service()
    warnings = svc.warnings(svc.monthly_report("2025-1", config, records))
    assert "Percentages add up to 110%, expected 100%" in warnings
    assert "Monthly income is not set" in warnings
    assert any("not one of Needs, Savings, Wants" in w for w in warnings)


def test_limit_mode_skips_percentage_warnings():
    config = make_config(
        monthly_income=0,
        rule=BudgetRule(10, 10, 10),
        use_limit_mode=True,
        category_limits={"housing": 1000},
    )
    svc = default_budget_service()
    rpt = svc.monthly_report("2025-1", config, make_expenses())
    assert svc.warnings(rpt) == []
    assert rpt["result"]["buckets"]["Needs"].target == 1000
