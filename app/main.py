import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from dataclasses import replace
from datetime import date

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from budget_engine.allocation import status_band
from budget_engine.analytics import monthly_totals, share_of, top_categories
from budget_engine.categories import (
    SORT_OPTIONS,
    add_category,
    category_id_for,
    delete_category,
    search_categories,
    sort_categories,
)
from budget_engine.domain import BUCKETS, CURRENCIES, SAVINGS, AdditionalIncome, BudgetRule, Category, Expense, SavingsGoal
from budget_engine.events import event_bus, expense_alerts
from budget_engine.formatting import DENOMINATION_FORMATS, format_previews, format_with_denomination
from budget_engine.goals import delete_goal, set_goal
from budget_engine.periods import (
    MONTH,
    PERIOD_MONTHS,
    available_months,
    current_month_key,
    filter_by_month,
    filter_by_period,
    format_month_year,
    period_income,
    period_label,
)
from budget_engine.services import default_budget_service
from budget_engine.settings import (
    BudgetConfig,
    complete_onboarding,
    get_settings,
    load_state,
    needs_onboarding,
    save_state,
)
from budget_engine.store import (
    add_expense,
    add_income,
    clear_sample_expenses,
    delete_expense,
    delete_income,
    has_sample_expenses,
    load_seed,
    new_id,
    sample_expenses,
)

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("budget_app")

st.set_page_config(page_title="Budget Planner", layout="wide")
STATUS_COLORS = {"ok": "#4cd964", "warning": "#ff9500", "over": "#ff3b30"}


def initial_state():
    config, expenses = load_state(settings.state_file)
    if settings.state_file.exists():
        return config, expenses
    if settings.sample_file.exists():
        categories, expenses = load_seed(str(settings.sample_file))
        return replace(config, categories=categories or config.categories), expenses
    return config, sample_expenses()


if "budget_config" not in st.session_state:
    st.session_state.budget_config, st.session_state.expenses = initial_state()
if "alerts" not in st.session_state:
    st.session_state.alerts = []


def persist(config: BudgetConfig, expenses) -> None:
    st.session_state.budget_config = config
    st.session_state.expenses = expenses
    save_state(config, expenses, settings.state_file)


config: BudgetConfig = st.session_state.budget_config
expenses = st.session_state.expenses
symbol = config.currency.symbol


def money(value) -> str:
    return format_with_denomination(value, config.denomination_format, symbol)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🧾 Expenses", "📊 Analytics", "🎯 Savings Goals", "⚙️ Settings"]
)
if needs_onboarding(config):
    st.sidebar.info("Set your income and budget split to get started.")
    menu = "⚙️ Settings"
months = available_months(expenses)
selected_month = st.sidebar.selectbox(
    "Month",
    options=months,
    index=months.index(current_month_key()),
    format_func=format_month_year,
)

service = default_budget_service()
report = service.monthly_report(selected_month, config, expenses)
result = report["result"]
for warning in service.warnings(report):
    st.sidebar.warning(warning)

if menu == "🏠 Overview":
    st.title(f"🏠 {format_month_year(selected_month)}")
    totals = result["overall"]
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Income", money(result["income"]))
    with k2:
        st.metric("Spent", money(totals["spent"]))
    with k3:
        st.metric("Remaining", money(totals["remaining"]))

    for bucket, summary in result["buckets"].items():
        pct = config.rule.percentage(bucket)
        header = f"{bucket}" if config.use_limit_mode else f"{bucket} ({pct}%)"
        st.subheader(header)
        st.progress(summary.percent_used / 100)
        band = status_band(summary.raw_percent)
        st.markdown(
            f"<span style='color:{STATUS_COLORS[band]}'>{money(summary.spent)} of {money(summary.target)}"
            f" · {summary.raw_percent:.0f}% used</span>",
            unsafe_allow_html=True,
        )
        if summary.is_over_budget:
            st.error(f"Over budget by {money(-summary.remaining)}")
        rows = [
            {
                "Category": f"{row.icon} {row.name}",
                "Spent": money(row.spent),
                "Limit": money(row.limit) if row.limit else "-",
                "Over limit": "⚠️" if row.is_over_limit else "",
            }
            for row in summary.categories
        ]
        if rows:
            st.table(pd.DataFrame(rows))

elif menu == "🧾 Expenses":
    st.title("🧾 Expenses")
    for alert in st.session_state.alerts:
        st.warning(alert)

    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            title = st.text_input("Title")
            amount = st.number_input(f"Amount ({symbol})", min_value=0.0, step=10.0, format="%.2f")
            when = st.date_input("Date", value=date.today())
        with col2:
            category = st.selectbox(
                "Category",
                options=sort_categories(config.categories, config.category_sort),
                format_func=lambda c: f"{c.icon} {c.name} · {c.bucket}",
            )
        submitted = st.form_submit_button("Add Expense")

    if submitted and category is not None:
        expense = Expense(
            id=new_id(),
            title=title or category.name,
            amount=float(amount),
            bucket=category.bucket,
            subcategory=category.name,
            date=when,
            icon=category.icon,
        )
        updated = add_expense(expenses, expense)
        persist(config, updated)
        new_report = service.monthly_report(selected_month, config, updated)
        st.session_state.alerts = expense_alerts(event_bus, expense, new_report["result"]["buckets"], symbol)
        logger.info("added expense %s (%s)", expense.id, expense.bucket)
        st.rerun()

    if has_sample_expenses(expenses) and st.button("🧹 Remove sample expenses"):
        persist(config, clear_sample_expenses(expenses))
        st.rerun()

    month_expenses = filter_by_month(expenses, selected_month)
    if month_expenses:
        df = pd.DataFrame([
            {
                "id": e.id,
                "Date": pd.to_datetime(e.date, errors="coerce"),
                "Title": f"{e.icon} {e.title}",
                "Bucket": e.bucket,
                "Category": e.subcategory,
                "Amount": e.amount,
            }
            for e in month_expenses
        ])
        display = df.drop(columns=["id"]).assign(
            Date=lambda x: x["Date"].dt.strftime("%Y-%m-%d").fillna("-"),
            Amount=lambda x: x["Amount"].map(money),
        )
        st.dataframe(display, use_container_width=True)
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name=f"expenses_{selected_month}.csv")

        to_delete = st.selectbox(
            "Delete expense",
            options=[None] + [e.id for e in month_expenses],
            format_func=lambda i: "-" if i is None else next(f"{e.title} ({money(e.amount)})" for e in month_expenses if e.id == i),
        )
        if to_delete and st.button("🗑️ Delete"):
            persist(config, delete_expense(expenses, to_delete))
            st.rerun()
    else:
        st.info("No expenses for this month.")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    period = st.radio("Period", list(PERIOD_MONTHS), horizontal=True)
    period_expenses = filter_by_month(expenses, selected_month) if period == MONTH else filter_by_period(expenses, period)
    st.caption(format_month_year(selected_month) if period == MONTH else period_label(period))

    income = period_income(config.monthly_income, period)
    spent = sum(e.amount for e in period_expenses)
    k1, k2 = st.columns(2)
    with k1:
        st.metric("Period income", money(income))
    with k2:
        st.metric("Remaining", money(income - spent))

    top = list(top_categories(period_expenses, config.categories, 4))
    if top:
        pie_df = pd.DataFrame([
            {"Category": f"{row.icon} {row.name}", "Share": share}
            for row, share in share_of(top)
        ])
        fig_pie = px.pie(pie_df, values="Share", names="Category", title="Top categories")
        fig_pie.update_layout(height=320)
        st.plotly_chart(fig_pie, use_container_width=True)

    trend_months = list(reversed(months[:6]))
    trend = monthly_totals(expenses, trend_months)
    fig_ts = go.Figure()
    for bucket in BUCKETS:
        fig_ts.add_trace(go.Bar(
            x=[format_month_year(m) for m in trend_months],
            y=[trend[m][bucket] for m in trend_months],
            name=bucket,
        ))
    fig_ts.update_layout(barmode="stack", template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

elif menu == "🎯 Savings Goals":
    st.title("🎯 Savings Goals")
    for progress in result["goals"]:
        with st.expander(f"{progress.name}: {progress.progress:.1f}% complete"):
            col1, col2 = st.columns(2)
            with col1:
                st.metric("Goal", money(progress.goal.amount))
                st.metric("Saved", money(progress.saved))
            with col2:
                st.metric("Remaining", money(progress.remaining))
                if progress.plan.goal_met:
                    st.success("Goal reached 🎉")
                else:
                    st.metric(
                        "Monthly contribution",
                        money(progress.plan.monthly_amount),
                        f"{progress.status} · {progress.plan.months_remaining} months left",
                    )
            st.progress(progress.progress / 100)
            if progress.goal.note:
                st.caption(progress.goal.note)
            if st.button("🗑️ Delete goal", key=f"delete_goal_{progress.category_id}"):
                persist(replace(config, savings_goals=delete_goal(config.savings_goals, progress.category_id)), expenses)
                st.rerun()

    st.subheader("Set a goal")
    savings_cats = [c for c in config.categories if c.bucket == SAVINGS]
    with st.form("goal_form"):
        goal_cat = st.selectbox("Category", savings_cats, format_func=lambda c: f"{c.icon} {c.name}")
        goal_amount = st.number_input(f"Target ({symbol})", min_value=0.0, step=100.0)
        goal_date = st.text_input("Target date (MM/YYYY)")
        goal_note = st.text_input("Note")
        if st.form_submit_button("Save goal") and goal_cat is not None:
            goal = SavingsGoal(amount=goal_amount, target_date=goal_date or None, note=goal_note or None)
            persist(replace(config, savings_goals=set_goal(config.savings_goals, goal_cat.id, goal)), expenses)
            st.rerun()

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    with st.form("budget_form"):
        income = st.number_input(f"Monthly income ({symbol})", min_value=0.0, value=float(config.monthly_income), step=100.0)
        c1, c2, c3 = st.columns(3)
        needs = c1.number_input("Needs %", min_value=0, max_value=100, value=config.rule.needs)
        savings = c2.number_input("Savings %", min_value=0, max_value=100, value=config.rule.savings)
        wants = c3.number_input("Wants %", min_value=0, max_value=100, value=config.rule.wants)
        use_limits = st.checkbox("Use per-category limits instead of percentages", value=config.use_limit_mode)
        currency = st.selectbox(
            "Currency", CURRENCIES, index=CURRENCIES.index(config.currency),
            format_func=lambda c: f"{c.symbol} {c.name}",
        )
        previews = format_previews(1234567, symbol)
        denomination = st.selectbox(
            "Number format", DENOMINATION_FORMATS,
            index=DENOMINATION_FORMATS.index(config.denomination_format),
            format_func=lambda f: f"{f} ({previews[f]})",
        )
        if st.form_submit_button("Save"):
            updated = replace(
                config,
                monthly_income=income,
                rule=BudgetRule(int(needs), int(savings), int(wants)),
                use_limit_mode=use_limits,
                currency=currency,
                denomination_format=denomination,
            )
            persist(complete_onboarding(updated), expenses)
            st.rerun()

    st.subheader("Additional income")
    month_income = filter_by_month(config.additional_income, selected_month)
    for item in month_income:
        col1, col2 = st.columns([4, 1])
        col1.write(f"{item.description}: {money(item.amount)}")
        if col2.button("🗑️", key=f"del_income_{item.id}"):
            persist(replace(config, additional_income=delete_income(config.additional_income, item.id)), expenses)
            st.rerun()
    with st.form("income_form", clear_on_submit=True):
        description = st.text_input("Description")
        extra = st.number_input(f"Amount ({symbol})", min_value=0.0, step=50.0)
        received = st.date_input("Received", value=date.today())
        if st.form_submit_button("Add income") and extra > 0:
            item = AdditionalIncome(new_id(), description or "Income", extra, received)
            persist(replace(config, additional_income=add_income(config.additional_income, item)), expenses)
            st.rerun()

    st.subheader("Categories")
    sort_option = st.selectbox("Sort by", SORT_OPTIONS, index=SORT_OPTIONS.index(config.category_sort)
                               if config.category_sort in SORT_OPTIONS else 1)
    query = st.text_input("Search categories")
    limits = dict(config.category_limits)
    for cat in search_categories(sort_categories(config.categories, sort_option), query):
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.write(f"{cat.icon} {cat.name} · {cat.bucket}")
        if config.use_limit_mode:
            limits[cat.id] = col2.number_input(
                "Limit", min_value=0.0, value=float(limits.get(cat.id, 0.0)), key=f"limit_{cat.id}",
                label_visibility="collapsed",
            )
        if col3.button("🗑️", key=f"del_cat_{cat.id}"):
            persist(replace(config, categories=delete_category(config.categories, cat.id)), expenses)
            st.rerun()
    if config.use_limit_mode and st.button("Save limits"):
        persist(replace(config, category_limits=limits, category_sort=sort_option), expenses)
        st.rerun()

    with st.form("category_form", clear_on_submit=True):
        name = st.text_input("New category")
        icon = st.text_input("Icon", value="💡")
        bucket = st.selectbox("Bucket", BUCKETS)
        if st.form_submit_button("Add category") and name.strip():
            try:
                cats = add_category(config.categories, Category(category_id_for(name), name.strip(), icon, bucket))
            except ValueError as e:
                st.error(str(e))
            else:
                persist(replace(config, categories=cats, category_sort=sort_option), expenses)
                st.rerun()
