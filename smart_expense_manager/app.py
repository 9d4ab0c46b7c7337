import sys
from datetime import date
from pathlib import Path

import pandas as pd
import streamlit as st

# Allow `streamlit run smart_expense_manager/app.py` from a plain checkout
sys.path.append(str(Path(__file__).resolve().parent.parent))

from smart_expense_manager import config
from smart_expense_manager.aggregation import (
    category_breakdown,
    forecast,
    month_expense,
    monthly_series,
    quick_stats,
    savings_rate,
    totals,
)
from smart_expense_manager.alerts import budget_headline, evaluate_alerts
from smart_expense_manager.charts import forecast_line, spending_pie, trend_bars
from smart_expense_manager.database import EXPENSE, INCOME, SessionLocal, init_db
from smart_expense_manager.errors import ExpenseManagerError
from smart_expense_manager.gamification import compute_achievements
from smart_expense_manager.health import compute_health_score
from smart_expense_manager.insights import compute_highlights, generate_actionable_tips, generate_insights
from smart_expense_manager.logging_setup import configure_logging, get_logger
from smart_expense_manager.planning import budget_status, budget_summary, goal_progress, goal_savings_plan
from smart_expense_manager.records import load_frame, validate_transaction_form
from smart_expense_manager.reports import PERIODS, build_report, report_filename, to_csv, to_json
from smart_expense_manager.repository import BudgetRepository, GoalRepository
from smart_expense_manager.storage import default_backend
from smart_expense_manager.store import TransactionStore

# --- Configuration ---
st.set_page_config(page_title="Smart Expense Manager", layout="wide", page_icon="💰")
configure_logging()
logger = get_logger(__name__)

init_db()

if "db" not in st.session_state:
    st.session_state.db = SessionLocal()


def get_store() -> TransactionStore:
    return TransactionStore(st.session_state.db)


@st.cache_resource
def get_backend():
    return default_backend()


def money(value: float, decimals: int = 2) -> str:
    return f"{config.CURRENCY}{value:,.{decimals}f}"


# --- Notifications that survive st.rerun() ---
def flash(message: str, icon: str = "✅"):
    st.session_state["flash"] = (message, icon)


def show_flash():
    pending = st.session_state.pop("flash", None)
    if pending:
        st.toast(pending[0], icon=pending[1])


def mutate(action, success: str, failure: str, clear_key: str | None = None):
    """Run a store call; refetch everything on success, keep state on failure."""
    with st.spinner("Saving..."):
        try:
            action()
        except ExpenseManagerError as e:
            logger.warning("%s: %s", failure, e)
            st.error(f"{failure}: {e}")
            return
    if clear_key:
        st.session_state.pop(clear_key, None)
    flash(success)
    st.rerun()


# --- Authentication ---
def check_login():
    if st.session_state.get("user_id"):
        return True

    st.title("💰 Smart Expense Manager")
    st.caption("Sign in to track your income, expenses, budgets and goals.")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", use_container_width=True)

    if submitted:
        try:
            profile = get_store().authenticate(username.strip(), password)
        except ExpenseManagerError as e:
            st.error(f"Sign in failed: {e}")
            return False
        if profile:
            st.session_state["user_id"] = profile.id
            st.rerun()
        else:
            st.error("Invalid username or password")
    return False


if not check_login():
    st.stop()

show_flash()

user_id = st.session_state["user_id"]
store = get_store()
goals_repo = GoalRepository(get_backend())
budgets_repo = BudgetRepository(get_backend())

# --- Data Loading ---
try:
    profile = store.get_profile(user_id)
    rows = store.list_transactions(user_id)
except ExpenseManagerError as e:
    st.error(f"Could not load your data: {e}")
    st.stop()

df, rejected = load_frame(rows)
today = date.today()
monthly_budget = float(profile.monthly_budget or 0) if profile else 0.0

income, expense, balance = totals(df)
spent_this_month = month_expense(df, today)
expense_forecast = forecast(df, today)

# Sidebar
with st.sidebar:
    st.header(f"👋 {profile.full_name if profile else 'Welcome'}")

    st.subheader("⚙️ Settings")
    with st.form("budget_settings"):
        new_budget = st.number_input("Monthly budget", min_value=0.0, step=500.0, value=monthly_budget)
        if st.form_submit_button("Save Budget", use_container_width=True):
            mutate(
                lambda: store.update_monthly_budget(user_id, new_budget),
                "Monthly budget updated",
                "Failed to update budget",
            )

    st.divider()
    if st.button("🚪 Sign Out", use_container_width=True):
        st.session_state.pop("user_id", None)
        st.rerun()

st.title("💰 Smart Expense Manager")

if rejected:
    st.warning(
        f"{len(rejected)} stored transaction(s) have invalid data and were left out of every total. "
        "Edit or delete them to include them again."
    )

tab1, tab2, tab3, tab4, tab5 = st.tabs(["📊 Dashboard", "💳 Transactions", "🎯 Budgets & Goals", "🧠 Insights", "📑 Reports"])

with tab1:
    col1, col2, col3 = st.columns(3)
    col1.metric("💵 Total Balance", money(balance))
    col2.metric("📈 Total Income", money(income))
    col3.metric("📉 Total Expenses", money(expense))

    for alert in evaluate_alerts(spent_this_month, monthly_budget, expense_forecast):
        banner = getattr(st, alert.severity)
        banner(f"**{alert.title}** {alert.message}")

    headline = budget_headline(spent_this_month, monthly_budget)
    if headline:
        st.caption("Monthly Budget Progress")
        st.progress(min(1.0, headline.percentage / 100), text=f"{headline.percentage:.1f}% of {money(monthly_budget)} used")
    else:
        st.caption("Set a monthly budget in the sidebar to unlock budget alerts.")

    breakdown = category_breakdown(df)
    series = monthly_series(df, config.MONTHS_BACK, today)
    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(spending_pie(breakdown), use_container_width=True)
    with c2:
        st.plotly_chart(trend_bars(series), use_container_width=True)

    st.subheader("🕒 Recent Transactions")
    if df.empty:
        st.info("No transactions yet. Add your first transaction to get started!")
    else:
        recent = df.head(config.RECENT_LIMIT).copy()
        recent["Amount"] = recent.apply(
            lambda r: f"{'+' if r['Type'] == INCOME else '-'}{money(r['Amount'])}", axis=1
        )
        recent["Date"] = recent["Date"].dt.strftime("%b %d, %Y")
        st.dataframe(recent[["Date", "Category", "Description", "Amount"]], hide_index=True, use_container_width=True)


with tab2:
    editing_id = st.session_state.get("edit_txn_id")
    editing = next((r for r in rows if r["id"] == editing_id), None) if editing_id else None

    st.subheader("✏️ Edit Transaction" if editing else "➕ Add Transaction")

    types = [EXPENSE, INCOME]
    txn_type = st.radio(
        "Type",
        types,
        index=types.index(editing["type"]) if editing and editing["type"] in types else 0,
        format_func=str.title,
        horizontal=True,
        key=f"txn_type_{editing_id}",
    )
    try:
        categories = store.list_categories(txn_type)
    except ExpenseManagerError as e:
        st.error(f"Could not load categories: {e}")
        categories = []

    cat_ids = [c["id"] for c in categories]
    cat_by_id = {c["id"]: c for c in categories}

    with st.form("transaction_form", clear_on_submit=True):
        default_cat = cat_ids.index(editing["category_id"]) if editing and editing["category_id"] in cat_ids else 0
        category_id = st.selectbox(
            "Category",
            cat_ids,
            index=default_cat if cat_ids else None,
            format_func=lambda cid: f"{cat_by_id[cid]['icon']} {cat_by_id[cid]['name']}",
        )
        amount = st.text_input("Amount", value=str(editing["amount"]) if editing else "", placeholder="0.00")
        txn_date = st.date_input("Date", value=editing["transaction_date"] if editing else today)
        description = st.text_area("Description", value=(editing or {}).get("description") or "", placeholder="Add a note...")

        fc1, fc2 = st.columns(2)
        submitted = fc1.form_submit_button("Update" if editing else "Add", use_container_width=True)
        cancelled = fc2.form_submit_button("Cancel", use_container_width=True)

    if cancelled:
        st.session_state.pop("edit_txn_id", None)
        st.rerun()

    if submitted:
        try:
            payload = validate_transaction_form(
                txn_type,
                category_id,
                cat_by_id[category_id]["name"] if category_id in cat_by_id else "",
                amount,
                txn_date,
                description,
            )
        except ExpenseManagerError as e:
            st.error(str(e))
        else:
            if editing:
                mutate(
                    lambda: store.update_transaction(user_id, editing["id"], payload),
                    "Transaction updated successfully",
                    "Failed to save transaction",
                    clear_key="edit_txn_id",
                )
            else:
                mutate(
                    lambda: store.add_transaction(user_id, payload),
                    "Transaction added successfully",
                    "Failed to save transaction",
                )

    st.divider()
    st.subheader("Transaction Log")
    if not rows:
        st.info("No transactions.")
    else:
        col1, col2 = st.columns(2)
        search_term = col1.text_input("Search")
        cats = ["All"] + sorted({r["category_name"] or "Uncategorized" for r in rows})
        sel_cat = col2.selectbox("Category", cats)

        shown = [
            r for r in rows
            if (sel_cat == "All" or r["category_name"] == sel_cat)
            and (not search_term or search_term.lower() in (r["description"] or "").lower())
        ]
        for r in shown:
            sign = "+" if r["type"] == INCOME else "-"
            c1, c2, c3, c4 = st.columns([2, 4, 2, 1])
            c1.markdown(f"**{r['category_name']}**  \n{r['transaction_date']:%b %d, %Y}")
            c2.caption(r["description"] or "")
            c3.markdown(f"{sign}{money(r['amount'])}" if isinstance(r["amount"], (int, float)) else f"⚠️ {r['amount']}")
            with c4:
                if st.button("✏️", key=f"edit_{r['id']}", help="Edit"):
                    st.session_state["edit_txn_id"] = r["id"]
                    st.rerun()
                if st.button("🗑️", key=f"del_{r['id']}", help="Delete"):
                    mutate(
                        lambda txn_id=r["id"]: store.delete_transaction(user_id, txn_id),
                        "Transaction deleted",
                        "Failed to delete transaction",
                    )


with tab3:
    st.header("🎯 Budget Planner")

    try:
        budgets = budgets_repo.list(user_id)
    except ExpenseManagerError as e:
        st.error(f"Could not load budgets: {e}")
        budgets = []

    status = budget_status(budgets, df, today)
    summary = budget_summary(status)

    s1, s2, s3 = st.columns(3)
    s1.metric("Total Budget", money(summary["total_budget"]))
    s2.metric("Spent This Month", money(summary["total_spent"]))
    s3.metric("Overall Progress", f"{summary['overall_progress']:.1f}%")
    st.progress(min(1.0, summary["overall_progress"] / 100))

    editing_budget_id = st.session_state.get("edit_budget_id")
    editing_budget = next((b for b in budgets if b.id == editing_budget_id), None)

    with st.expander("✏️ Edit Budget" if editing_budget else "➕ Add New Budget", expanded=bool(editing_budget)):
        with st.form("budget_form", clear_on_submit=True):
            known = sorted(set(df["Category"].dropna().unique().tolist())) if not df.empty else []
            category_val = st.text_input(
                "Category",
                value=editing_budget.category if editing_budget else "",
                placeholder="e.g., Food, Transport",
                help=("Known categories: " + ", ".join(known)) if known else None,
            )
            amount_val = st.text_input(
                "Budget Amount",
                value=str(editing_budget.budget_amount) if editing_budget else "",
                placeholder="5000",
            )
            bc1, bc2 = st.columns(2)
            save = bc1.form_submit_button("Update Budget" if editing_budget else "Add Budget", use_container_width=True)
            cancel = bc2.form_submit_button("Cancel", use_container_width=True)

        if cancel:
            st.session_state.pop("edit_budget_id", None)
            st.rerun()
        if save:
            if editing_budget:
                mutate(
                    lambda: budgets_repo.update(user_id, editing_budget.id, category_val, amount_val),
                    "Budget updated successfully!",
                    "Failed to update budget",
                    clear_key="edit_budget_id",
                )
            else:
                mutate(
                    lambda: budgets_repo.add(user_id, category_val, amount_val),
                    "Budget added successfully!",
                    "Failed to add budget",
                )

    if not status:
        st.info("No budgets set yet. Add your first budget above.")
    for b in status:
        c1, c2 = st.columns([5, 1])
        with c1:
            st.markdown(f"**{b['category']}** · {money(b['spent_amount'])} / {money(b['budget_amount'])}")
            st.progress(min(1.0, b["pct"] / 100), text=f"{b['pct']:.0f}%")
            if b["is_over"]:
                st.error(f"Over budget by {money(b['over_by'])}")
        with c2:
            if st.button("✏️", key=f"edit_budget_{b['id']}"):
                st.session_state["edit_budget_id"] = b["id"]
                st.rerun()
            if st.button("🗑️", key=f"del_budget_{b['id']}"):
                mutate(
                    lambda budget_id=b["id"]: budgets_repo.delete(user_id, budget_id),
                    "Budget deleted successfully!",
                    "Failed to delete budget",
                )

    st.divider()
    st.header("🏁 Smart Goals")

    with st.expander("➕ Add Goal"):
        with st.form("goal_form", clear_on_submit=True):
            title = st.text_input("Goal Title", placeholder="e.g., Save for vacation")
            target = st.text_input("Target Amount", placeholder="10000")
            deadline = st.date_input("Deadline", value=None, min_value=today)
            if st.form_submit_button("Create Goal", use_container_width=True):
                mutate(
                    lambda: goals_repo.add(user_id, title, target, deadline),
                    "Goal added successfully!",
                    "Failed to add goal",
                )

    try:
        goals = goals_repo.list(user_id)
    except ExpenseManagerError as e:
        st.error(f"Could not load goals: {e}")
        goals = []

    if not goals:
        st.info("No goals yet. Create your first savings goal!")
    for goal in goals:
        plan = goal_savings_plan(goal, today)
        progress = goal_progress(goal)
        c1, c2 = st.columns([5, 1])
        with c1:
            st.markdown(f"**{goal.title}** · {money(goal.current_amount, 0)} / {money(goal.target_amount, 0)}")
            st.progress(min(1.0, progress / 100), text=f"{progress:.0f}% • due {goal.deadline:%b %d, %Y}")
            if plan["is_overdue"]:
                st.warning("Deadline passed before the goal was reached.")
            elif plan["remaining_needed"] > 0:
                st.caption(
                    f"Save about {money(plan['required_monthly'], 0)}/mo for {plan['months_remaining']} month(s) "
                    f"to cover the remaining {money(plan['remaining_needed'], 0)}."
                )
            with st.form(f"goal_progress_{goal.id}"):
                saved = st.number_input("Saved so far", min_value=0.0, value=float(goal.current_amount), step=100.0)
                if st.form_submit_button("Update Progress"):
                    mutate(
                        lambda goal_id=goal.id, amount=saved: goals_repo.update_progress(user_id, goal_id, amount),
                        "Goal progress updated",
                        "Failed to update goal",
                    )
        with c2:
            if st.button("🗑️", key=f"del_goal_{goal.id}"):
                mutate(
                    lambda goal_id=goal.id: goals_repo.delete(user_id, goal_id),
                    "Goal deleted",
                    "Failed to delete goal",
                )


with tab4:
    st.header("🧠 Smart Insights")

    if df.empty:
        st.info("Need transaction data to generate insights.")
    else:
        highlights = compute_highlights(df, today)
        if highlights:
            st.subheader("This Month")
            h1, h2, h3, h4 = st.columns(4)
            h1.metric("Income", money(highlights["income"], 0))
            h2.metric("Spend", money(highlights["spend"], 0))
            h3.metric("Net Cashflow", money(highlights["net"], 0))
            h4.metric("Top Category", highlights.get("top_category") or "—")

        st.subheader("✨ Insights")
        if st.button("Refresh Insights" if st.session_state.get("insights") else "Generate Insights"):
            st.session_state["insights"] = generate_insights(df)
            st.toast("Insights generated successfully!")
        if st.session_state.get("insights"):
            st.markdown(st.session_state["insights"])

        st.subheader("Actionable Tips")
        tips = generate_actionable_tips(df, today)
        if tips:
            for tip in tips:
                st.markdown(tip)
        else:
            st.success("✅ Your finances look stable! No alerts this month.")

        st.subheader("🔮 Spending Forecast")
        st.plotly_chart(forecast_line(monthly_series(df, config.MONTHS_BACK, today), expense_forecast), use_container_width=True)
        st.caption(f"3-month average projects about {money(expense_forecast, 0)} of spending next month.")

    st.subheader("❤️ Financial Health Score")
    health = compute_health_score(df)
    hc1, hc2 = st.columns([1, 2])
    hc1.metric("Overall", f"{round(health.overall)}", help="Weighted blend of the four scores on the right")
    hc1.markdown(f"**{health.status}**")
    with hc2:
        for metric in health.metrics:
            st.progress(min(1.0, metric.score / 100), text=f"{metric.name}: {round(metric.score)}%")
    for tip in health.tips:
        st.caption(f"• {tip}")

    st.subheader("🏆 Achievements")
    achievements = compute_achievements(df)
    a1, a2 = st.columns(2)
    a1.metric("Level", achievements["level"])
    a1.progress(achievements["level_progress"] / 100, text=f"{achievements['level_progress']}/100 XP")
    a2.metric("🔥 Streak", f"{achievements['streak']} days")
    badge_cols = st.columns(len(achievements["badges"]))
    for col, badge in zip(badge_cols, achievements["badges"]):
        col.markdown(f"{'🏅' if badge['achieved'] else '🔒'} **{badge['name']}**")
        col.caption(badge["description"])
        if not badge["achieved"]:
            col.progress(badge["progress"] / 100)

    st.subheader("⚡ Quick Stats")
    qs = quick_stats(df, today)
    q1, q2, q3 = st.columns(3)
    q1.metric("Today", qs["today_count"], help=f"{money(qs['today_amount'], 0)}")
    q2.metric("Yesterday", qs["yesterday_count"], help=f"{money(qs['yesterday_amount'], 0)}")
    q3.metric("Avg Transaction", money(qs["avg_transaction"], 0), help=f"{qs['transaction_count']} total")
    q4, q5, q6 = st.columns(3)
    q4.metric("Daily Avg Expense", money(qs["avg_daily_expense"], 0), help="This month")
    q5.metric("Largest Transaction", money(qs["largest_amount"], 0), help=qs["largest_category"] or "N/A")
    q6.metric("Active Days", qs["active_days"], help="Days with transactions")
    st.caption(
        f"This month: {qs['month_count']} transactions • savings rate {savings_rate(income, expense):.1f}% overall"
    )


with tab5:
    st.header("📑 Financial Reports")

    period = st.selectbox("Period", list(PERIODS), format_func=PERIODS.get)
    report = build_report(df, period, today)
    summary = report["summary"]

    st.markdown(f"**Report for {report['period']}** · {summary['transaction_count']} transactions")
    r1, r2, r3, r4 = st.columns(4)
    r1.metric("Income", money(summary["total_income"]))
    r2.metric("Expenses", money(summary["total_expense"]))
    r3.metric("Net Savings", money(summary["net_savings"]))
    r4.metric("Savings Rate", f"{summary['savings_rate']:.1f}%")

    top = sorted(report["category_breakdown"], key=lambda c: c["amount"], reverse=True)[:5]
    if top:
        st.subheader("Top Categories")
        for entry in top:
            st.progress(min(1.0, entry["percentage"] / 100), text=f"{entry['category']}: {money(entry['amount'])} ({entry['percentage']:.1f}%)")

    if report["transactions"]:
        with st.expander("Detailed transactions"):
            st.dataframe(pd.DataFrame(report["transactions"]), hide_index=True, use_container_width=True)

    d1, d2 = st.columns(2)
    d1.download_button(
        "⬇️ Export JSON",
        data=to_json(report),
        file_name=report_filename(report, "json"),
        mime="application/json",
        use_container_width=True,
    )
    d2.download_button(
        "⬇️ Export CSV",
        data=to_csv(report),
        file_name=report_filename(report, "csv"),
        mime="text/csv",
        use_container_width=True,
    )
