"""
Streamlit Frontend for the Finance Ledger

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every money change is explicit (a form submit), never implicit
3. Clear error messages in simple language
4. Stale totals are shown, with a note, rather than hidden

The UI is a thin layer: all rules live in the engine (src/ledger).
"""

import asyncio
from datetime import date, timedelta

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.errors import FinanceError, ValidationError
from src.ledger import format_percent_change
from src.models.ledger import BudgetPeriod, BudgetStatus, EntryKind, ReportType
from src.orchestrator import AppComponents, create_app_components


# Page configuration
st.set_page_config(
    page_title="Finance Ledger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


STATUS_ICONS = {
    BudgetStatus.ON_TRACK: "🟢",
    BudgetStatus.WARNING: "🟠",
    BudgetStatus.EXCEEDED: "🔴",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    return f"{get_settings().app.currency_code} {amount:,.2f}"


def show_error(error: FinanceError):
    """Render an engine error in plain language."""
    if isinstance(error, ValidationError):
        st.error("Please fix the following:")
        for issue in error.issues:
            st.markdown(f"- **{issue.field}**: {issue.message}")
    else:
        st.error(error.message)


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("💰 Finance Ledger")
    st.sidebar.markdown("---")

    user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", "me"))
    st.session_state.user_id = user_id

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💵 Income", "🧾 Expenses", "🎯 Budgets", "📄 Reports", "⚙️ Settings"],
        index=0,
    )

    if not user_id:
        st.info("Enter a user name in the sidebar to begin.")
        return

    if page == "📊 Dashboard":
        render_dashboard_page(components, user_id)
    elif page == "💵 Income":
        render_entries_page(components, user_id, EntryKind.INCOME)
    elif page == "🧾 Expenses":
        render_entries_page(components, user_id, EntryKind.EXPENSE)
    elif page == "🎯 Budgets":
        render_budgets_page(components, user_id)
    elif page == "📄 Reports":
        render_reports_page(components, user_id)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_dashboard_page(components: AppComponents, user_id: str):
    """Render totals, budgets and trends."""
    st.title("📊 Dashboard")

    if st.button("🔄 Refresh totals"):
        try:
            run_async(components.dashboard.refresh(user_id))
        except FinanceError as e:
            show_error(e)

    try:
        payload = run_async(components.dashboard.load(user_id))
    except FinanceError as e:
        show_error(e)
        return

    aggregate = payload.aggregate
    change = payload.period_change
    col1, col2, col3 = st.columns(3)
    col1.metric("Total income", money(aggregate.total_income), format_percent_change(change.income_change))
    col2.metric("Total expense", money(aggregate.total_expense), format_percent_change(change.expense_change))
    col3.metric("Net balance", money(aggregate.net_balance), format_percent_change(change.net_balance_change))
    st.caption("Change compares the last 15 days with the 15 days before.")

    st.markdown("---")
    st.subheader("Weekly cash flow")
    st.bar_chart(
        {
            "Income": {b.label: float(b.income) for b in payload.weekly_trend},
            "Expense": {b.label: float(b.expense) for b in payload.weekly_trend},
        }
    )

    st.subheader("Daily cash flow")
    st.line_chart(
        {
            "Income": {b.start.isoformat(): float(b.income) for b in payload.daily_trend},
            "Expense": {b.start.isoformat(): float(b.expense) for b in payload.daily_trend},
        }
    )

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Recent income")
        for entry in payload.recent_incomes:
            st.markdown(f"- {entry.source}: **{money(entry.amount)}** ({entry.entry_date:%d %b %Y})")
        st.subheader("Income by category")
        st.table([{"Category": k, "Total": money(v)} for k, v in payload.category_totals.income.items()])
    with col2:
        st.subheader("Recent expenses")
        for entry in payload.recent_expenses:
            st.markdown(f"- {entry.description}: **{money(entry.amount)}** ({entry.entry_date:%d %b %Y})")
        st.subheader("Expenses by category")
        st.table([{"Category": k, "Total": money(v)} for k, v in payload.category_totals.expense.items()])

    if payload.budgets:
        st.markdown("---")
        st.subheader("Budgets")
        render_budget_progress(payload.budgets)


def render_budget_progress(budgets):
    for budget in budgets:
        icon = STATUS_ICONS[budget.status]
        st.markdown(
            f"{icon} **{budget.category}** ({budget.period.value}): "
            f"{money(budget.actual_amount)} of {money(budget.planned_amount)}"
        )
        st.progress(int(budget.display_percent) / 100)


def render_entries_page(components: AppComponents, user_id: str, kind: EntryKind):
    """Render the add form and list for incomes or expenses."""
    is_income = kind == EntryKind.INCOME
    label_field = "source" if is_income else "description"
    st.title("💵 Income" if is_income else "🧾 Expenses")

    with st.form(f"add_{kind.value}", clear_on_submit=True):
        label = st.text_input("Source" if is_income else "Description")
        amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
        entry_date = st.date_input("Date", value=date.today())
        category = st.text_input("Category (optional)")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        payload = {
            label_field: label,
            # number_input yields a float; hand the engine its text form.
            "amount": f"{amount:.2f}",
            "date": entry_date,
            "category": category,
        }
        try:
            result = run_async(components.ledger.create_entry(user_id, kind, payload))
            st.success("Saved.")
            if result.aggregate_stale:
                st.markdown(
                    '<div class="warning-box">Saved, but the totals could not be updated. '
                    'Use "Refresh totals" on the dashboard.</div>',
                    unsafe_allow_html=True,
                )
        except FinanceError as e:
            show_error(e)

    st.markdown("---")
    try:
        entries = run_async(components.ledger.list_entries(user_id, kind))
    except FinanceError as e:
        show_error(e)
        return

    if not entries:
        st.info("Nothing recorded yet.")
        return

    for entry in entries:
        col1, col2 = st.columns([5, 1])
        col1.markdown(
            f"**{entry.label}**: {money(entry.amount)} on {entry.entry_date:%d %b %Y}"
            + (f" ({entry.category})" if entry.category else "")
        )
        if col2.button("Delete", key=f"delete_{entry.id}"):
            try:
                run_async(components.ledger.delete_entry(user_id, kind, entry.id))
                st.rerun()
            except FinanceError as e:
                show_error(e)


def render_budgets_page(components: AppComponents, user_id: str):
    """Render budget creation and progress."""
    st.title("🎯 Budgets")

    with st.form("add_budget", clear_on_submit=True):
        category = st.text_input("Category")
        planned = st.number_input("Planned amount", min_value=0.0, step=1000.0, format="%.2f")
        period = st.selectbox(
            "Period",
            options=list(BudgetPeriod),
            format_func=lambda p: p.value.title(),
        )
        submitted = st.form_submit_button("Save budget", type="primary")

    if submitted:
        try:
            run_async(components.budgets.create_budget(
                user_id,
                {"category": category, "planned_amount": f"{planned:.2f}", "period": period},
            ))
            st.success("Budget saved.")
        except FinanceError as e:
            show_error(e)

    st.markdown("---")
    try:
        budgets = run_async(components.budgets.list_budgets(user_id))
    except FinanceError as e:
        show_error(e)
        return

    if not budgets:
        st.info("No budgets yet.")
        return
    render_budget_progress(budgets)


def render_reports_page(components: AppComponents, user_id: str):
    """Render report generation and downloads."""
    st.title("📄 Reports")

    col1, col2, col3 = st.columns(3)
    with col1:
        report_type = st.selectbox(
            "Report type",
            options=list(ReportType),
            format_func=lambda t: t.value.title(),
        )
    with col2:
        start_date = st.date_input("From", value=date.today() - timedelta(days=30))
    with col3:
        end_date = st.date_input("To", value=date.today())

    if st.button("Generate report", type="primary"):
        try:
            response = run_async(
                components.reports.assemble(user_id, report_type, start_date, end_date)
            )
        except FinanceError as e:
            show_error(e)
            return

        data = response.data
        if data.is_empty:
            st.info("Nothing in this date range.")
        for title, rows in (("Income", data.incomes), ("Expenses", data.expenses)):
            if rows:
                st.subheader(title)
                st.table([
                    {"Item": e.label, "Amount": money(e.amount), "Date": e.entry_date.isoformat(),
                     "Category": e.category or ""}
                    for e in rows
                ])
        if data.budgets:
            st.subheader("Budgets")
            render_budget_progress(data.budgets)

    st.markdown("---")
    st.subheader("Download")
    col1, col2 = st.columns(2)
    for column, export_format in zip((col1, col2), components.exports.formats):
        with column:
            try:
                rendered = run_async(components.exports.export(
                    user_id, report_type, start_date, end_date, export_format
                ))
            except FinanceError as e:
                show_error(e)
                continue
            st.download_button(
                f"⬇️ Download {export_format.value.upper()}",
                data=rendered.content,
                file_name=rendered.filename,
                mime=rendered.content_type,
            )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    settings = get_settings().app
    st.markdown("### Storage")
    st.markdown(f"Backend: **{settings.storage_backend}**")

    if settings.uses_google_sheets:
        status = validate_all_settings()
        if status.get("google_sheets", False):
            st.success("✅ Google Sheets - Configured")
        else:
            st.error(f"❌ Google Sheets - {status.get('google_sheets_error', 'Not configured')}")
    else:
        st.warning("In-memory storage: data is lost when the app restarts.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
