"""
Streamlit Frontend for the Expense Ledger

Thin presentation layer. It collects input, calls the Command Surface
and renders the snapshot it gets back - no ledger rules live here.

DESIGN PRINCIPLES:
1. Every command's outcome is shown to the user
2. Nothing is written to disk without an explicit "Save", except the
   final save when the server process exits
"""

from pathlib import Path

import streamlit as st

from expense_ledger.config import get_settings
from expense_ledger.models.expense import CommandResult
from expense_ledger.orchestrator import (
    LedgerCommands,
    LedgerSession,
    create_app_components,
    register_shutdown_save,
)


st.set_page_config(
    page_title="Expense Ledger",
    page_icon="💰",
    layout="wide",
)


@st.cache_resource
def get_commands() -> LedgerCommands:
    """One ledger per server process (cached across reruns and sessions)."""
    settings = get_settings()
    if settings.data_dir is None:
        # Under `streamlit run` the executable is streamlit itself; keep the
        # ledger beside the app instead.
        settings = settings.model_copy(update={"data_dir": Path(__file__).resolve().parent})
    commands = create_app_components(settings)
    register_shutdown_save(LedgerSession(settings=settings, commands=commands))
    return commands


def show_result(result: CommandResult, success_message: str) -> None:
    """Report a command outcome."""
    if result.success:
        st.toast(success_message)
    else:
        st.error(result.error_message or "An error occurred")


def render_sidebar(commands: LedgerCommands) -> None:
    """Income, net worth and persistence controls."""
    snapshot = commands.snapshot()

    st.sidebar.title("💰 Expense Ledger")
    st.sidebar.metric("Net worth", f"{snapshot.net_worth:,.2f}")

    with st.sidebar.form("income_form"):
        income = st.number_input(
            "Income",
            value=float(snapshot.income),
            min_value=0.0,
            step=100.0,
            format="%.2f",
        )
        if st.form_submit_button("Save income"):
            show_result(commands.set_income(income), "Income updated")
            st.rerun()

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Recompute net worth"):
        show_result(commands.update_net_worth(), "Net worth recomputed")
        st.rerun()
    if st.sidebar.button("💾 Save", type="primary"):
        show_result(commands.save(), f"Saved to {commands.storage.location}")


def render_expenses(commands: LedgerCommands) -> None:
    """Expense table with pay/remove actions."""
    queries = commands.queries()
    summary = queries.summary()

    st.title("Monthly expenses")

    col1, col2, col3 = st.columns(3)
    col1.metric("Total", f"{summary.total_cost:,.2f}")
    col2.metric("Paid", f"{summary.paid_total:,.2f}")
    col3.metric("Still to pay", f"{summary.unpaid_total:,.2f}")

    if summary.net_worth_stale:
        st.warning("Net worth is out of date. Recompute it from the sidebar.")

    if not queries.snapshot.expenses:
        st.info("No expenses yet. Add one below.")
        return

    header = st.columns([3, 2, 2, 1, 1, 1])
    for column, title in zip(header, ["Name", "Cost", "Due day", "Paid?", "", ""]):
        column.markdown(f"**{title}**")

    for expense in queries.snapshot.expenses:
        row = st.columns([3, 2, 2, 1, 1, 1])
        row[0].write(expense.name)
        row[1].write(f"{expense.cost:,.2f}")
        row[2].write(expense.due_date)
        row[3].write("✅" if expense.paid else "—")
        if row[4].button("Pay", key=f"pay-{expense.name}"):
            show_result(commands.pay_expense(expense.name), f"{expense.name} updated")
            st.rerun()
        if row[5].button("🗑️", key=f"remove-{expense.name}"):
            show_result(commands.remove_expense(expense.name), f"{expense.name} removed")
            st.rerun()

    if st.button("Mark all unpaid"):
        show_result(commands.reset_paid(), "All expenses marked unpaid")
        st.rerun()


def render_add_form(commands: LedgerCommands) -> None:
    """Form for a new expense."""
    st.subheader("Add expense")
    with st.form("add_form", clear_on_submit=True):
        name = st.text_input("Name *")
        cost = st.number_input("Cost", min_value=0.0, step=10.0, format="%.2f")
        due_date = st.number_input("Due day *", min_value=1, max_value=31, step=1, value=1)
        if st.form_submit_button("Add"):
            result = commands.add_expense(name.strip(), due_date=int(due_date), cost=cost)
            show_result(result, f"{name} added")
            if result.success:
                st.rerun()


def render_edit_form(commands: LedgerCommands) -> None:
    """Form editing an existing expense."""
    snapshot = commands.snapshot()
    if not snapshot.expenses:
        return

    st.subheader("Edit expense")
    names = [expense.name for expense in snapshot.expenses]
    selected = st.selectbox("Expense", options=names)
    current = snapshot.get(selected)
    if current is None:
        return

    with st.form("edit_form"):
        new_name = st.text_input("Name", value=current.name)
        cost = st.number_input("Cost", value=float(current.cost), min_value=0.0, step=10.0, format="%.2f")
        due_date = st.number_input("Due day", value=current.due_date, min_value=1, max_value=31, step=1)
        if st.form_submit_button("Save changes"):
            result = commands.edit_expense(
                current.name,
                new_name=new_name.strip() if new_name.strip() != current.name else None,
                cost=cost if cost != current.cost else None,
                due_date=int(due_date) if due_date != current.due_date else None,
            )
            show_result(result, f"{current.name} updated")
            if result.success:
                st.rerun()


def main():
    """Main application entry point."""
    commands = get_commands()
    render_sidebar(commands)
    render_expenses(commands)

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        render_add_form(commands)
    with col2:
        render_edit_form(commands)


if __name__ == "__main__":
    main()
