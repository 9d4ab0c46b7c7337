"""Smart Expense Manager package.

A Streamlit dashboard for recording income and expenses, tracking budgets
and savings goals, and reading derived insights. Run ``seed_db.py`` once,
then ``streamlit run smart_expense_manager/app.py``.
"""
