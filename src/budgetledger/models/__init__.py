"""SQLModel table exports."""

from .account import Account
from .budget import Budget
from .budget_month import BudgetMonth
from .category import Category, CategoryGroup
from .transaction import Transaction, Transfer

__all__ = [
    "Account",
    "Budget",
    "BudgetMonth",
    "Category",
    "CategoryGroup",
    "Transaction",
    "Transfer",
]
