"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all runs
  2. Other modules can import from neobank.models directly
"""

from neobank.models.user import User  # noqa: F401
from neobank.models.account import BankAccount  # noqa: F401
from neobank.models.transaction import Transaction  # noqa: F401
