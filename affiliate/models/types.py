"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts and balances
# Precision: 18 digits total, 8 after decimal point
# Amounts are rounded to cents before they reach the store
MoneyType = DECIMAL(18, 8)

# Commission percentage per level
# Precision: 5 digits total, 2 after decimal point
# Range: 0.00 to 999.99
PercentType = DECIMAL(5, 2)
