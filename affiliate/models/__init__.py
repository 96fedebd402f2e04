"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from affiliate.models.activity_note import ActivityNote
from affiliate.models.balance_record import BalanceRecord
from affiliate.models.base import Base
from affiliate.models.commission_entry import CommissionEntry, CommissionStatus
from affiliate.models.network_edge import NetworkEdge
from affiliate.models.participant import Participant
from affiliate.models.sale import Sale, SaleStatus


__all__ = [
    "Base",
    "ActivityNote",
    "BalanceRecord",
    "CommissionEntry",
    "CommissionStatus",
    "NetworkEdge",
    "Participant",
    "Sale",
    "SaleStatus",
]
