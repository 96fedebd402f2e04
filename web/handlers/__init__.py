"""
Route handlers.

- health: liveness check
- participants: referral validation, bootstrap, profile
- dashboard: dashboard, network, tools, subscription
- sales: sale intake webhook
- admin: participant management
"""

__all__ = []
