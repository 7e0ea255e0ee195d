"""
Payment state enums.

Usage:
    from payments.state_machines import FinancialStatus, WebhookOutcome
"""

from payments.state_machines.states import FinancialStatus, WebhookOutcome

__all__ = [
    "FinancialStatus",
    "WebhookOutcome",
]
