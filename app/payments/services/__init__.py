"""
Payment services.

Usage:
    from payments.services import ReconciliationService
"""

from payments.services.reconciliation_service import ReconciliationService

__all__ = [
    "ReconciliationService",
]
