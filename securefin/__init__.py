"""
SecureFin - Source Package

A tamper-evident personal wallet: a hash-linked ledger per account,
balance and savings-goal bookkeeping, OTP login, and AI-assisted advice
and fraud-risk hints.

DESIGN PRINCIPLES:
1. AI advises → Human decides → Ledger records
2. Fail early, fail visibly
3. All-or-nothing writes
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SecureFin Team"
