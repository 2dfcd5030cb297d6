"""
BankCLI - Source Package

A single-user ledger for a handful of personal bank accounts:
open, deposit, withdraw, transfer, delete and review history.

DESIGN PRINCIPLES:
1. Validate everything before touching a balance
2. Fail early, fail visibly
3. No silent corrections
4. Every balance change leaves a transaction behind
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BankCLI Team"
