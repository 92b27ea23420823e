"""
Voice Expense - Source Package

Turns a spoken expense transcript into a structured expense command.

DESIGN PRINCIPLES:
1. Parse → Validate → Emit (or fail with a typed error)
2. Fail early, fail visibly
3. No silent fallback currencies
4. Every step must be auditable
5. Currency data is configuration, not code
"""

__version__ = "1.0.0"
__author__ = "Voice Expense Team"
