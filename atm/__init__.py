"""
ATM Teller Simulator

A single-terminal automated teller backed by an in-memory account ledger,
with hash-chained audit trails and structured logging.
"""

__version__ = "1.0.0"
