"""fanledger: deposit fan-out and certificate redemption ledger."""

__version__ = "0.3.0"
