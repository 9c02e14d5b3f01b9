"""Practice ledger: billing, trust reconciliation, compliance and analytics for law practices."""

__version__ = "1.0.0"
