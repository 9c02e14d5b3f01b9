"""HTTP API for the practice ledger."""

from practice_ledger.api.app import create_app

__all__ = ["create_app"]
