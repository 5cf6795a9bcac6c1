"""Persistence — the append-only install ledger."""
