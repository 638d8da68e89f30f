"""Tourney API: tournaments, wallets and the transaction ledger."""

__version__ = "0.1.0"
