"""Adapters package for external integrations."""
