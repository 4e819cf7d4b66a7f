"""Bundled rule catalog (catalog.json)."""
