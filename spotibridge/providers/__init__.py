"""Catalog provider implementations."""
