"""Shared logging and metrics helpers for the oil tonnage services."""
