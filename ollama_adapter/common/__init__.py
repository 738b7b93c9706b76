"""Shared helpers used across the adapter."""
