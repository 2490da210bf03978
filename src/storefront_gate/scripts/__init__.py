"""Operational command line helpers."""
