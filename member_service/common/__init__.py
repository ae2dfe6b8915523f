"""Shared settings, logging, and status-code helpers."""
