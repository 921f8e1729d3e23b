"""Logging setup and the load error log."""
