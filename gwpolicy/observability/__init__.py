"""Logging and metrics for gwpolicy."""
