"""Shared utilities for dates, money, logging and output sanitization."""
