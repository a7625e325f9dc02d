"""Shared utilities: escaping, Markup and date formatting."""
