"""Lending Desk - book lending records over MCP, plus a notes and reminders service."""

__version__ = "0.1.0"
