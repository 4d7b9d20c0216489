"""Toolcrib - endmill stock ledger and tool-change history service."""

__version__ = "1.0.0"
