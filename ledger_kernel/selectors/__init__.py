"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.group_selector import GroupSelector

__all__ = ["GroupSelector"]
