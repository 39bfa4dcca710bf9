"""
Ledger Kernel - journal update engine

A double-entry journal store with:
- Two-leg journals (source and destination legs)
- Sparse, presence-gated partial updates
- Type-directed account validation
- Multi-currency support with foreign amounts
- Content-derived change detection
"""

__version__ = "0.1.0"
