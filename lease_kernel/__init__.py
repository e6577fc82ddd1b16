"""
Lease Kernel

A lease-lifecycle ledger with:
- Dense, never-reused lease identifiers
- A deterministic lease state machine with fail-fast validation
- Authority-gated governance configuration
- Per-lease row locking for concurrent hosts
- Tagged results at the service boundary
"""

__version__ = "0.1.0"
