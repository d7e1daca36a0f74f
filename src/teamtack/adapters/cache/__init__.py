"""
Cache Module - The local task snapshot (``cycle.yaml``).

- CycleStore: load/save the CycleData snapshot and upsert single tasks
"""

from .cycle_store import CycleStore


__all__ = ["CycleStore"]
