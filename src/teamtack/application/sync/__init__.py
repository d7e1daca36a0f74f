"""
Sync Application Layer - reconcile the local cache with the remote tracker.
"""

from .orchestrator import FailedOperation, SyncOptions, SyncOrchestrator, SyncResult, build_task


__all__ = ["FailedOperation", "SyncOptions", "SyncOrchestrator", "SyncResult", "build_task"]
