"""
Completion - what happens remotely when a task is finished.
"""

from .done import DoneOptions, DoneResult, DoneWorkflow
from .modes import CompletionOutcome, CompletionStateMachine, WriteAttempt
from .parent_issue import ParentIssueUpdater


__all__ = [
    "CompletionOutcome",
    "CompletionStateMachine",
    "DoneOptions",
    "DoneResult",
    "DoneWorkflow",
    "ParentIssueUpdater",
    "WriteAttempt",
]
