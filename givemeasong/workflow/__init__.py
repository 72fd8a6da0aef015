"""
Workflow package.

Components:
- SongWorkflow: the resolve/fetch state machine for one view instance
- Idle/Submitting/Resolved/LoadingSong/Ready/Failed: its states
- WorkflowSnapshot: the observable {state, song, error} tuple
"""

from givemeasong.workflow.machine import SongWorkflow, song_path
from givemeasong.workflow.states import (
    Failed,
    Idle,
    LoadingSong,
    Ready,
    Resolved,
    Submitting,
    WorkflowSnapshot,
    WorkflowState,
)

__all__ = [
    "SongWorkflow",
    "song_path",
    "Failed",
    "Idle",
    "LoadingSong",
    "Ready",
    "Resolved",
    "Submitting",
    "WorkflowSnapshot",
    "WorkflowState",
]
