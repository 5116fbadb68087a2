"""Workflow Discovery and Mapping Package"""

from pdcommit.workflows.mapping import WorkflowMapping, MappingStore, MappingError
from pdcommit.workflows.scanner import DetectedWorkflow, ScanError, scan, DEFAULT_MARKER
from pdcommit.workflows.sync import SyncPlan, plan_sync, apply_sync, default_label, WORKFLOW, STEP

__all__ = [
    "WorkflowMapping",
    "MappingStore",
    "MappingError",
    "DetectedWorkflow",
    "ScanError",
    "scan",
    "DEFAULT_MARKER",
    "SyncPlan",
    "plan_sync",
    "apply_sync",
    "default_label",
    "WORKFLOW",
    "STEP",
]
