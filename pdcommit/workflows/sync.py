"""Mapping Sync - Merge a fresh scan against an existing mapping.

Pure functions only. Prompting for labels and removal confirmations is the
caller's job; these functions just say what changed and apply the answers.
"""

from dataclasses import dataclass, field

from pdcommit import SCHEMA_VERSION
from pdcommit.workflows.mapping import WorkflowMapping
from pdcommit.workflows.scanner import DetectedWorkflow

WORKFLOW = 'workflow'
STEP = 'step'


@dataclass
class SyncPlan:
    """Keys grouped by what a sync would do with them."""
    new_workflows: list[str] = field(default_factory=list)
    new_steps: list[str] = field(default_factory=list)
    kept_workflows: list[str] = field(default_factory=list)
    kept_steps: list[str] = field(default_factory=list)
    stale_workflows: list[str] = field(default_factory=list)
    stale_steps: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.new_workflows or self.new_steps or self.stale_workflows or self.stale_steps)

    @property
    def new_keys(self) -> list[tuple[str, str]]:
        return [(WORKFLOW, k) for k in self.new_workflows] + [(STEP, k) for k in self.new_steps]

    @property
    def stale_keys(self) -> list[tuple[str, str]]:
        return [(WORKFLOW, k) for k in self.stale_workflows] + [(STEP, k) for k in self.stale_steps]


def default_label(kind: str, key: str) -> str:
    """Workflows default to their directory name, steps to the step segment."""
    if kind == STEP:
        return key.rsplit('/', 1)[-1]
    return key


def _unique(keys) -> list[str]:
    return list(dict.fromkeys(keys))


def plan_sync(existing: WorkflowMapping | None, detected: list[DetectedWorkflow]) -> SyncPlan:
    existing = existing or WorkflowMapping()

    workflow_keys = _unique(wf.name for wf in detected)
    step_keys = _unique(key for wf in detected for key in wf.step_keys)
    detected_workflows = set(workflow_keys)
    detected_steps = set(step_keys)

    return SyncPlan(
        new_workflows=[k for k in workflow_keys if k not in existing.workflows],
        new_steps=[k for k in step_keys if k not in existing.steps],
        kept_workflows=[k for k in workflow_keys if k in existing.workflows],
        kept_steps=[k for k in step_keys if k in existing.steps],
        stale_workflows=[k for k in existing.workflows if k not in detected_workflows],
        stale_steps=[k for k in existing.steps if k not in detected_steps],
    )


def apply_sync(
    existing: WorkflowMapping | None,
    plan: SyncPlan,
    labels: dict[tuple[str, str], str] | None = None,
    drop: set[tuple[str, str]] | None = None,
) -> WorkflowMapping:
    """Build the merged mapping.

    Args:
        existing: Mapping before the sync, or None on init
        plan: Result of plan_sync() for the same scan
        labels: Labels for new keys, keyed by (kind, key). Missing or blank
            entries fall back to default_label()
        drop: Stale (kind, key) pairs the user agreed to remove
    """
    existing = existing or WorkflowMapping()
    labels = labels or {}
    drop = drop or set()

    def _label(kind: str, key: str) -> str:
        return labels.get((kind, key)) or default_label(kind, key)

    workflows = {}
    for key in plan.kept_workflows:
        workflows[key] = existing.workflows[key]
    for key in plan.new_workflows:
        workflows[key] = _label(WORKFLOW, key)
    for key in plan.stale_workflows:
        if (WORKFLOW, key) not in drop:
            workflows[key] = existing.workflows[key]

    steps = {}
    for key in plan.kept_steps:
        steps[key] = existing.steps[key]
    for key in plan.new_steps:
        steps[key] = _label(STEP, key)
    for key in plan.stale_steps:
        if (STEP, key) not in drop:
            steps[key] = existing.steps[key]

    return WorkflowMapping(schema=SCHEMA_VERSION, workflows=workflows, steps=steps)
