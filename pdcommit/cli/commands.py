"""CLI Commands"""

import os
from pathlib import Path

from pdcommit import SCHEMA_VERSION
from pdcommit.config import Config, get_config_path
from pdcommit.output import ARROW, bold, dim, info, print_error, print_success, print_warning
from pdcommit.workflows import (
    DetectedWorkflow, MappingError, MappingStore, ScanError, SyncPlan, WorkflowMapping,
    STEP, WORKFLOW, apply_sync, default_label, plan_sync, scan,
)

from pdcommit.cli.utils import Prompter

MANUAL = """\
Pipedream Git Commit Helper Manual

COMMANDS

pdcommit init
  - Initializes a Pipedream project: scans for directories containing workflow.yaml,
    asks for a label for every workflow and step, and stores the mappings in
    pipedream-config.yaml. Refuses to run if the project is already initialized.

pdcommit sync
  - Rescans the project. New workflows and steps are labeled interactively,
    existing labels are kept, and for every mapped directory that disappeared
    you are asked whether to remove it.

pdcommit
  - Matches changed files to workflows and steps, asks for a commit type and a
    message, shows the resulting git command and commits after confirmation.
    Message format: <type>[[workflow][step]]... <message>

pdcommit man
  - Shows this manual.

OPTIONS

  -t, --type TYPE      add, fix, change or remove (skips the menu)
  -m, --message TEXT   message text (skips the prompt)
  -a, --all            stage unstaged changes without asking
  -y, --yes            commit without the final confirmation
  --dry-run            show the git command only
  --suggest            draft the message text with an LLM (Ollama or Claude)
  --verbose            show how changed files were matched
  --help               list all options
"""


def display_man() -> int:
    print(MANUAL, end='')
    return 0


def display_config(config: Config) -> int:
    """Display current configuration."""
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")
    print(f"  {dim('Loaded from:')} {config_path or 'defaults (no .pdcommitrc found)'}")

    overrides = {k: os.environ[k] for k in ('PDCOMMIT_PROVIDER', 'PDCOMMIT_MODEL') if os.environ.get(k)}
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for key, value in overrides.items():
            print(f"    {key}={value}")

    print(f"\n  {bold('Settings:')}")
    settings = config.to_dict()
    settings.setdefault('model', 'auto')
    width = max(len(k) for k in settings) + 1
    for key, value in settings.items():
        print(f"    {(key + ':').ljust(width)} {info(str(value))}")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .pdcommitrc (in current directory)")
    print("    Global: ~/.pdcommitrc\n")
    return 0


def run_install_completion() -> int:
    """Print the shell snippet that enables tab completion."""
    shell = os.path.basename(os.environ.get('SHELL', ''))
    snippets = {
        'bash': ('~/.bashrc', 'eval "$(register-python-argcomplete pdcommit)"'),
        'zsh': ('~/.zshrc', 'eval "$(register-python-argcomplete pdcommit)"'),
        'fish': ('~/.config/fish/config.fish', 'register-python-argcomplete --shell fish pdcommit | source'),
    }

    print(f"\n{bold('Tab Completion Setup')}\n")
    if shell in snippets:
        rc_file, line = snippets[shell]
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
    else:
        print("Run the line for your shell:\n")
        for name, (_, line) in snippets.items():
            print(f"  {dim('# ' + name)}")
            print(f"  {line}\n")
    return 0


def _mapping_store(config: Config, root: Path) -> MappingStore:
    return MappingStore(root / config.mapping_file)


def _load_existing(store: MappingStore) -> WorkflowMapping:
    mapping = store.load()
    for warning in mapping.validate():
        print_warning(warning)
    return mapping


def _collect_labels(plan: SyncPlan, detected: list[DetectedWorkflow], prompter: Prompter) -> dict[tuple[str, str], str]:
    """Ask for a label for every new key; the directory name is the default."""
    locations = {}
    for wf in detected:
        locations.setdefault((WORKFLOW, wf.name), wf.directory)
        for step in wf.steps:
            locations.setdefault((STEP, wf.step_key(step)), wf.directory / step)

    labels = {}
    for kind, key in plan.new_keys:
        default = default_label(kind, key)
        where = locations.get((kind, key), key)
        if kind == WORKFLOW:
            question = f"Detected workflow in {where}. Enter workflow name"
        else:
            question = f"Detected step {default} in {where}. Enter step namespace"
        labels[(kind, key)] = prompter.ask(question, default)
    return labels


def _confirm_removals(plan: SyncPlan, existing: WorkflowMapping, prompter: Prompter) -> set[tuple[str, str]]:
    drop = set()
    for kind, key in plan.stale_keys:
        label = existing.workflows[key] if kind == WORKFLOW else existing.steps[key]
        if prompter.confirm(f"{kind.capitalize()} '{key}' ({label}) no longer exists. Remove it?", default=False):
            drop.add((kind, key))
    return drop


def _scan(config: Config, root: Path) -> list[DetectedWorkflow] | None:
    try:
        detected = scan(root, config.marker_file)
    except ScanError as e:
        print_error(str(e))
        return None
    if not detected:
        print_warning(f"No {config.marker_file} files found under {root}.")
    return detected


def run_init(config: Config, prompter: Prompter, root: Path | None = None) -> int:
    """Scan the project and write a fresh mapping file."""
    root = root or Path.cwd()
    store = _mapping_store(config, root)
    if store.exists():
        print_warning("This project is already initialized. Run 'pdcommit sync' to rescan.")
        return 0

    detected = _scan(config, root)
    if detected is None:
        return 1

    plan = plan_sync(None, detected)
    labels = _collect_labels(plan, detected, prompter)
    mapping = apply_sync(None, plan, labels)

    try:
        store.save(mapping)
    except MappingError as e:
        print_error(str(e))
        return 1

    print_success(f"Pipedream project initialized successfully with schema version {SCHEMA_VERSION}.")
    print(dim(f"  {len(mapping.workflows)} workflows, {len(mapping.steps)} steps {ARROW} {store.path.name}"))
    return 0


def run_sync(config: Config, prompter: Prompter, root: Path | None = None) -> int:
    """Rescan and merge against the existing mapping."""
    root = root or Path.cwd()
    store = _mapping_store(config, root)
    if not store.exists():
        print_error("This is not an initialized Pipedream project. Run 'pdcommit init' first.")
        return 1

    try:
        existing = _load_existing(store)
    except MappingError as e:
        print_error(str(e))
        return 1

    detected = _scan(config, root)
    if detected is None:
        return 1

    plan = plan_sync(existing, detected)
    if not plan.has_changes and existing.schema == SCHEMA_VERSION:
        print_success("Mapping is already up to date.")
        return 0

    labels = _collect_labels(plan, detected, prompter)
    drop = _confirm_removals(plan, existing, prompter)
    mapping = apply_sync(existing, plan, labels, drop)

    try:
        store.save(mapping)
    except MappingError as e:
        print_error(str(e))
        return 1

    kept_stale = len(plan.stale_keys) - len(drop)
    print_success(
        f"Mapping synced: {len(plan.new_keys)} added, {len(drop)} removed, "
        f"{kept_stale} missing kept."
    )
    return 0
