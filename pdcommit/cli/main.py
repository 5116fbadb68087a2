"""CLI Main Entry Point"""

import os
from pathlib import Path

from pdcommit import COMMIT_TYPES
from pdcommit.config import Config, load_config
from pdcommit.git import GitError, GitRepository, WorkingTreeStatus
from pdcommit.llm import LLMError, get_client
from pdcommit.message import WorkflowStep, build_message, command_preview, resolve_labels
from pdcommit.output import (
    BULLET, Spinner, bold, colorize_commit_message, dim, error, format_step, info,
    print_error, print_success, print_warning, success, warning,
)
from pdcommit.prompts import PromptBuilder, PromptConfig
from pdcommit.workflows import MappingError, MappingStore, WorkflowMapping

from pdcommit.cli.args import parse_args
from pdcommit.cli.commands import display_config, display_man, run_init, run_install_completion, run_sync
from pdcommit.cli.utils import Cancelled, Prompter, clean_summary, edit_message


def _get_provider_and_model(args, config):
    """Resolve provider and model from args, env, or config.

    Precedence: CLI args > environment variables > config file
    """
    provider = args.provider or os.environ.get('PDCOMMIT_PROVIDER') or config.provider
    model = args.model or os.environ.get('PDCOMMIT_MODEL') or config.model
    return provider, model


def _load_mapping(config: Config) -> WorkflowMapping | None:
    store = MappingStore(Path.cwd() / config.mapping_file)
    if not store.exists():
        print_error("This is not an initialized Pipedream project.")
        print(dim("  Run 'pdcommit init' to initialize the project."))
        return None

    try:
        mapping = store.load()
    except MappingError as e:
        print_error(f"Error loading configuration: {e}")
        return None

    for message in mapping.validate():
        print_warning(message)
    return mapping


def _display_status(status: WorkingTreeStatus) -> None:
    print(info("Checking for changes..."))
    for path in status.staged:
        print(success(f"  Staged: {path}"))
    for path in status.unstaged:
        print(warning(f"  Unstaged: {path}"))


def _ensure_staged(repo: GitRepository, status: WorkingTreeStatus, args, prompter: Prompter) -> WorkingTreeStatus:
    """Offer to stage unstaged changes; returns the status the commit will use."""
    if not status.has_unstaged:
        return status

    print_warning("You have unstaged changes. These changes will not be included in the commit.")
    if args.all or prompter.confirm("Do you want to stage all changes?"):
        repo.stage_all()
        print_success("All changes have been staged.")
        status = repo.get_status()
    return status


def _display_labels(labels: list[WorkflowStep]) -> None:
    print(bold("Matched workflow steps:"))
    for label in labels:
        print(f"  {BULLET} {format_step(label.workflow, label.step)}")


def _choose_type(args, config: Config, prompter: Prompter) -> str:
    if args.type:
        return args.type
    return prompter.select("Commit type", COMMIT_TYPES, default=config.default_type)


def _suggest_text(args, config: Config, repo: GitRepository, commit_type: str,
                  labels: list[WorkflowStep], prompter: Prompter) -> str | None:
    """Draft the message text with an LLM. None means fall back to typing it."""
    provider, model = _get_provider_and_model(args, config)
    prompt = PromptBuilder().build(
        repo.get_staged_diff(),
        PromptConfig(commit_type=commit_type, labels=labels, hint=args.hint, max_diff_chars=config.max_diff_chars),
    )

    try:
        client = get_client(provider=provider, model=model)
        with Spinner(f"Drafting message using {info(client.name)}... "):
            response = client.generate(prompt)
    except LLMError as e:
        print()
        print_error(str(e))
        return None

    text = clean_summary(response.content)
    print(success("done!"))
    if args.verbose:
        print(dim(f"  Prompt: ~{len(prompt) // 4} tokens, response: {response.tokens_used} tokens"))

    print(f"\n  {bold(text)}\n")
    action = prompter.ask("(e)dit, (w)rite your own, or Enter to accept", 'accept').strip().lower()
    if action == 'e':
        return edit_message(text) or text
    if action == 'w':
        return None
    return text


def _capture_text(args, config, repo, commit_type, labels, prompter) -> str:
    if args.message is not None:
        return args.message
    if args.suggest:
        text = _suggest_text(args, config, repo, commit_type, labels, prompter)
        if text is not None:
            return text
    return prompter.multiline("Enter commit message (press Enter twice to finish):")


def _review_and_commit(repo: GitRepository, message: str, args, prompter: Prompter) -> int:
    print(warning("The following command is ready for review:"))
    print(command_preview(colorize_commit_message(message)))

    if args.dry_run:
        print(dim("Dry run, nothing committed."))
        return 0

    if not args.yes and not prompter.confirm("Do you want to proceed with the commit?"):
        print(error("Commit aborted."))
        return 0

    try:
        output = repo.commit(message)
    except GitError as e:
        print_error(f"Error executing commit: {e}")
        return 1

    if output.strip():
        print(dim(output.rstrip()))
    print_success("Commit successful.")
    return 0


def run_commit(args, config: Config, prompter: Prompter) -> int:
    """Propose workflow annotations for the staged changes and commit."""
    mapping = _load_mapping(config)
    if mapping is None:
        return 1

    try:
        repo = GitRepository()
        status = repo.get_status()
        _display_status(status)
        if status.is_empty:
            print("No changes detected.")
            return 0

        status = _ensure_staged(repo, status, args, prompter)
        if not status.staged:
            print("No files are staged for commit. Commit aborted.")
            return 0

        trace = (lambda line: print(dim(f"  {line}"))) if args.verbose else None
        labels = resolve_labels(status.staged, mapping, trace=trace)
        if not labels:
            print_warning("No matching workflow or step found.")
            return 0
        _display_labels(labels)

        commit_type = _choose_type(args, config, prompter)
        text = _capture_text(args, config, repo, commit_type, labels, prompter)
        message = build_message(commit_type, labels, text)
        return _review_and_commit(repo, message, args, prompter)
    except GitError as e:
        print_error(str(e))
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)

    if args.install_completion:
        return run_install_completion()

    config = load_config()
    if args.display_config:
        return display_config(config)

    prompter = Prompter()
    try:
        if args.command == 'man':
            return display_man()
        if args.command == 'init':
            return run_init(config, prompter)
        if args.command == 'sync':
            return run_sync(config, prompter)
        return run_commit(args, config, prompter)
    except Cancelled:
        print(dim("\nCancelled."))
        return 0
