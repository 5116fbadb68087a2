"""CLI Utility Functions"""

import os
import re
import subprocess
import sys
import tempfile
from typing import Callable

from pdcommit.output import bold, dim, info


class Cancelled(Exception):
    """Raised when the user interrupts a prompt."""
    pass


class Prompter:
    """Interactive questions on the terminal.

    Commands receive a Prompter instead of calling input() directly, so
    tests can script the answers.
    """

    def __init__(self, input_func: Callable[[str], str] | None = None):
        self._input = input_func or input

    def _read(self, text: str) -> str:
        try:
            return self._input(text)
        except (KeyboardInterrupt, EOFError):
            raise Cancelled()

    def ask(self, message: str, default: str) -> str:
        """Free-text answer; Enter keeps the default."""
        answer = self._read(f"{message} {dim(f'(default: {default})')}: ").strip()
        return answer or default

    def confirm(self, message: str, default: bool = True) -> bool:
        choices = 'Y/n' if default else 'y/N'
        while True:
            answer = self._read(f"{message} [{choices}]: ").strip().lower()
            if not answer:
                return default
            if answer in ('y', 'yes'):
                return True
            if answer in ('n', 'no'):
                return False
            print("Please answer y or n")

    def select(self, label: str, options: dict[str, str], default: str) -> str:
        """Numbered menu over ``options`` (name -> description). Accepts a number or a name."""
        names = list(options)
        print(bold(label))
        for i, name in enumerate(names, 1):
            marker = dim(' (default)') if name == default else ''
            print(f"  {info(str(i))}. {name} {dim('- ' + options[name])}{marker}")

        while True:
            answer = self._read(f"Select [1-{len(names)}] (Enter for {default}): ").strip().lower()
            if not answer:
                return default
            if answer in options:
                return answer
            if answer.isdigit() and 1 <= int(answer) <= len(names):
                return names[int(answer) - 1]
            print(f"Enter 1-{len(names)} or a type name")

    def multiline(self, message: str) -> str:
        """Read lines until an empty one. Each line is stripped."""
        print(message)
        lines = []
        while True:
            try:
                line = self._input('').strip()
            except EOFError:
                break
            except KeyboardInterrupt:
                raise Cancelled()
            if not line:
                break
            lines.append(line)
        return '\n'.join(lines)


_PREAMBLE_RE = re.compile(r"^(here|sure|okay|ok|summary)\b.*:\s*$", re.IGNORECASE)


def clean_summary(text: str) -> str:
    """Reduce an LLM response to the bare summary line."""
    for line in text.strip().split('\n'):
        line = line.strip().strip('`').strip()
        if not line or _PREAMBLE_RE.match(line):
            continue
        if len(line) >= 2 and line[0] == line[-1] and line[0] in ('"', "'"):
            line = line[1:-1].strip()
        return line.rstrip('.')
    return ''


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([editor, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            edited = f.read().strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)
