"""Terminal Output Formatting Package"""

import itertools
import os
import re
import sys
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except Exception:
            return False
    return True


def _supports_unicode() -> bool:
    if sys.platform == 'win32':
        try:
            '✓'.encode(sys.stdout.encoding or 'utf-8')
            return True
        except (UnicodeEncodeError, LookupError):
            return False
    return True


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
ARROW = '→' if UNICODE_ENABLED else '->'
BULLET = '•' if UNICODE_ENABLED else '*'


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def success(text: str) -> str:
    return _colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def warning(text: str) -> str:
    return _colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def highlight(text: str) -> str:
    return _colorize(text, Colors.MAGENTA)


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(f"{warning('⚠')} {warning(message)}" if UNICODE_ENABLED else f"[!] {message}")


COMMIT_TYPE_COLORS = {
    'add': Colors.GREEN,
    'fix': Colors.RED,
    'change': Colors.YELLOW,
    'remove': Colors.MAGENTA,
}

_ANNOTATION_RE = re.compile(r'\[\[([^\]]*)\]\[([^\]]*)\]\]')


def colorize_commit_message(message: str) -> str:
    """Color the type prefix and the [[workflow][step]] annotations of the first line."""
    if not COLORS_ENABLED:
        return message
    lines = message.split('\n')
    match = re.match(r'^(\w+)((?:\[\[[^\]]*\]\[[^\]]*\]\])*)', lines[0])
    if not match:
        return message

    commit_type, annotations = match.group(1), match.group(2)
    color = COMMIT_TYPE_COLORS.get(commit_type)
    prefix = _colorize(commit_type, Colors.BOLD, color) if color else commit_type
    annotations = _ANNOTATION_RE.sub(
        lambda m: f"[[{info(m.group(1))}][{highlight(m.group(2))}]]",
        annotations,
    )
    lines[0] = prefix + annotations + lines[0][match.end():]
    return '\n'.join(lines)


def format_step(workflow: str, step: str) -> str:
    """``workflow → step`` with the two labels colored like the commit annotations."""
    return f"{info(workflow)} {dim(ARROW)} {highlight(step)}"


class Spinner:
    """Animated spinner after a status label. Use as context manager.

    Without a terminal the label is printed once and nothing animates.
    """
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, label: str = ''):
        self.label = label
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII

    def _spin(self):
        for idx in itertools.count():
            if self._stop_event.is_set():
                break
            print(f'\r\033[K{self.label}{self._frames[idx % len(self._frames)]} ', end='', flush=True)
            self._stop_event.wait(0.08)

    def __enter__(self):
        if not sys.stdout.isatty():
            print(self.label, end='', flush=True)
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
            print(f'\r\033[K{self.label}', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "ARROW", "BULLET",
    "success", "error", "warning", "info", "dim", "bold", "highlight",
    "print_success", "print_error", "print_warning",
    "colorize_commit_message", "format_step", "Spinner", "COMMIT_TYPE_COLORS",
]
