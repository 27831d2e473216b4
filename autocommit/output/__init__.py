"""Terminal output: colors, status symbols, framed text and a progress spinner.

Colors honor NO_COLOR / FORCE_COLOR and are off when stdout is not a
terminal. Symbols fall back to ASCII when the console encoding cannot
show them.
"""

import itertools
import os
import re
import shutil
import sys
import textwrap
import threading

from autocommit import COMMIT_TYPE_NAMES


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


_ANSI = re.compile(r'\033\[[0-9;]*m')


def _is_tty(stream) -> bool:
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def _enable_windows_ansi() -> bool:
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        # processed output | wrap at EOL | virtual terminal processing
        return bool(kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7))
    except (AttributeError, OSError):
        return False


def colors_wanted(environ=None, stream=None) -> bool:
    env = os.environ if environ is None else environ
    if env.get('NO_COLOR'):
        return False
    if env.get('FORCE_COLOR'):
        return True
    if not _is_tty(sys.stdout if stream is None else stream):
        return False
    return _enable_windows_ansi() if sys.platform == 'win32' else True


def _can_encode(text: str, stream=None) -> bool:
    encoding = getattr(sys.stdout if stream is None else stream, 'encoding', None) or 'utf-8'
    try:
        text.encode(encoding)
        return True
    except (UnicodeEncodeError, LookupError):
        return False


COLORS_ENABLED = colors_wanted()
UNICODE_ENABLED = _can_encode('✓✗⚠•─│┌┐└┘⠋')


def _symbol(fancy: str, plain: str) -> str:
    return fancy if UNICODE_ENABLED else plain


CHECK = _symbol('✓', '[OK]')
CROSS = _symbol('✗', '[X]')
WARN = _symbol('⚠', '[!]')
BULLET = _symbol('•', '*')


def _styled(*codes: str):
    """Build a text -> text function wrapping its input in `codes`."""
    def apply(text: str) -> str:
        if not COLORS_ENABLED:
            return text
        return f"{''.join(codes)}{text}{Colors.RESET}"
    return apply


success = _styled(Colors.GREEN)
error = _styled(Colors.RED)
warning = _styled(Colors.YELLOW)
info = _styled(Colors.CYAN)
link = _styled(Colors.BLUE)
dim = _styled(Colors.DIM)
bold = _styled(Colors.BOLD)


def visible_len(text: str) -> int:
    return len(_ANSI.sub('', text))


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def _box_width() -> int:
    columns = shutil.get_terminal_size((80, 24)).columns
    # Frame and padding take 4 columns
    return max(int(columns * 0.8), 60) - 4


def box_lines(text: str, width: int | None = None) -> list[str]:
    """Frame `text`, wrapping anything wider than `width`.

    Wrapped bullet items keep a hanging indent under their first word.
    """
    width = width or _box_width()
    body = []
    for line in text.split('\n'):
        if visible_len(line) <= width:
            body.append(line)
            continue
        hanging = ' ' * (len(BULLET) + 1) if line.startswith(f'{BULLET} ') else ''
        body.extend(textwrap.wrap(line, width=width, subsequent_indent=hanging))

    inner = max((visible_len(line) for line in body), default=0)
    rule, side, corners = ('─', '│', '┌┐└┘') if UNICODE_ENABLED else ('-', '|', '++++')

    framed = [dim(f"{corners[0]}{rule * (inner + 2)}{corners[1]}")]
    for line in body:
        padding = ' ' * (inner - visible_len(line))
        framed.append(f"{dim(side)} {line}{padding} {dim(side)}")
    framed.append(dim(f"{corners[2]}{rule * (inner + 2)}{corners[3]}"))
    return framed


def print_box(text: str) -> None:
    print('\n'.join(box_lines(text)))


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'perf': Colors.GREEN,
    'fix': Colors.RED,
    'revert': Colors.RED,
    'refactor': Colors.YELLOW,
    'test': Colors.MAGENTA,
    'docs': Colors.CYAN,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
}

_COMMIT_PREFIX = re.compile(rf"^(?P<type>{'|'.join(COMMIT_TYPE_NAMES)})(\([^)]*\))?!?:")


def colorize_commit_type(message: str) -> str:
    """Color the `type(scope):` prefix of every conventional line.

    Unrelated changes come back as several one-line messages, so each
    line gets its own color.
    """
    if not COLORS_ENABLED:
        return message

    def colorize(line: str) -> str:
        match = _COMMIT_PREFIX.match(line)
        if not match:
            return line
        color = COMMIT_TYPE_COLORS.get(match.group('type'), '')
        return _styled(Colors.BOLD, color)(match.group(0)) + line[match.end():]

    return '\n'.join(colorize(line) for line in message.split('\n'))


class Spinner:
    """Animated frame plus a label while a slow step runs. Use as context manager.

    Silent when the stream is not a terminal, so piped output stays clean.
    """
    INTERVAL = 0.08

    def __init__(self, label: str = "", stream=None):
        self.label = label
        self.stream = sys.stdout if stream is None else stream
        self._frames = '⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏' if UNICODE_ENABLED else '-\\|/'
        self._done = threading.Event()
        self._thread = None

    def _spin(self):
        for frame in itertools.cycle(self._frames):
            self.stream.write(f"\r\033[K{info(frame)} {self.label}")
            self.stream.flush()
            if self._done.wait(self.INTERVAL):
                break

    def __enter__(self):
        if _is_tty(self.stream):
            self._done.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *exc_info):
        if self._thread is None:
            return False
        self._done.set()
        self._thread.join()
        self._thread = None
        self.stream.write('\r\033[K')
        self.stream.flush()
        return False


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "WARN", "BULLET",
    "success", "error", "warning", "info", "link", "dim", "bold",
    "visible_len", "print_success", "print_error", "box_lines", "print_box",
    "colorize_commit_type", "Spinner", "COMMIT_TYPE_COLORS",
]
