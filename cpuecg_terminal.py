"""
CPU ECG terminal - raw mode, alternate screen and buffered ANSI output
"""

import logging
import os
import select
import sys
import termios
import time
import tty
from collections import deque
from io import StringIO

logger = logging.getLogger(__name__)

CSI = '\033['
ESC = '\x1b'
CTRL_C = '\x03'

COLORS = {
    'reset': '\033[0m',
    'white': '\033[97m',
    'grey': '\033[90m',
    'green': '\033[92m',
    'yellow': '\033[93m',
    'red': '\033[91m',
}

ESC_GRACE_SECONDS = 0.01


def decode_keys(data):
    """Split raw input bytes into keys.

    A lone Esc is a key; CSI/SS3 sequences (arrows, function keys) and
    Alt-modified keys are dropped so they are never mistaken for Esc.
    """
    keys = []
    i = 0
    n = len(data)
    while i < n:
        b = data[i]
        if b != 0x1B:
            keys.append(chr(b))
            i += 1
            continue

        if i == n - 1:
            keys.append(ESC)
            break

        nxt = data[i + 1]
        if nxt in (ord('['), ord('O')):
            i += 2
            while i < n:
                final = data[i]
                i += 1
                if 0x40 <= final <= 0x7E:
                    break
            continue

        # Esc + key is Alt-modified, not Esc
        i += 2
    return keys


class Terminal:
    """Scoped terminal: entering takes over the screen, leaving always gives it back"""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.output = StringIO()
        self.fd = None
        self.old_settings = None
        self.pending = deque()

    def __enter__(self):
        self.enable_raw_mode()
        try:
            self.enter_alt_screen()
            self.hide_cursor()
            self.flush()
        except BaseException:
            self.disable_raw_mode()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False

    def restore(self):
        try:
            self.output = StringIO()
            self.reset_color()
            self.show_cursor()
            self.leave_alt_screen()
            self.flush()
        finally:
            self.disable_raw_mode()

    def enable_raw_mode(self):
        if not self.stdin.isatty():
            logger.info('stdin is not a tty, keyboard input disabled')
            return
        self.fd = self.stdin.fileno()
        self.old_settings = termios.tcgetattr(self.fd)
        tty.setraw(self.fd)

    def disable_raw_mode(self):
        if self.fd is None or self.old_settings is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
        self.fd = None
        self.old_settings = None

    def enter_alt_screen(self):
        self.output.write(f'{CSI}?1049h{CSI}H')

    def leave_alt_screen(self):
        self.output.write(f'{CSI}?1049l')

    def hide_cursor(self):
        self.output.write(f'{CSI}?25l')

    def show_cursor(self):
        self.output.write(f'{CSI}?25h')

    def size(self):
        size = os.get_terminal_size(self.stdout.fileno())
        return size.columns, size.lines

    def move_cursor(self, x, y):
        self.output.write(f'{CSI}{y + 1};{x + 1}H')

    def write_text(self, text):
        self.output.write(text)

    def set_foreground(self, color):
        self.output.write(COLORS[color])

    def reset_color(self):
        self.output.write(COLORS['reset'])

    def clear_all(self):
        self.output.write(f'{CSI}2J')

    def flush(self):
        """Write everything queued since the last flush in one go"""
        data = self.output.getvalue()
        self.output = StringIO()
        if data:
            self.stdout.write(data)
        self.stdout.flush()

    def poll_key(self, timeout):
        """Wait up to timeout seconds for one key; None if nothing arrived"""
        if self.pending:
            return self.pending.popleft()
        if self.fd is None:
            time.sleep(max(0.0, timeout))
            return None

        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout))
        if not ready:
            return None
        data = os.read(self.fd, 64)
        if data == b'\x1b':
            # the rest of an escape sequence may still be in flight
            ready, _, _ = select.select([self.fd], [], [], ESC_GRACE_SECONDS)
            if ready:
                data += os.read(self.fd, 64)

        self.pending.extend(decode_keys(data))
        if self.pending:
            return self.pending.popleft()
        return None
