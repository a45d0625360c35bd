"""Terminal control helpers for the rich pane.

Owns raw-mode lifecycle, alternate-screen switching, and mouse toggles.
"""

from __future__ import annotations

import os
import termios
import tty

ENTER_ALT_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_ALT_SCREEN = b"\x1b[?25h\x1b[?1049l"
MOUSE_ON = b"\x1b[?1000h\x1b[?1006h"
MOUSE_OFF = b"\x1b[?1000l\x1b[?1006l"


class TerminalController:
    """Manage terminal mode transitions for one raw-mode session.

    Construction reads the tty attributes, so it fails with ``termios.error``
    when stdin is not a terminal.
    """

    def __init__(self, stdin_fd: int, stdout_fd: int, *, mouse: bool = True) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.mouse = mouse
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._mouse_reporting_enabled = False
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode, with mouse reporting when allowed."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self._active = True
        os.write(self.stdout_fd, ENTER_ALT_SCREEN)
        if self.mouse:
            os.write(self.stdout_fd, MOUSE_ON)
            self._mouse_reporting_enabled = True

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state and the main screen buffer."""
        if not self._active:
            return
        self._active = False
        if self._mouse_reporting_enabled:
            os.write(self.stdout_fd, MOUSE_OFF)
            self._mouse_reporting_enabled = False
        os.write(self.stdout_fd, LEAVE_ALT_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def write(self, text: str) -> None:
        os.write(self.stdout_fd, text.encode("utf-8", errors="replace"))
