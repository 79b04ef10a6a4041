"""Clipboard writer.

Tries the platform's native clipboard command first and falls back to the
OSC 52 terminal escape, which most modern terminal emulators turn into a
clipboard write.  Failures are reported in the returned
:class:`~tanaclip.items.CopyResult`, never raised.
"""

from __future__ import annotations

import base64
import logging
import shutil
import subprocess
import sys
from typing import TextIO

from tanaclip.items import CopyResult

logger = logging.getLogger(__name__)

_COPY_TIMEOUT = 5

# Ordered candidates per platform; the first one on PATH that succeeds wins
_NATIVE_COMMANDS: dict[str, list[list[str]]] = {
    "darwin": [["pbcopy"]],
    "win32": [["clip"]],
    "linux": [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ],
}


def native_commands(platform: str | None = None) -> list[list[str]]:
    platform = platform or sys.platform
    for key, commands in _NATIVE_COMMANDS.items():
        if platform.startswith(key):
            return commands
    return _NATIVE_COMMANDS["linux"]


def _copy_native(text: str, platform: str | None = None) -> CopyResult:
    errors: list[str] = []
    for cmd in native_commands(platform):
        if shutil.which(cmd[0]) is None:
            continue
        try:
            subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                check=True,
                timeout=_COPY_TIMEOUT,
                capture_output=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Clipboard command %s failed: %s", cmd[0], exc)
            errors.append(f"{cmd[0]}: {exc}")
            continue
        return CopyResult(ok=True, method=cmd[0])
    return CopyResult(ok=False, err="; ".join(errors) or "no clipboard command available")


def _copy_osc52(text: str, stream: TextIO) -> CopyResult:
    if not stream.isatty():
        return CopyResult(ok=False, err="terminal is not interactive")
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    try:
        stream.write(f"\x1b]52;c;{payload}\x07")
        stream.flush()
    except OSError as exc:
        return CopyResult(ok=False, err=str(exc))
    return CopyResult(ok=True, method="osc52")


def copy_to_clipboard(
    text: str,
    *,
    platform: str | None = None,
    stream: TextIO | None = None,
) -> CopyResult:
    """Copy *text* to the system clipboard."""
    if not text:
        return CopyResult(ok=False, err="empty text")

    result = _copy_native(text, platform)
    if result.ok:
        return result

    fallback = _copy_osc52(text, stream or sys.stderr)
    if fallback.ok:
        return fallback
    err = f"{result.err}; osc52: {fallback.err}"
    logger.debug("Clipboard write failed: %s", err)
    return CopyResult(ok=False, err=err)
