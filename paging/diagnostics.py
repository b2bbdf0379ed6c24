"""
Diagnostics for the paging core.

Debug output goes to stderr in the "[HH:MM:SS] TAG: message" format.
Precondition violations are either raised (strict mode) or reported and
turned into a no-op by the caller.
"""

import sys
from datetime import datetime


class PreconditionError(AssertionError):
    """A caller broke a contract (detached controller, bad zoom, out-of-range page)."""


# Module-level switches (set from Config at startup)
_debug_enabled: bool = False
_strict: bool = False


def set_debug(enabled: bool):
    """Enable or disable debug output on stderr."""
    global _debug_enabled
    _debug_enabled = enabled


def set_strict(enabled: bool):
    """In strict mode precondition violations raise PreconditionError."""
    global _strict
    _strict = enabled


def is_strict() -> bool:
    return _strict


def debug_print(tag: str, msg: str) -> None:
    if not _debug_enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {msg}", file=sys.stderr)


def report_precondition(tag: str, msg: str) -> None:
    """
    Report a precondition violation.

    Raises PreconditionError in strict mode. Otherwise the message is
    printed (when debug output is on) and the caller must leave its
    state unchanged and return a failure value.
    """
    debug_print(tag, f"precondition failed: {msg}")
    if _strict:
        raise PreconditionError(msg)
