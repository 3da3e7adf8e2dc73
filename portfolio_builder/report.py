"""Build progress output and warning/error bookkeeping."""

import sys
import threading


class BuildReport:
    """
    Collects warnings and errors raised while building.

    Nothing in the pipeline aborts on a single bad project or media file;
    failures are printed and counted here so the CLI can set its exit code.
    Safe to share across the per-project worker threads.
    """

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.warnings = []
        self.errors = []
        self._lock = threading.Lock()

    def info(self, message: str) -> None:
        if not self.quiet:
            print(message)

    def warn(self, message: str) -> None:
        with self._lock:
            self.warnings.append(message)
        print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        with self._lock:
            self.errors.append(message)
        print(f"Error: {message}", file=sys.stderr)

    @property
    def ok(self) -> bool:
        return not self.errors
