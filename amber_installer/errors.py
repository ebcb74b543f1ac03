from __future__ import annotations

from typing import Optional, Sequence


class InstallerError(RuntimeError):
    """Base class for every failure the installer reports to the user."""


class UsageError(InstallerError):
    pass


class HelpRequested(UsageError):
    """Raised as soon as -h/--help is seen."""

    def __init__(self) -> None:
        super().__init__("help requested")


class MissingInputError(InstallerError):
    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class ExternalToolError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, detail: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if detail:
            msg += f"\n{detail}"
        super().__init__(msg)
