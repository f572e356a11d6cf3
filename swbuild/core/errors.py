"""Exception types raised by swbuild."""

from __future__ import annotations

from typing import Optional, Sequence


class SwBuildError(RuntimeError):
    """Base class for all build errors reported to the operator."""


class ConfigError(SwBuildError):
    """Shop configuration or settings could not be loaded. Always fatal."""


class ToolError(SwBuildError):
    """An external tool (lessc, uglifyjs, ...) exited unsuccessfully."""

    def __init__(
        self,
        tool: str,
        message: str,
        cmd: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        stdout: str = "",
    ):
        super().__init__(f"{tool}: {message}")
        self.tool = tool
        self.cmd = list(cmd) if cmd else []
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout


class LintError(ToolError):
    """The linter reported at least one error-level violation."""


class TaskFailure(SwBuildError):
    """One or more tasks of a scheduled batch failed."""

    def __init__(self, failed: dict[str, BaseException]):
        names = ", ".join(sorted(failed))
        super().__init__(f"Task(s) failed: {names}")
        self.failed = failed

    @property
    def first_cause(self) -> BaseException:
        return self.failed[sorted(self.failed)[0]]
