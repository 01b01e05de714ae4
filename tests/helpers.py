"""Shared test doubles for the navigator's collaborators.

Import from here (``from tests.helpers import FakeExecutor``) instead of
redefining fakes in each test module.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from navigator_go.process import ExecResult
from navigator_go.tools import InstallRequest, InstallResult

GO_SOURCE = 'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("café", helper())\n}\n'
HELPER_SOURCE = "package main\n\nfunc helper() string {\n\treturn \"hi\"\n}\n"


@dataclass
class ExecCall:
    command: str
    args: list[str]
    cwd: str | None
    env: Mapping[str, str] | None


@dataclass
class FakeExecutor:
    """Executor returning a canned result and recording every call."""

    stdout: str = ""
    stderr: str = ""
    exitcode: int = 0
    error: Exception | None = None
    calls: list[ExecCall] = field(default_factory=list)

    async def exec(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ExecResult:
        self.calls.append(ExecCall(command, list(args), cwd, env))
        if self.error is not None:
            raise self.error
        return ExecResult(stdout=self.stdout, stderr=self.stderr, exitcode=self.exitcode)

    def answer(self, objpos: str) -> None:
        self.stdout = json.dumps({"objpos": objpos})


@dataclass
class FakeLocator:
    path: str | None = "/usr/local/bin/guru"
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def find_tool(
        self, name: str, *, file: str | None = None, directory: str | None = None
    ) -> str | None:
        self.calls.append({"name": name, "file": file, "directory": directory})
        return self.path


@dataclass
class FakeInstaller:
    success: bool = True
    error: Exception | None = None
    locator: FakeLocator | None = None
    requests: list[InstallRequest] = field(default_factory=list)

    async def install(self, request: InstallRequest) -> InstallResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.success and self.locator is not None:
            self.locator.path = "/home/user/go/bin/guru"
        return InstallResult(success=self.success, detail="" if self.success else "network down")


