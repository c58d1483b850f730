"""Shared fixtures for the imagetest suite."""
import pytest

from imagetest.core.errors import CommandError
from imagetest.executor.process_runner import CommandResult

pytest_plugins = ["imagetest.testing.pytest_plugin"]


class FakeRuntime:
    """
    Stands in for the build tool and container runtime CLIs.

    Records every invocation and answers like the real tools would.
    Individual operations can be made to fail via ``fail_on``.
    """

    def __init__(
        self,
        container_id: str = "3f2a9c1d8e7b",
        address: str = "172.17.0.2",
        command_output: bytes = b"ruby 2.0.0p0 (2013-02-24) [x86_64-linux]\n",
    ) -> None:
        self.container_id = container_id
        self.address = address
        self.command_output = command_output
        self.fail_on: dict[str, bytes] = {}
        self.calls: list[tuple[str, list[str]]] = []

    def operation(self, executable: str, args: list[str]) -> str:
        if args[0] == "build":
            return "build"
        if args[0] == "run":
            return "run-rm" if "--rm" in args else "run"
        return args[0]

    def calls_for(self, operation: str) -> list[list[str]]:
        return [args for exe, args in self.calls if self.operation(exe, args) == operation]

    def __call__(self, executable, args, timeout=None) -> CommandResult:
        args = list(args)
        self.calls.append((executable, args))
        operation = self.operation(executable, args)
        argv = [executable, *args]

        if operation in self.fail_on:
            raise CommandError(argv, "exit status 1", self.fail_on[operation], exit_code=1)

        outputs = {
            "build": b"---> Installing application source\n",
            "run": f"{self.container_id}\n".encode(),
            "inspect": f"'{self.address}'\n".encode(),
            "exec": self.command_output,
            "run-rm": self.command_output,
            "rm": f"{self.container_id}\n".encode(),
        }
        return CommandResult(argv=argv, output=outputs.get(operation, b""))


@pytest.fixture
def fake_runtime():
    return FakeRuntime()
