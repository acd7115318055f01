"""Command execution capability used by ``$(...)`` substitution.

The resolver never spawns processes itself; it is handed a ``CommandRunner``.

- ``ShellCommandRunner`` runs the command through ``/bin/sh`` with the
  subprocess module.
- ``DisabledCommandRunner`` refuses every command, for callers that must not
  execute anything from configuration files.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, runtime_checkable

from envyml.exceptions import CommandExecutionError
from envyml.logger import Logger, create_logger


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command execution."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for command execution backends."""

    def run(self, command: str, env: Mapping[str, str]) -> CommandResult:
        """Execute ``command`` with ``env`` as its complete environment.

        Raises:
            CommandExecutionError: If the command cannot be executed at all
        """
        ...


class ShellCommandRunner:
    """Run commands with the POSIX shell.

    The subprocess inherits the current OS environment overlaid with the
    variables passed to ``run``. No timeout is applied unless one is given.
    """

    def __init__(
        self,
        shell: str = "/bin/sh",
        timeout: Optional[float] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.shell = shell
        self.timeout = timeout
        self.logger = logger or create_logger(name="envyml.commands")

    def run(self, command: str, env: Mapping[str, str]) -> CommandResult:
        if os.name == "nt":
            raise CommandExecutionError(
                "Resolving commands is not supported on Windows.",
                code="COMMAND_UNSUPPORTED",
            )

        full_env = dict(os.environ)
        full_env.update(env)

        self.logger.debug("Running command substitution", shell=self.shell)
        try:
            completed = subprocess.run(
                [self.shell, "-c", command],
                env=full_env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise CommandExecutionError(
                f"Unable to execute command ({exc})",
                details={"command": command},
            ) from exc

        return CommandResult(
            stdout=completed.stdout,
            stderr=completed.stderr,
            returncode=completed.returncode,
        )


class DisabledCommandRunner:
    """Runner used when command substitution is not allowed."""

    def __init__(self, reason: str = "Command substitution is disabled.") -> None:
        self.reason = reason

    def run(self, command: str, env: Mapping[str, str]) -> CommandResult:
        raise CommandExecutionError(
            self.reason,
            code="COMMAND_UNSUPPORTED",
            details={"command": command},
        )


__all__ = [
    "CommandResult",
    "CommandRunner",
    "ShellCommandRunner",
    "DisabledCommandRunner",
]
