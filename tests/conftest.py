"""Shared fixtures for envyml tests."""

from typing import Dict, List, Mapping, Tuple

import pytest

from envyml.bootstrap import reset_bootstrap
from envyml.cache import MemoryCacheStore
from envyml.commands import CommandResult
from envyml.config import reset_settings
from envyml.environment import EnvironmentStore
from envyml.envyml import Envyml
from envyml.lexer import ExpressionResolver
from envyml.parser import DotenvParser


class FakeCommandRunner:
    """Command runner returning canned output and recording calls."""

    def __init__(self, outputs: Dict[str, str] | None = None, returncode: int = 0, stderr: str = "") -> None:
        self.outputs = outputs or {}
        self.returncode = returncode
        self.stderr = stderr
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def run(self, command: str, env: Mapping[str, str]) -> CommandResult:
        self.calls.append((command, dict(env)))
        return CommandResult(
            stdout=self.outputs.get(command, ""),
            stderr=self.stderr,
            returncode=self.returncode,
        )


@pytest.fixture(autouse=True)
def _reset_globals():
    reset_settings()
    reset_bootstrap()
    yield
    reset_settings()
    reset_bootstrap()


@pytest.fixture
def store() -> EnvironmentStore:
    """Isolated environment store, detached from os.environ."""
    return EnvironmentStore()


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def parser(store: EnvironmentStore, runner: FakeCommandRunner) -> DotenvParser:
    return DotenvParser(ExpressionResolver(store=store, command_runner=runner))


@pytest.fixture
def envyml(store: EnvironmentStore, runner: FakeCommandRunner) -> Envyml:
    return Envyml(store=store, cache=MemoryCacheStore(), command_runner=runner)
