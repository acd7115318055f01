"""Tests for the Envyml facade"""

import pytest

from envyml.cache import MemoryCacheStore
from envyml.commands import ShellCommandRunner
from envyml.document import YamlDocumentParser
from envyml.environment import EnvironmentStore
from envyml.envyml import Envyml
from envyml.exceptions import FileAccessError, FormatError
from envyml.populate import REGISTRY_NAME


class CountingParser(YamlDocumentParser):
    def __init__(self):
        self.calls = 0

    def parse(self, path):
        self.calls += 1
        return super().parse(path)


@pytest.fixture
def env_dir(tmp_path):
    def write(name, content):
        path = tmp_path / name
        path.write_text(content)
        return path

    return write


class TestLoad:
    """Hierarchical documents"""

    def test_load_populates_flat_names(self, envyml, store, env_dir):
        path = env_dir("env.yml", "ENV:\n  DEBUG: true\nDatabase:\n  Host: db1\n  Port: 5432\n")

        envyml.load(path)

        assert store.get("DEBUG") == "1"
        assert store.get("Database_Host") == "db1"
        assert store.get("Database_Port") == "5432"
        assert store.get(REGISTRY_NAME) == "Database_Host,Database_Port,DEBUG"

    def test_load_keeps_existing_variables(self, envyml, store, env_dir):
        store.request["Database_Host"] = "from-os"
        envyml.load(env_dir("env.yml", "Database:\n  Host: db1\n"))
        assert store.get("Database_Host") == "from-os"

    def test_overload_replaces_existing_variables(self, envyml, store, env_dir):
        store.request["Database_Host"] = "from-os"
        envyml.overload(env_dir("env.yml", "Database:\n  Host: db1\n"))
        assert store.get("Database_Host") == "db1"

    def test_later_documents_refine_owned_variables(self, envyml, store, env_dir):
        base = env_dir("env.yml", "A: base\nB: base\n")
        overlay = env_dir("env.override.yml", "B: overlay\n")

        envyml.load(base, overlay)

        assert store.get("A") == "base"
        assert store.get("B") == "overlay"

    def test_overload_round_trip(self, envyml, store, env_dir):
        path = env_dir(
            "env.yml",
            "ENV:\n  A: 1\nA: 0\nHosts: [a, b]\nFlags:\n  Enabled: true\n  Disabled: false\n",
        )
        store.request["A"] = "external"

        values = envyml.loader.load(path)
        envyml.overload(path)

        assert {name: store.get(name) for name in values} == dict(values)
        assert dict(values) == {
            "A": "1",
            "Hosts_0": "a",
            "Hosts_1": "b",
            "Flags_Enabled": "1",
            "Flags_Disabled": "",
        }

    def test_overload_round_trip_with_http_prefixed_key(self, envyml, store, env_dir):
        path = env_dir("env.yml", "HTTP:\n  PROXY: proxy.internal:3128\n")
        store.request["HTTP_PROXY"] = "client-header"

        envyml.overload(path)

        assert store.get("HTTP_PROXY") == "proxy.internal:3128"

    def test_missing_document(self, envyml, tmp_path):
        with pytest.raises(FileAccessError):
            envyml.load(tmp_path / "missing.yml")

    def test_invalid_document(self, envyml, store, env_dir):
        with pytest.raises(FormatError):
            envyml.load(env_dir("env.yml", "A: [1, 2\n"))
        assert store.get(REGISTRY_NAME) is None

    def test_document_is_parsed_once(self, store, env_dir):
        parser = CountingParser()
        envyml = Envyml(store=store, cache=MemoryCacheStore(), document_parser=parser)
        path = env_dir("env.yml", "A: 1\n")

        envyml.load(path)
        envyml.overload(path)

        assert parser.calls == 1

    def test_custom_root_key(self, store, env_dir):
        envyml = Envyml(store=store, root_key="APP")
        envyml.load(env_dir("env.yml", "APP:\n  A: 1\nENV:\n  B: 2\n"))
        assert store.get("A") == "1"
        assert store.get("ENV_B") == "2"


class TestLoadEnv:
    """Environment-specific overlays"""

    def test_all_overlays_in_order(self, envyml, store, env_dir):
        base = env_dir("env.yml", "X: base\nA: base\n")
        env_dir("env.yml.local", "X: local\n")
        env_dir("env.yml.dev", "X: dev\nB: dev\n")
        env_dir("env.yml.dev.local", "X: dev-local\n")

        envyml.load_env(base)

        assert store.get("APP_ENV") == "dev"
        assert store.get("X") == "dev-local"
        assert store.get("A") == "base"
        assert store.get("B") == "dev"

    def test_dist_used_when_base_missing(self, envyml, store, tmp_path, env_dir):
        env_dir("env.yml.dist", "A: dist\n")
        envyml.load_env(tmp_path / "env.yml")
        assert store.get("A") == "dist"

    def test_base_wins_over_dist(self, envyml, store, env_dir):
        base = env_dir("env.yml", "A: base\n")
        env_dir("env.yml.dist", "A: dist\n")
        envyml.load_env(base)
        assert store.get("A") == "base"

    def test_test_env_ignores_local(self, envyml, store, env_dir):
        store.request["APP_ENV"] = "test"
        base = env_dir("env.yml", "X: base\n")
        env_dir("env.yml.local", "X: local\n")
        env_dir("env.yml.test", "Y: test\n")

        envyml.load_env(base)

        assert store.get("X") == "base"
        assert store.get("Y") == "test"

    def test_local_env_skips_env_overlays(self, envyml, store, env_dir):
        store.request["APP_ENV"] = "local"
        base = env_dir("env.yml", "X: base\n")
        env_dir("env.yml.local", "X: local\n")
        env_dir("env.yml.local.local", "X: never\n")

        envyml.load_env(base)

        assert store.get("X") == "local"

    def test_local_file_can_switch_env(self, envyml, store, env_dir):
        base = env_dir("env.yml", "X: base\n")
        env_dir("env.yml.local", "APP_ENV: prod\n")
        env_dir("env.yml.prod", "X: prod\n")
        env_dir("env.yml.dev", "X: dev\n")

        envyml.load_env(base)

        assert store.get("APP_ENV") == "prod"
        assert store.get("X") == "prod"

    def test_custom_variable_and_default(self, envyml, store, env_dir):
        base = env_dir("env.yml", "X: base\n")
        env_dir("env.yml.staging", "X: staging\n")

        envyml.load_env(base, var_name="STAGE", default_env="staging")

        assert store.get("STAGE") == "staging"
        assert store.get("X") == "staging"

    def test_missing_base_and_dist(self, envyml, tmp_path):
        with pytest.raises(FileAccessError):
            envyml.load_env(tmp_path / "env.yml")


class TestDotenv:
    """Dotenv files through the facade"""

    def test_load_dotenv(self, envyml, store, env_dir):
        envyml.load_dotenv(env_dir(".env", 'A=1\nB="${A}2"\n'))
        assert store.get("A") == "1"
        assert store.get("B") == "12"

    def test_load_dotenv_keeps_existing(self, envyml, store, env_dir):
        store.request["A"] = "os"
        envyml.load_dotenv(env_dir(".env", "A=file\n"))
        assert store.get("A") == "os"

    def test_load_dotenv_override(self, envyml, store, env_dir):
        store.request["A"] = "os"
        envyml.load_dotenv(env_dir(".env", "A=file\n"), override=True)
        assert store.get("A") == "file"

    def test_several_files(self, envyml, store, env_dir):
        first = env_dir(".env", "A=1\n")
        second = env_dir(".env.local", "B=$A$A\n")
        envyml.load_dotenv(first, second)
        assert store.get("B") == "11"

    def test_failing_file_sets_nothing(self, envyml, store, env_dir):
        with pytest.raises(FormatError):
            envyml.load_dotenv(env_dir(".env", "A=1\nB=has space\n"))
        assert store.get("A") is None

    def test_commands_use_injected_runner(self, envyml, store, runner, env_dir):
        runner.outputs["whoami"] = "deploy\n"
        envyml.load_dotenv(env_dir(".env", "USER_NAME=$(whoami)\n"))
        assert store.get("USER_NAME") == "deploy"

    def test_dotenv_references_document_values(self, envyml, store, env_dir):
        envyml.load(env_dir("env.yml", "Database:\n  Host: db1\n"))
        envyml.load_dotenv(env_dir(".env", "DATABASE_URL=postgres://$Database_Host/app\n"))
        assert store.get("DATABASE_URL") == "postgres://db1/app"

    def test_parse_does_not_touch_store(self, envyml, store):
        assert envyml.parse("A=1") == {"A": "1"}
        assert store.get("A") is None

    def test_populate(self, envyml, store):
        envyml.populate({"A": "1"})
        assert store.get("A") == "1"


class TestConstruction:
    def test_default_command_runner_is_shell(self, store):
        envyml = Envyml(store=store)
        assert isinstance(envyml.parser.resolver.command_runner, ShellCommandRunner)

    def test_default_store_follows_os_environment(self, monkeypatch):
        monkeypatch.setenv("ENVYML_FACADE_TEST", "1")
        envyml = Envyml()
        assert envyml.store.get("ENVYML_FACADE_TEST") == "1"
        assert envyml.store.use_putenv is False

    def test_use_putenv(self):
        assert Envyml(use_putenv=True).store.use_putenv is True

    def test_injected_store_is_used(self):
        store = EnvironmentStore()
        assert Envyml(store=store).store is store
