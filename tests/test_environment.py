import os

import pytest

from envbind import environment
from envbind.core.errors import NotSetError


def test_get_reads_live_environment(config_env):
    config_env(ENVBIND_TEST_VALUE="first")
    assert environment.get("ENVBIND_TEST_VALUE") == "first"

    config_env(ENVBIND_TEST_VALUE="second")
    assert environment.get("ENVBIND_TEST_VALUE") == "second"


def test_get_missing_returns_none(config_env):
    config_env(ENVBIND_TEST_MISSING=None)
    assert environment.get("ENVBIND_TEST_MISSING") is None


def test_get_or_distinguishes_empty_from_unset(env_factory):
    env = env_factory(EMPTY="")
    assert env.get_or("EMPTY", "fallback") == ""
    assert env.get_or("ABSENT", "fallback") == "fallback"


def test_get_required_accepts_empty_value(env_factory):
    env = env_factory(EMPTY="")
    assert env.get_required("EMPTY") == ""


def test_get_required_raises_not_set(env_factory):
    env = env_factory()
    with pytest.raises(NotSetError) as excinfo:
        env.get_required("ABSENT")
    assert excinfo.value.key == "ABSENT"
    assert '"ABSENT"' in str(excinfo.value)


def test_must_get_is_fatal(env_factory):
    env = env_factory(PRESENT="yes")
    assert env.must_get("PRESENT") == "yes"
    with pytest.raises(SystemExit) as excinfo:
        env.must_get("ABSENT")
    assert "ABSENT" in str(excinfo.value)


def test_set_and_unset_on_process_environment(monkeypatch):
    monkeypatch.delenv("ENVBIND_TEST_WRITE", raising=False)
    try:
        environment.set("ENVBIND_TEST_WRITE", "value")
        assert os.environ["ENVBIND_TEST_WRITE"] == "value"
        environment.unset("ENVBIND_TEST_WRITE")
        assert "ENVBIND_TEST_WRITE" not in os.environ
        # unsetting an absent key is not an error
        environment.unset("ENVBIND_TEST_WRITE")
    finally:
        os.environ.pop("ENVBIND_TEST_WRITE", None)


@pytest.mark.parametrize(
    ("template", "expected"),
    [
        ("${HOME}/data", "/home/tester/data"),
        ("$HOME/data", "/home/tester/data"),
        ("$USER_NAME-$HOME", "bob-/home/tester"),
        ("${MISSING}x", "x"),
        ("cost: $", "cost: $"),
        ("a $ b", "a $ b"),
        ("${}", ""),
        ("prefix ${HOME", "prefix HOME"),
        ("$1st", "st"),
        ("no references", "no references"),
    ],
)
def test_expand(env_factory, template, expected):
    env = env_factory(HOME="/home/tester", USER_NAME="bob")
    assert env.expand(template) == expected


def test_load_dotenv_keeps_existing_values(env_factory, tmp_path):
    dotenv_file = tmp_path / ".env"
    dotenv_file.write_text("FROM_FILE=file\nSHARED=file\n", encoding="utf-8")
    env = env_factory(SHARED="process")

    written = env.load_dotenv(dotenv_file)

    assert written == 1
    assert env.get("FROM_FILE") == "file"
    assert env.get("SHARED") == "process"


def test_load_dotenv_override(env_factory, tmp_path):
    dotenv_file = tmp_path / ".env"
    dotenv_file.write_text("SHARED=file\n", encoding="utf-8")
    env = env_factory(SHARED="process")

    env.load_dotenv(dotenv_file, override=True)

    assert env.get("SHARED") == "file"


def test_load_dotenv_missing_file(env_factory, tmp_path):
    with pytest.raises(FileNotFoundError):
        env_factory().load_dotenv(tmp_path / "absent.env")
