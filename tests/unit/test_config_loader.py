from __future__ import annotations

from pathlib import Path

import pydantic
import pytest
from shared.config.loader import load_client_settings, load_timerctl_settings
from shared.contracts.v1 import DEFAULT_TCP_PORT, default_pipe_path


def _write_profile(dirpath: Path, name: str, text: str) -> Path:
    dirpath.mkdir(parents=True, exist_ok=True)
    p = dirpath / f"{name}.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_client_defaults_when_no_profile_and_no_env(tmp_path: Path):
    env = {"LSR_CONFIG_DIR": str(tmp_path / "missing")}
    s = load_client_settings(env=env, profile="dev")
    assert s.transport == "tcp"
    assert s.host == "127.0.0.1"
    assert s.port == DEFAULT_TCP_PORT
    assert s.pipe_path == default_pipe_path()
    assert s.timeout_s == 2.0
    assert s.retry_reads is True


def test_shipped_dev_profile_matches_defaults():
    s = load_client_settings(env={}, profile="dev")
    assert s.transport == "tcp"
    assert s.port == DEFAULT_TCP_PORT


def test_client_toml_overlay(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(
        profiles,
        "dev",
        """
        [client]
        transport = "pipe"
        pipe_path = "/run/timer.sock"
        timeout_s = 0.5
        """,
    )

    s = load_client_settings(env={"LSR_CONFIG_DIR": str(profiles)})
    assert s.transport == "pipe"
    assert s.pipe_path == "/run/timer.sock"
    assert s.timeout_s == 0.5
    assert s.port == DEFAULT_TCP_PORT


def test_client_env_overrides_toml(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(
        profiles,
        "dev",
        """
        [client]
        host = "10.0.0.5"
        port = 17000
        """,
    )

    env = {
        "LSR_CONFIG_DIR": str(profiles),
        "LSR_PORT": "17001",  # string parses to int
        "LSR_retry_reads": "false",  # case-insensitive after the prefix
        "LSR_HOST": "timer-box",  # not JSON, kept as a string
    }
    s = load_client_settings(env=env)
    assert s.host == "timer-box"
    assert s.port == 17001
    assert s.retry_reads is False


def test_unrelated_env_is_ignored(tmp_path: Path):
    env = {
        "LSR_CONFIG_DIR": str(tmp_path),
        "LSR_NOT_A_FIELD": "1",
        "PORT": "1",
    }
    s = load_client_settings(env=env)
    assert s.port == DEFAULT_TCP_PORT


def test_profile_selected_via_env(tmp_path: Path):
    profiles = tmp_path / "custom_profiles"
    _write_profile(profiles, "stream", '[client]\nhost = "stream-pc"\n')

    env = {"LSR_CONFIG_DIR": str(profiles), "LSR_PROFILE": "stream"}
    assert load_client_settings(env=env).host == "stream-pc"


def test_explicit_profile_beats_env_profile(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(profiles, "a", "[client]\nport = 1111\n")
    _write_profile(profiles, "b", "[client]\nport = 2222\n")

    env = {"LSR_CONFIG_DIR": str(profiles), "LSR_PROFILE": "a"}
    assert load_client_settings(env=env, profile="b").port == 2222


def test_timerctl_section_and_nested_client(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(
        profiles,
        "dev",
        """
        [timerctl]
        split_interval_s = 0.5
        comparison = "Best Segments"

        [client]
        port = 16999
        """,
    )

    env = {"LSR_CONFIG_DIR": str(profiles), "LSR_SPLIT_INTERVAL_S": "1.25"}
    s = load_timerctl_settings(env=env)
    assert s.split_interval_s == 1.25
    assert s.comparison == "Best Segments"
    assert s.client.port == 16999


def test_timerctl_reads_process_env(isolated_config: Path, monkeypatch: pytest.MonkeyPatch):
    _write_profile(isolated_config, "dev", '[timerctl]\ncomparison = "Personal Best"\n')
    monkeypatch.setenv("LSR_TRANSPORT", "pipe")

    s = load_timerctl_settings()
    assert s.comparison == "Personal Best"
    assert s.client.transport == "pipe"


def test_invalid_values_fail_validation(tmp_path: Path):
    env = {"LSR_CONFIG_DIR": str(tmp_path), "LSR_PORT": "0"}
    with pytest.raises(pydantic.ValidationError):
        load_client_settings(env=env)


def test_bad_toml_raises_runtime_error(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(profiles, "dev", "[client]\nthis = not_valid\n")

    with pytest.raises(RuntimeError):
        load_client_settings(env={"LSR_CONFIG_DIR": str(profiles)})
