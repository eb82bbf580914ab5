from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from shared.config.settings import ClientSettings

from apps.timerctl.settings import TimerctlSettings

ENV_PREFIX = "LSR_"

# --- paths --------------------------------------------------------------------


def _repo_root() -> Path:
    """Heuristic: walk up from this file until we find pyproject.toml."""
    p = Path(__file__).resolve()
    for ancestor in [p, *p.parents]:
        if (ancestor / "pyproject.toml").exists():
            return ancestor
    return Path.cwd()


def _profiles_dir(env: Mapping[str, str]) -> Path:
    # LSR_CONFIG_DIR points *at* profiles/
    override = env.get(f"{ENV_PREFIX}CONFIG_DIR")
    if override:
        return Path(override)
    return _repo_root() / "configs" / "profiles"


def _load_profile_table(env: Mapping[str, str], profile: str) -> dict[str, Any]:
    f = _profiles_dir(env) / f"{profile}.toml"
    if not f.exists():
        return {}
    text = f.read_text("utf-8")
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise RuntimeError(f"Failed to parse profile TOML: {f}") from e


def _resolve_profile(env: Mapping[str, str], profile: str | None) -> str:
    return (profile or env.get(f"{ENV_PREFIX}PROFILE") or "dev").strip()


# --- env overlay helpers ------------------------------------------------------


def _coerce_env_value(raw: str) -> Any:
    """
    Try to parse JSON first (so numbers/bools work),
    then fall back to the original string.
    """
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _collect_env_for(
    fields: set[str], env: Mapping[str, str], prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """
    Collect overrides like LSR_PORT, LSR_TIMEOUT_S -> {'port': 16834, ...}.
    Case-insensitive after the prefix.
    """
    out: dict[str, Any] = {}
    upper_to_field = {f.upper(): f for f in fields}
    plen = len(prefix)
    for k, v in env.items():
        if not k.startswith(prefix):
            continue
        key = k[plen:].upper()
        if key in upper_to_field:
            out[upper_to_field[key]] = _coerce_env_value(v)
    return out


def _section(table: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = table.get(name, {})
    return dict(section) if isinstance(section, dict) else {}


# --- public API ---------------------------------------------------------------


def load_client_settings(
    env: Mapping[str, str] | None = None, profile: str | None = None
) -> ClientSettings:
    """
    Merge defaults (ClientSettings) <- TOML [client] <- env LSR_*.
    Env examples: LSR_TRANSPORT=pipe, LSR_PORT=16835, LSR_RETRY_READS=false
    """
    env = os.environ if env is None else env
    toml_table = _load_profile_table(env, _resolve_profile(env, profile))
    return _merge_client(_section(toml_table, "client"), env)


def _merge_client(toml_client: Mapping[str, Any], env: Mapping[str, str]) -> ClientSettings:
    # start from defaults exposed by the model
    base = ClientSettings.model_construct().model_dump()
    base.update(toml_client)
    base.update(_collect_env_for(set(base.keys()), env))
    return ClientSettings.model_validate(base)


def load_timerctl_settings(
    env: Mapping[str, str] | None = None, profile: str | None = None
) -> TimerctlSettings:
    """
    Merge defaults (TimerctlSettings) <- TOML [timerctl] <- env LSR_*.
    The nested client is built from [client] exactly like load_client_settings.
    Env examples: LSR_SPLIT_INTERVAL_S=2.5, LSR_COMPARISON="Personal Best"
    """
    env = os.environ if env is None else env
    toml_table = _load_profile_table(env, _resolve_profile(env, profile))

    base = TimerctlSettings.model_construct().model_dump(exclude={"client"})
    base.update({k: v for k, v in _section(toml_table, "timerctl").items() if k != "client"})
    base.update(_collect_env_for(set(base.keys()), env))
    base["client"] = _merge_client(_section(toml_table, "client"), env)

    return TimerctlSettings.model_validate(base)
