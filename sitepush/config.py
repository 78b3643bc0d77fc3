"""Load deployment settings from ``deploy.json`` and the environment."""

from __future__ import annotations

import dataclasses
import json
import os
import pathlib
import sys
from typing import Any, Mapping

from .errors import ConfigError
from .redirects import RedirectMapping, load_redirects
from .rules import DEFAULT_WINDOW_DAYS

DEFAULT_CONFIG_NAME = "deploy.json"
DEFAULT_DEPLOY_DIR = "_deploy"
DEFAULT_HEALTH_DIR = "_health"
DEFAULT_GENERATOR: tuple[str, ...] = ("jekyll", "build")
DEFAULT_GENERATOR_ENV: Mapping[str, str] = {"JEKYLL_ENV": "production"}
DEFAULT_COMPRESS_EXTENSIONS: tuple[str, ...] = ("html", "css", "js")

__all__ = ["SiteConfig", "load_config", "resolve_config_path"]


@dataclasses.dataclass(frozen=True)
class SiteConfig:
    """Settings for one site; immutable for the duration of a run."""

    root: pathlib.Path
    bucket: str = ""
    deploy_dir: pathlib.Path = pathlib.Path(DEFAULT_DEPLOY_DIR)
    generator: tuple[str, ...] = DEFAULT_GENERATOR
    generator_env: Mapping[str, str] = dataclasses.field(default_factory=lambda: dict(DEFAULT_GENERATOR_ENV))
    compress_extensions: tuple[str, ...] = DEFAULT_COMPRESS_EXTENSIONS
    window_days: int = DEFAULT_WINDOW_DAYS
    cf_invalidate: bool = True
    empty_match_fails: bool = True
    s3cmd: str = "s3cmd"
    health_dir: pathlib.Path = pathlib.Path(DEFAULT_HEALTH_DIR)
    redirects: tuple[RedirectMapping, ...] = ()

    @property
    def tree(self) -> pathlib.Path:
        return self.deploy_dir if self.deploy_dir.is_absolute() else self.root / self.deploy_dir

    @property
    def health_path(self) -> pathlib.Path:
        return self.health_dir if self.health_dir.is_absolute() else self.root / self.health_dir

    def require_bucket(self) -> str:
        if not self.bucket:
            raise ConfigError("No bucket configured; set 'bucket' in deploy.json or SITEPUSH_BUCKET")
        return self.bucket


def _env_int(env: Mapping[str, str], name: str, fallback: int) -> int:
    raw = env.get(name)
    if raw is None:
        return fallback
    raw = raw.strip()
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError:
        print(f"[deploy] Warning: invalid {name}={raw!r}; using {fallback}", file=sys.stderr)
        return fallback


def _read_payload(path: pathlib.Path, *, required: bool = False) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        if required:
            raise ConfigError(f"Config file {path} not found") from exc
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON payload in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected an object in {path}, got {type(data).__name__}")
    return data


def _string_list(data: Mapping[str, Any], key: str, fallback: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return fallback
    if isinstance(value, str):
        value = value.split()
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ConfigError(f"'{key}' must be a list of non-empty strings")
    if not value:
        raise ConfigError(f"'{key}' cannot be empty")
    return tuple(value)


def _bool(data: Mapping[str, Any], key: str, fallback: bool) -> bool:
    value = data.get(key, fallback)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false")
    return value


def resolve_config_path(
    explicit: pathlib.Path | None = None,
    *,
    root: pathlib.Path | None = None,
    env: Mapping[str, str] | None = None,
) -> pathlib.Path:
    env = os.environ if env is None else env
    if explicit is not None:
        return explicit
    override = (env.get("SITEPUSH_CONFIG") or "").strip()
    if override:
        return pathlib.Path(override)
    return (root or pathlib.Path.cwd()) / DEFAULT_CONFIG_NAME


def load_config(
    path: pathlib.Path | None = None,
    *,
    root: pathlib.Path | None = None,
    env: Mapping[str, str] | None = None,
) -> SiteConfig:
    """Read the site configuration, applying ``SITEPUSH_*`` overrides.

    A missing implicit ``deploy.json`` yields the defaults; a file named with
    ``path`` or ``SITEPUSH_CONFIG`` must exist.  Paths in the file are relative
    to the directory holding it.
    """

    env = os.environ if env is None else env
    config_path = resolve_config_path(path, root=root, env=env)
    explicit = path is not None or bool((env.get("SITEPUSH_CONFIG") or "").strip())
    data = _read_payload(config_path, required=explicit)
    base = root or config_path.resolve().parent

    generator_env = data.get("generator_env", DEFAULT_GENERATOR_ENV)
    if not isinstance(generator_env, Mapping) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in generator_env.items()
    ):
        raise ConfigError("'generator_env' must map names to string values")

    window_days = data.get("window_days", DEFAULT_WINDOW_DAYS)
    if not isinstance(window_days, int) or isinstance(window_days, bool):
        raise ConfigError("'window_days' must be an integer")
    window_days = _env_int(env, "SITEPUSH_WINDOW_DAYS", window_days)
    if window_days < 1:
        raise ConfigError(f"'window_days' must be at least 1, got {window_days}")

    extensions = tuple(ext.lstrip(".") for ext in _string_list(data, "compress_extensions", DEFAULT_COMPRESS_EXTENSIONS))

    bucket = (env.get("SITEPUSH_BUCKET") or str(data.get("bucket") or "")).strip().rstrip("/")
    s3cmd = (env.get("SITEPUSH_S3CMD") or str(data.get("s3cmd") or "s3cmd")).strip()

    return SiteConfig(
        root=base,
        bucket=bucket,
        deploy_dir=pathlib.Path(str(data.get("deploy_dir") or DEFAULT_DEPLOY_DIR)),
        generator=_string_list(data, "generator", DEFAULT_GENERATOR),
        generator_env=dict(generator_env),
        compress_extensions=extensions,
        window_days=window_days,
        cf_invalidate=_bool(data, "cf_invalidate", True),
        empty_match_fails=_bool(data, "empty_match_fails", True),
        s3cmd=s3cmd,
        health_dir=pathlib.Path(str(data.get("health_dir") or DEFAULT_HEALTH_DIR)),
        redirects=load_redirects(data.get("redirects")),
    )
