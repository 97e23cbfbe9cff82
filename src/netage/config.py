"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent and per-document configuration:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.netage/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~netage.models.GlobalConfig` JSON
  file (default profile, plugin allow/deny lists, output format).
* **Profiles** -- YAML files, each deserialised into a
  :class:`~netage.models.Profile`. Packaged profiles live next to this
  module in ``profiles/``; a user profile with the same name takes
  precedence.
* **Document configuration** -- author settings come from the project
  file ``./netage.json``, a ``<script type="application/json"
  class="netage-config">`` element inside the document, and a file given
  on the command line, merged by :func:`resolve_document_config`.
* **Profile resolution** -- :func:`resolve_config` picks the active
  profile from CLI flags, the environment, project and global config.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from bs4 import BeautifulSoup

from netage.exceptions import ConfigError
from netage.models import GlobalConfig, Profile

_APP_NAME = "netage"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "netage.json"
_PACKAGED_PROFILES_DIR = Path(__file__).parent / "profiles"

DEFAULT_PROFILE = "netage"
"""Profile used when nothing else selects one."""

EMBEDDED_CONFIG_CLASS = "netage-config"
"""Class of the ``<script type="application/json">`` holding document config."""

_frozen_profiles: dict[str, Profile] = {}
_frozen_default: Optional[str] = None


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, falling back under ``$HOME``."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/netage/`` (default ``~/.config/netage/``).
    On macOS/Windows: ``~/.netage/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/netage/`` (default ``~/.local/share/netage/``).
    On macOS/Windows: ``~/.netage/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the user profiles directory (``<config_dir>/profiles/``)."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_packaged_profiles_dir() -> Path:
    """Return the directory holding the profiles shipped with the package."""
    return _PACKAGED_PROFILES_DIR


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file and ``os.replace``.

    The temporary file lives in the same directory as *path* so the rename
    is atomic on POSIX. It is removed on any failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults if the file is missing.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Profiles ---


def freeze_profile(profile: Profile) -> None:
    """Register *profile* in memory and make it the default.

    Bundled archives call this from their generated ``__main__`` module,
    since files inside a zip archive cannot be read through the filesystem.
    """
    global _frozen_default
    _frozen_profiles[profile.name] = profile
    _frozen_default = profile.name


def _profile_candidates(name: str) -> list[Path]:
    """User profile first, packaged profile second."""
    return [
        get_profiles_dir() / f"{name}.yaml",
        get_packaged_profiles_dir() / f"{name}.yaml",
    ]


def list_profiles() -> list[str]:
    """Return the names of all packaged and user profiles, sorted."""
    names = {p.stem for p in get_packaged_profiles_dir().glob("*.yaml") if p.is_file()}
    names.update(_frozen_profiles)
    names.update(p.stem for p in get_profiles_dir().glob("*.yaml") if p.is_file())
    return sorted(names)


def profile_exists(name: str) -> bool:
    if name in _frozen_profiles:
        return True
    return any(path.is_file() for path in _profile_candidates(name))


def load_profile(name: str) -> Profile:
    """Load and validate the profile called *name*.

    A profile file may omit ``name``; the file stem is used.

    Raises:
        ConfigError: If no profile file exists, or it contains invalid YAML
            or fails validation.
    """
    if name in _frozen_profiles:
        return _frozen_profiles[name].model_copy(deep=True)
    for path in _profile_candidates(name):
        if path.is_file():
            break
    else:
        raise ConfigError(f"Profile '{name}' not found")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError("expected a mapping at the top level")
        data.setdefault("name", name)
        return Profile.model_validate(data)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> Path:
    """Persist *profile* as YAML in the user profiles directory.

    Returns:
        The path written.
    """
    path = get_profiles_dir() / f"{profile.name}.yaml"
    data = profile.model_dump(mode="json")
    _atomic_write(path, yaml.safe_dump(data, sort_keys=False))
    return path


# --- Document configuration sources ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./netage.json``.

    The file may hold ``profile`` (the profile to use) and ``config`` (a
    mapping of document configuration applied to every document).

    Returns:
        The parsed mapping, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file holds invalid JSON or is not an object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected an object")
    return data


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a document configuration file, JSON or YAML by extension.

    Raises:
        ConfigError: If the file is missing, unparsable, or not a mapping.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a mapping")
    return data


def extract_embedded_config(soup: BeautifulSoup) -> Optional[dict[str, Any]]:
    """Read the configuration embedded in the document, if any.

    Looks for ``<script type="application/json" class="netage-config">``.

    Raises:
        ConfigError: If the script's content is not a JSON object.
    """
    script = soup.find("script", class_=EMBEDDED_CONFIG_CLASS)
    if script is None:
        return None
    text = script.get_text().strip()
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid embedded configuration: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Invalid embedded configuration: expected an object")
    return data


def resolve_document_config(
    soup: BeautifulSoup,
    cli_config: Optional[dict[str, Any]] = None,
    project: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Combine the author's configuration sources.

    Later sources replace earlier values, except that two ``lint`` mappings
    are merged key by key, as :func:`netage.defaults.merge_defaults` does.
    ``lint: false`` in a later source still switches linting off.

    Precedence (high to low):
        1. The file given with ``--config``
        2. The configuration embedded in the document
        3. The ``config`` mapping of ``./netage.json``

    Defaults are not applied here; that is the ``netage/defaults`` plugin's
    job.
    """
    layers = []
    if project and isinstance(project.get("config"), dict):
        layers.append(project["config"])
    layers.append(extract_embedded_config(soup))
    layers.append(cli_config)

    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            previous = merged.get(key)
            if key == "lint" and isinstance(previous, dict) and isinstance(value, dict):
                value = {**previous, **value}
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_profile_name(
    cli_profile: Optional[str] = None,
    global_cfg: Optional[GlobalConfig] = None,
    project: Optional[dict[str, Any]] = None,
) -> str:
    """Pick the active profile name.

    Precedence (high to low):
        1. CLI flag
        2. ``NETAGE_PROFILE`` environment variable
        3. The profile frozen into a bundle, see :func:`freeze_profile`
        4. ``profile`` in ``./netage.json``
        5. ``default_profile`` in the global config
        6. :data:`DEFAULT_PROFILE`
    """
    if cli_profile:
        return cli_profile
    env_profile = os.environ.get("NETAGE_PROFILE")
    if env_profile:
        return env_profile
    if _frozen_default:
        return _frozen_default
    if project and project.get("profile"):
        return str(project["profile"])
    if global_cfg is not None and global_cfg.default_profile:
        return global_cfg.default_profile
    return DEFAULT_PROFILE


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Profile, Optional[dict[str, Any]]]:
    """Resolve the global config, the active profile and the project config.

    Returns:
        A tuple of ``(global_config, profile, project_config_or_None)``.

    Raises:
        ConfigError: If any source is invalid or the profile does not exist.
    """
    global_cfg = load_global_config()
    project = load_project_config()
    name = resolve_profile_name(cli_profile, global_cfg, project)
    profile = load_profile(name)
    if cli_format is not None:
        global_cfg.output.format = cli_format
    return global_cfg, profile, project
