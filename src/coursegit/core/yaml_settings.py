"""Layered YAML configuration with ``include:`` directives.

Files are deep-merged, later files winning:

1. package defaults (coursegit/defaults/default.yaml)
2. the user config file (``<user config dir>/coursegit.yaml``)
3. the project file (``./coursegit.yaml``)
4. every ``--include FILE`` given on the command line, in order

A file may name others under ``include:`` (a path or a list, relative
to the including file). Included data is merged underneath the
including file's own keys.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"

# Config loads before the real logger exists; this one covers the gap
_bootstrap_logger = None


def _get_bootstrap_logger():
    global _bootstrap_logger
    if _bootstrap_logger is None:
        # Imported here: log.py -> base.py must not pull in settings
        from coursegit.core.log import Logger
        _bootstrap_logger = Logger()
        _bootstrap_logger.setup(log_root=Path.home())
    return _bootstrap_logger


def close_bootstrap_logger():
    """Drop the bootstrap logger once Config has installed the real one."""
    global _bootstrap_logger
    if _bootstrap_logger is not None:
        _bootstrap_logger.close()
        _bootstrap_logger = None


def _cli_includes(argv: list[str]) -> list[str]:
    """Values of ``--include X`` and ``--include=X`` in argv order."""
    includes = []
    args = iter(argv)
    for arg in args:
        if arg == "--include":
            value = next(args, None)
            if value is not None:
                includes.append(value)
        elif arg.startswith("--include="):
            includes.append(arg.partition("=")[2])
    return includes


def user_config_file() -> Path:
    config_dir = user_config_dir("coursegit", appauthor=False)
    return Path(config_dir) / "coursegit.yaml"


def merge_dicts(base: dict, override: dict) -> dict:
    """Merge nested dicts; ``override`` wins, lists are replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def load_yaml_tree(path: Path, chain: tuple[Path, ...] = ()) -> dict:
    """Load ``path`` and, recursively, the files it includes.

    Raises:
        ValueError: A file includes itself, directly or indirectly
    """
    path = path.resolve()
    if path in chain:
        raise ValueError(f"Circular include: {path}")
    chain = (*chain, path)

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    includes = data.pop("include", None) or []
    if isinstance(includes, str):
        includes = [includes]

    base = {}
    for include in includes:
        target = Path(include).expanduser()
        if not target.is_absolute():
            target = (path.parent / target).resolve()
        with _get_bootstrap_logger().span(
            "Including {name}",
            name=target.name,
            included_from=str(path),
        ):
            base = merge_dicts(base, load_yaml_tree(target, chain))

    return merge_dicts(base, data)


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """Settings source reading the layered YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file=None,
        argv: list[str] | None = None,
    ):
        """Scan argv for --include files.

        Args:
            settings_cls: The settings class being loaded
            yaml_file: Project file (default: the model's yaml_file)
            argv: Arguments scanned for --include (default sys.argv)
        """
        self.project_file = Path(
            yaml_file
            or settings_cls.model_config.get("yaml_file")
            or "coursegit.yaml"
        )
        includes = _cli_includes(sys.argv[1:] if argv is None else argv)
        super().__init__(settings_cls, includes or None)

    def _read_files(self, files, deep_merge: bool = False):  # noqa: ARG002
        if isinstance(files, (str, os.PathLike)):
            files = [files]
        layers = [DEFAULTS_FILE, user_config_file(), self.project_file]
        layers += [Path(f).expanduser() for f in files or []]

        log = _get_bootstrap_logger()
        result = {}
        for layer in layers:
            if not layer.is_file():
                log.debug("No config at {file}", file=str(layer))
                continue
            with log.span("Loading {file}", file=str(layer)):
                result = merge_dicts(result, load_yaml_tree(layer))
        return result
