"""Configuration for gozilla.

Settings come from the pydantic defaults below, then `gozilla.yaml` in the
project root, then `-c/--config` specs given on the command line.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from gozilla.utils.serialize import recursive_merge

PROJECT_CONFIG_FILE = "gozilla.yaml"

DEFAULT_SUMMARY_TEMPLATE = """\
{% if report.written %}Module '{{ names.module }}' wired into {{ report.path }}{% elif report.changed %}\
Dry run: {{ report.path }} left untouched{% else %}Module '{{ names.module }}' was already wired; nothing to do{% endif %}

Next steps:
  1. Implement business logic in {{ modules_dir }}/{{ names.module }}/domain/
  2. Add use cases in {{ modules_dir }}/{{ names.module }}/application/
  3. Run: make run
"""


class WiringConfig(BaseModel):
    struct_name: str = "Container"
    """Name of the aggregate type that holds one field per module."""
    constructor_name: str = "NewContainer"
    """Function whose single `return &Container{...}` builds every module."""
    method_name: str = "RegisterRoutes"
    """Container method that registers the routes of each module."""
    module_method: str = "RegisterRoutes"
    """Method called on each module from inside `method_name`."""
    route_group: str = "api"
    """Argument passed to every module's registration call."""
    db_handle: str = "db"
    """Shared database handle passed to every module constructor."""
    receiver_name: str = "c"
    """Receiver used when the registration method declares none."""
    strict: bool = True
    """Fail when an anchor is missing or misshapen instead of skipping it."""
    lock_timeout: float = float(os.getenv("GOZILLA_LOCK_TIMEOUT", "30"))
    """Seconds to wait for the container lock. Negative waits forever."""


class ProjectConfig(BaseModel):
    container_path: str = "internal/infrastructure/container/container.go"
    """Wiring file, relative to the project root."""
    modules_dir: str = "internal/modules"
    """Directory holding one package per feature module."""
    go_mod: str = "go.mod"
    fallback_module_path: str = "app"
    """Module path used when go.mod has no `module` directive."""


class GozillaConfig(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    wiring: WiringConfig = Field(default_factory=WiringConfig)
    summary_template: str = DEFAULT_SUMMARY_TEMPLATE
    """Jinja2 template printed after `generate module` succeeds."""


def _key_value_spec_to_nested_dict(spec: str) -> dict:
    """Turn `wiring.strict=false` into `{"wiring": {"strict": False}}`."""
    key, value = spec.split("=", 1)
    result: dict[str, Any] = {}
    current = result
    *parents, last = key.strip().split(".")
    for part in parents:
        current = current.setdefault(part, {})
    current[last] = yaml.safe_load(value) if value.strip() else ""
    return result


def _load_yaml(path: Path) -> dict:
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def get_config_from_spec(spec: str | Path) -> dict:
    """Resolve one config spec: a YAML file path or a `dotted.key=value` pair."""
    if isinstance(spec, str) and "=" in spec and not Path(spec).is_file():
        return _key_value_spec_to_nested_dict(spec)
    path = Path(spec)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {spec}")
    return _load_yaml(path)


def load_config(project_root: Path | None = None, specs: list[str] | None = None) -> GozillaConfig:
    """Build the effective config for a project root and command line specs."""
    layers: list[dict] = []
    if project_root is not None and (project_file := Path(project_root) / PROJECT_CONFIG_FILE).is_file():
        layers.append(_load_yaml(project_file))
    layers.extend(get_config_from_spec(spec) for spec in specs or [])
    return GozillaConfig.model_validate(recursive_merge(*layers))
