"""Recognise a gozilla project and read what the wiring engine needs from it."""

import logging
from dataclasses import dataclass
from pathlib import Path

from gozilla.config import ProjectConfig
from gozilla.exceptions import ProjectLayoutError

logger = logging.getLogger("gozilla.project")


def read_module_path(go_mod: Path, fallback: str = "app") -> str:
    """Module path declared by the `module` directive of go.mod."""
    try:
        lines = go_mod.read_text().splitlines()
    except OSError:
        logger.warning(f"Could not read {go_mod}, using module path '{fallback}'")
        return fallback
    for line in lines:
        if line.startswith("module "):
            return line.removeprefix("module ").split("//", 1)[0].strip().strip('"')
    logger.warning(f"No module directive in {go_mod}, using module path '{fallback}'")
    return fallback


@dataclass(frozen=True)
class ProjectLayout:
    root: Path
    module_path: str
    config: ProjectConfig

    @property
    def container_path(self) -> Path:
        return self.root / self.config.container_path

    @property
    def modules_dir(self) -> Path:
        return self.root / self.config.modules_dir

    def module_dir(self, module: str) -> Path:
        return self.modules_dir / module


def detect_project(root: Path | str = ".", config: ProjectConfig | None = None) -> ProjectLayout:
    config = config or ProjectConfig()
    root = Path(root).resolve()
    go_mod = root / config.go_mod
    if not go_mod.is_file():
        raise ProjectLayoutError(f"not in a Go project directory ({config.go_mod} not found in {root})")
    if not (root / config.modules_dir).is_dir():
        raise ProjectLayoutError(f"not in a gozilla project ({config.modules_dir} not found in {root})")
    return ProjectLayout(root=root, module_path=read_module_path(go_mod, config.fallback_module_path), config=config)
