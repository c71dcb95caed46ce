"""Shared fixtures: container sources and a throwaway project layout."""

from pathlib import Path

import pytest

MODULE_PATH = "example.com/shop"

GENERATED_CONTAINER = """\
package container

import (
	"database/sql"

	"example.com/shop/internal/modules/health"
	"github.com/gin-gonic/gin"
)

type Container struct {
	DB           *sql.DB
	HealthModule *health.HealthModule
}

func NewContainer(db *sql.DB) *Container {
	return &Container{
		DB:           db,
		HealthModule: health.NewHealthModule(),
	}
}

func (c *Container) RegisterRoutes(r *gin.Engine) {
	api := r.Group("/api/v1")
	c.HealthModule.RegisterRoutes(api)
}
"""

BARE_CONTAINER = """\
package container

import ()

type Container struct {
	DB *sql.DB
}

func NewContainer(db *sql.DB) *Container {
	return &Container{}
}

func (c *Container) RegisterRoutes(api *gin.RouterGroup) {
}
"""


@pytest.fixture
def generated_container() -> str:
    return GENERATED_CONTAINER


@pytest.fixture
def bare_container() -> str:
    return BARE_CONTAINER


@pytest.fixture
def container_file(tmp_path) -> Path:
    """A standalone container.go holding the generated template."""
    path = tmp_path / "container.go"
    path.write_text(GENERATED_CONTAINER)
    return path


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """Minimal gozilla project: go.mod, modules dir and the generated container."""
    root = tmp_path / "shop"
    (root / "internal" / "modules" / "health").mkdir(parents=True)
    container_dir = root / "internal" / "infrastructure" / "container"
    container_dir.mkdir(parents=True)
    (container_dir / "container.go").write_text(GENERATED_CONTAINER)
    (root / "go.mod").write_text(f"module {MODULE_PATH}\n\ngo 1.22\n")
    return root
