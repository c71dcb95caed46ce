import pytest

from gozilla.config import ProjectConfig
from gozilla.exceptions import ProjectLayoutError
from gozilla.project import detect_project, read_module_path


def test_detect_project(project_dir):
    project = detect_project(project_dir)
    assert project.root == project_dir.resolve()
    assert project.module_path == "example.com/shop"
    assert project.container_path == project_dir.resolve() / "internal/infrastructure/container/container.go"
    assert project.module_dir("orders") == project_dir.resolve() / "internal/modules/orders"


def test_not_a_go_project(tmp_path):
    with pytest.raises(ProjectLayoutError, match="not in a Go project directory"):
        detect_project(tmp_path)


def test_not_a_gozilla_project(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/x\n")
    with pytest.raises(ProjectLayoutError, match="not in a gozilla project"):
        detect_project(tmp_path)


def test_custom_layout(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/x\n")
    (tmp_path / "pkg").mkdir()
    project = detect_project(tmp_path, ProjectConfig(modules_dir="pkg", container_path="wire.go"))
    assert project.modules_dir == tmp_path.resolve() / "pkg"
    assert project.container_path == tmp_path.resolve() / "wire.go"


@pytest.mark.parametrize(
    "content, expected",
    [
        ("module example.com/shop\n\ngo 1.22\n", "example.com/shop"),
        ("// service\nmodule github.com/acme/api // v2 soon\n", "github.com/acme/api"),
        ('module "example.com/quoted"\n', "example.com/quoted"),
        ("go 1.22\n", "app"),
    ],
)
def test_read_module_path(tmp_path, content, expected):
    go_mod = tmp_path / "go.mod"
    go_mod.write_text(content)
    assert read_module_path(go_mod) == expected


def test_read_module_path_fallback_for_missing_file(tmp_path):
    assert read_module_path(tmp_path / "go.mod", fallback="svc") == "svc"
