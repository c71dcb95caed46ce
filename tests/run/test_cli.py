"""Tests for the `gozilla` command line."""

import logging

import pytest
from typer.testing import CliRunner

from gozilla.run.cli import app

runner = CliRunner()


def _container(project_dir):
    return project_dir / "internal" / "infrastructure" / "container" / "container.go"


@pytest.fixture
def restore_log_handlers():
    logger = logging.getLogger("gozilla")
    handlers = list(logger.handlers)
    yield
    for handler in logger.handlers[len(handlers) :]:
        logger.removeHandler(handler)
        handler.close()


def test_generate_module(project_dir):
    result = runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert "Generating module: orders" in result.output
    assert "inserted" in result.output
    assert "Module 'orders' wired into" in result.output
    text = _container(project_dir).read_text()
    assert '"example.com/shop/internal/modules/orders"' in text
    assert "OrdersModule: orders.NewOrdersModule(db)," in text


def test_generate_module_twice(project_dir):
    runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir)])
    before = _container(project_dir).read_text()
    result = runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert "already_present" in result.output
    assert "already wired" in result.output
    assert _container(project_dir).read_text() == before


@pytest.mark.parametrize("command", [["g", "module"], ["g", "mod"], ["generate", "m"]])
def test_hidden_aliases(project_dir, command):
    result = runner.invoke(app, [*command, "Payments", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert "c.PaymentsModule.RegisterRoutes(api)" in _container(project_dir).read_text()


def test_dry_run(project_dir):
    before = _container(project_dir).read_text()
    result = runner.invoke(app, ["generate", "module", "orders", "--dry-run", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert "c.OrdersModule.RegisterRoutes(api)" in result.output
    assert "Dry run" in result.output
    assert _container(project_dir).read_text() == before


def test_dependencies_are_checked(project_dir):
    result = runner.invoke(
        app, ["generate", "module", "orders", "--depends", "health,users", "-p", str(project_dir)]
    )
    assert result.exit_code == 0, result.output
    assert "Dependencies: health, users" in result.output
    assert "dependency 'users' is not wired" in result.output
    assert "dependency 'health'" not in result.output


@pytest.mark.parametrize("name", ["2fa", "func", "user profiles"])
def test_invalid_module_name(project_dir, name):
    before = _container(project_dir).read_text()
    result = runner.invoke(app, ["generate", "module", name, "-p", str(project_dir)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert _container(project_dir).read_text() == before


def test_outside_a_project(tmp_path):
    result = runner.invoke(app, ["generate", "module", "orders", "-p", str(tmp_path)])
    assert result.exit_code == 1
    assert "not in a Go project directory" in result.output


def test_missing_anchor_fails_in_strict_mode(project_dir):
    before = _container(project_dir).read_text()
    result = runner.invoke(
        app, ["generate", "module", "orders", "-p", str(project_dir), "-c", "wiring.method_name=Mount"]
    )
    assert result.exit_code == 1
    assert "Mount not found" in result.output
    assert _container(project_dir).read_text() == before


def test_missing_anchor_skipped_when_not_strict(project_dir):
    result = runner.invoke(
        app,
        ["generate", "module", "orders", "-p", str(project_dir), "-c", "wiring.method_name=Mount", "-c", "wiring.strict=false"],
    )
    assert result.exit_code == 0, result.output
    assert "anchor_not_found" in result.output
    assert "OrdersModule *orders.OrdersModule" in _container(project_dir).read_text()


def test_project_config_file(project_dir):
    (project_dir / "gozilla.yaml").write_text("wiring:\n  route_group: v1\n")
    result = runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert "c.OrdersModule.RegisterRoutes(v1)" in _container(project_dir).read_text()


def test_log_file(project_dir, tmp_path, restore_log_handlers):
    log_file = tmp_path / "gozilla.log"
    result = runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir), "--log-file", str(log_file)])
    assert result.exit_code == 0, result.output
    assert "container.go: imports example.com/shop/internal/modules/orders: inserted" in log_file.read_text()


def test_list_modules(project_dir):
    runner.invoke(app, ["generate", "module", "orders", "-p", str(project_dir)])
    result = runner.invoke(app, ["modules", "-p", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["HealthModule", "OrdersModule"]


def test_dependency_check_follows_the_strict_setting(project_dir):
    args = ["generate", "module", "orders", "--depends", "health", "-p", str(project_dir), "-c", "wiring.struct_name=App"]
    strict = runner.invoke(app, args)
    assert strict.exit_code == 1
    assert "type App not found" in strict.output

    relaxed = runner.invoke(app, [*args, "-c", "wiring.strict=false"])
    assert relaxed.exit_code == 0, relaxed.output
    assert "cannot check dependencies" in relaxed.output
    assert "orders.NewOrdersModule(db)" in _container(project_dir).read_text()
