"""Keeps `container.go` in sync with the modules of a project.

`ContainerUpdater.add_module` is the entry point: under an exclusive lock on
the target file it loads and parses the file, locates the four anchors,
computes what is missing and writes the result back atomically. Running it
twice for the same module leaves the file untouched the second time.
"""

import difflib
import hashlib
import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from filelock import FileLock, Timeout

from gozilla.config import WiringConfig
from gozilla.exceptions import LockTimeoutError
from gozilla.wiring.anchors import field_names, import_qualifier, locate_struct
from gozilla.wiring.mutations import (
    AnchorResult,
    Outcome,
    ensure_import,
    ensure_keyed_element,
    ensure_registration,
    ensure_struct_field,
)
from gozilla.wiring.names import ModuleNames
from gozilla.wiring.render import render_document, write_atomic
from gozilla.wiring.source import SourceDocument, load_document

logger = logging.getLogger("gozilla.wiring.container")


def lock_path_for(path: Path | str) -> Path:
    """Lock file shared by every process that edits `path`."""
    digest = hashlib.sha256(str(Path(path).resolve()).encode("utf-8")).hexdigest()[:16]
    return Path(tempfile.gettempdir()) / f"gozilla-{digest}.lock"


@contextmanager
def locked(path: Path | str, timeout: float = -1) -> Iterator[None]:
    lock = FileLock(lock_path_for(path))
    try:
        lock.acquire(timeout=timeout)
    except Timeout as e:
        raise LockTimeoutError(f"Timed out after {timeout}s waiting for the lock on {path}") from e
    try:
        yield
    finally:
        lock.release()


@dataclass
class AugmentationReport:
    path: Path
    module: str
    results: list[AnchorResult]
    original: bytes
    updated: bytes
    written: bool = False
    skipped: list[AnchorResult] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.updated != self.original

    def inserted(self) -> list[AnchorResult]:
        return [r for r in self.results if r.outcome == Outcome.INSERTED]

    def diff(self) -> str:
        return "".join(
            difflib.unified_diff(
                self.original.decode("utf-8").splitlines(keepends=True),
                self.updated.decode("utf-8").splitlines(keepends=True),
                fromfile=f"a/{self.path.name}",
                tofile=f"b/{self.path.name}",
            )
        )


class ContainerUpdater:
    def __init__(self, config: WiringConfig | None = None):
        self.config = config or WiringConfig()

    def plan(self, doc: SourceDocument, names: ModuleNames) -> list[AnchorResult]:
        """Locate every anchor on the same tree and compute the missing entries."""
        cfg = self.config
        # An existing aliased or dot import decides how the package is referenced.
        package = import_qualifier(doc, names.import_path, names.module)
        return [
            ensure_import(doc, names.import_path),
            ensure_struct_field(doc, cfg.struct_name, names.field, names.field_type(package)),
            ensure_keyed_element(
                doc, cfg.constructor_name, names.field, names.constructor_call(cfg.db_handle, package)
            ),
            ensure_registration(
                doc,
                cfg.method_name,
                names.field,
                cfg.module_method,
                lambda receiver: names.registration_call(receiver, cfg.module_method, cfg.route_group),
                receiver_type=cfg.struct_name,
                default_receiver=cfg.receiver_name,
            ),
        ]

    def _enforce_policy(self, results: list[AnchorResult]) -> list[AnchorResult]:
        """Raise on the first unusable anchor in strict mode, otherwise return the skipped ones."""
        skipped = [r for r in results if not r.ok]
        for result in skipped:
            if self.config.strict:
                raise result.error
            logger.warning(f"Skipping {result.anchor.value} anchor for {result.key}: {result.error}")
        return skipped

    def add_module(
        self,
        container_path: Path | str,
        module: str,
        *,
        module_path: str,
        modules_dir: str = "internal/modules",
        dry_run: bool = False,
    ) -> AugmentationReport:
        path = Path(container_path)
        names = ModuleNames.derive(module, module_path, modules_dir)
        with locked(path, self.config.lock_timeout):
            doc = load_document(path)
            results = self.plan(doc, names)
            skipped = self._enforce_policy(results)
            edits = [edit for result in results for edit in result.edits]
            updated = render_document(doc, edits)
            report = AugmentationReport(
                path=path, module=names.module, results=results, original=doc.source, updated=updated, skipped=skipped
            )
            for result in results:
                logger.info(f"{path.name}: {result.anchor.value} {result.key}: {result.outcome.value}")
            if report.changed and not dry_run:
                write_atomic(path, updated)
                report.written = True
        return report

    def registered_modules(self, container_path: Path | str) -> list[str]:
        """Field names of the container struct, in declaration order."""
        doc = load_document(container_path)
        anchor = locate_struct(doc, self.config.struct_name)
        return [name for f in anchor.fields for name in field_names(doc, f)]
