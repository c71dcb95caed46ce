"""Serializer: splice edits into the original bytes, re-validate, write atomically."""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from gozilla.exceptions import ParseError, RenderError
from gozilla.wiring.source import SourceDocument, parse_source

logger = logging.getLogger("gozilla.wiring.render")


@dataclass(frozen=True)
class Edit:
    """Replace `source[start:end]` with `text`. Insertions have `start == end`."""

    start: int
    end: int
    text: str


def apply_edits(source: bytes, edits: list[Edit]) -> bytes:
    """Apply edits computed against `source`.

    Edits are applied from the end of the file backwards so earlier offsets stay
    valid. Edits sharing a start offset keep their list order in the output.
    """
    ordered = sorted(enumerate(edits), key=lambda item: (item[1].start, item[0]), reverse=True)
    out = source
    for _, edit in ordered:
        if not 0 <= edit.start <= edit.end <= len(source):
            raise ValueError(f"Edit {edit} is outside of the source ({len(source)} bytes)")
        out = out[: edit.start] + edit.text.encode("utf-8") + out[edit.end :]
    return out


def render_document(doc: SourceDocument, edits: list[Edit]) -> bytes:
    """Return the edited source, guaranteed to parse. No edits means the original bytes."""
    if not edits:
        return doc.source
    rendered = apply_edits(doc.source, edits)
    try:
        parse_source(rendered, doc.path)
    except ParseError as e:
        raise RenderError(f"Edited source no longer parses, nothing written: {e}") from e
    return rendered


def write_atomic(path: Path | str, data: bytes) -> None:
    """Replace `path` with `data` so readers only ever see the old or the new file."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d bytes to %s", len(data), path)
