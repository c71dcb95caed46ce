"""gozilla keeps the dependency container of a generated Go service wired.

The heavy lifting lives in `gozilla.wiring`: it parses `container.go` with
tree-sitter, finds the four places a feature module has to be registered
and appends whatever is missing.
"""

from pathlib import Path

__version__ = "0.1.0"

package_dir = Path(__file__).resolve().parent

from gozilla.utils.log import logger  # noqa: E402

__all__ = ["__version__", "logger", "package_dir"]
