import re
from dataclasses import dataclass

from gozilla.exceptions import NameValidationError
from gozilla.wiring.exprs import Call, Ident, Pointer, Qualified, Selector

_MODULE_NAME = re.compile(r"^[a-z][a-z0-9_]*$")
# Every `_` starts a new word with a letter, so title_case stays one-to-one.
_MODULE_WORDS = re.compile(r"^[a-z][a-z0-9]*(_[a-z][a-z0-9]*)*$")

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type", "var",
    }
)


def validate_module_name(raw: str) -> str:
    """Normalise a user supplied module name, or raise NameValidationError."""
    name = (raw or "").strip().lower()
    if not name:
        raise NameValidationError("module name cannot be empty")
    if any(ch.isspace() for ch in name):
        raise NameValidationError("module name cannot contain spaces")
    if not _MODULE_NAME.match(name):
        raise NameValidationError(
            f"module name {name!r} must start with a letter and contain only lower-case letters, digits and '_'"
        )
    if not _MODULE_WORDS.match(name):
        raise NameValidationError(
            f"module name {name!r} must separate words with a single '_', each word starting with a letter"
        )
    if name in GO_KEYWORDS:
        raise NameValidationError(f"module name {name!r} is a Go keyword")
    return name


def title_case(module: str) -> str:
    """`orders` -> `Orders`, `user_profiles` -> `UserProfiles`."""
    return "".join(part[:1].upper() + part[1:] for part in module.split("_") if part)


@dataclass(frozen=True)
class ModuleNames:
    """Every identifier derived from one module name."""

    module: str
    title: str
    import_path: str

    @classmethod
    def derive(cls, module: str, module_path: str, modules_dir: str = "internal/modules") -> "ModuleNames":
        module = validate_module_name(module)
        prefix = "/".join(part for part in (module_path.strip("/"), modules_dir.strip("/")) if part)
        return cls(module=module, title=title_case(module), import_path=f"{prefix}/{module}")

    @property
    def type_name(self) -> str:
        return f"{self.title}Module"

    @property
    def field(self) -> str:
        return self.type_name

    @property
    def constructor(self) -> str:
        return f"New{self.type_name}"

    def _exported(self, name: str, package: str | None) -> Qualified | Ident:
        """`package.name`; `package=None` means the module name, `""` a dot import."""
        package = self.module if package is None else package
        return Qualified(package, name) if package else Ident(name)

    def field_type(self, package: str | None = None) -> Pointer:
        return Pointer(self._exported(self.type_name, package))

    def constructor_call(self, db_handle: str, package: str | None = None) -> Call:
        return Call(self._exported(self.constructor, package), (Ident(db_handle),))

    def registration_call(self, receiver: str, method: str, route_group: str) -> Call:
        return Call(Selector(Selector(Ident(receiver), self.field), method), (Ident(route_group),))
