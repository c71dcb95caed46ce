"""Small structured builder for the Go expressions gozilla inserts.

Expressions are assembled from typed parts and rendered to text, so a type
such as `*orders.OrdersModule` is always `Pointer(Qualified("orders", "OrdersModule"))`
and never the result of slicing a formatted string.
"""

import re
from dataclasses import dataclass
from typing import Union

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(value: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Not a Go identifier: {value!r}")
    return value


@dataclass(frozen=True)
class Ident:
    name: str

    def __post_init__(self):
        _check_identifier(self.name)

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Qualified:
    """`package.Name`, a name exported by another package."""

    package: str
    name: str

    def __post_init__(self):
        _check_identifier(self.package)
        _check_identifier(self.name)

    def render(self) -> str:
        return f"{self.package}.{self.name}"


@dataclass(frozen=True)
class Pointer:
    elem: "Expr"

    def render(self) -> str:
        return f"*{self.elem.render()}"


@dataclass(frozen=True)
class Selector:
    """`operand.field`, e.g. `c.OrdersModule`."""

    operand: "Expr"
    field: str

    def __post_init__(self):
        _check_identifier(self.field)

    def render(self) -> str:
        return f"{self.operand.render()}.{self.field}"


@dataclass(frozen=True)
class Call:
    func: "Expr"
    args: tuple["Expr", ...] = ()

    def render(self) -> str:
        return f"{self.func.render()}({', '.join(arg.render() for arg in self.args)})"


Expr = Union[Ident, Qualified, Pointer, Selector, Call]
