"""Origins: structural paths from a unit's inputs to a value.
The canonical text form is the one used by the symbolic engine::

    {ROOT}:list.header.next.value
    {ROOT}:values[3]
    {ROOT}:values[{ROOT}:i]
    {ROOT}:values.length

Origins are opaque keys for the rest of the package; only the backbone
walks their steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Union

from pcdistance.core.errors import OriginSyntaxError

ROOT_PREFIX = "{ROOT}:"
VARIABLE_PREFIX = "__ROOT_"


@dataclass(frozen=True)
class FieldStep:
    """Attribute (or mapping key) access; ``.length`` on sequences is their length."""

    name: str

    def __str__(self) -> str:
        return f".{self.name}"


@dataclass(frozen=True)
class IndexStep:
    """Element access with a literal index or the value held at another origin."""

    index: int | Origin

    def __str__(self) -> str:
        return f"[{self.index}]"


Step = Union[FieldStep, IndexStep]


@dataclass(frozen=True)
class Origin:
    """A root input name followed by a chain of steps."""

    root: str
    steps: tuple[Step, ...] = ()

    @staticmethod
    def parse(text: str) -> Origin:
        """Parse the canonical text form."""
        return _parse_cached(text)

    @staticmethod
    def of(value: str | Origin) -> Origin:
        """Accept either an origin or its text."""
        if isinstance(value, Origin):
            return value
        return Origin.parse(value)

    @staticmethod
    def root_of(name: str) -> Origin:
        return Origin(root=name)

    @property
    def is_root(self) -> bool:
        return not self.steps

    @property
    def parent(self) -> Origin | None:
        if not self.steps:
            return None
        return Origin(self.root, self.steps[:-1])

    @property
    def last_step(self) -> Step | None:
        return self.steps[-1] if self.steps else None

    def field(self, name: str) -> Origin:
        return Origin(self.root, self.steps + (FieldStep(name),))

    def index(self, index: int | Origin) -> Origin:
        return Origin(self.root, self.steps + (IndexStep(index),))

    def __str__(self) -> str:
        return ROOT_PREFIX + self.root + "".join(str(step) for step in self.steps)


def _is_name_char(ch: str, first: bool) -> bool:
    if ch.isalpha() or ch in "_$":
        return True
    return not first and ch.isdigit()


class _OriginParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, reason: str) -> OriginSyntaxError:
        return OriginSyntaxError(self.text, self.pos, reason)

    def parse(self) -> Origin:
        origin = self.origin()
        if self.pos != len(self.text):
            raise self.error("unexpected trailing text")
        return origin

    def origin(self) -> Origin:
        if not self.text.startswith(ROOT_PREFIX, self.pos):
            raise self.error(f"expected {ROOT_PREFIX}")
        self.pos += len(ROOT_PREFIX)
        root = self.name()
        steps: list[Step] = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == ".":
                self.pos += 1
                steps.append(FieldStep(self.name()))
            elif ch == "[":
                self.pos += 1
                steps.append(IndexStep(self.index()))
                if not self.text.startswith("]", self.pos):
                    raise self.error("expected ]")
                self.pos += 1
            else:
                break
        return Origin(root, tuple(steps))

    def name(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and _is_name_char(
            self.text[self.pos], self.pos == start
        ):
            self.pos += 1
        if self.pos == start:
            raise self.error("expected a name")
        return self.text[start : self.pos]

    def index(self) -> int | Origin:
        if self.text.startswith(ROOT_PREFIX, self.pos):
            return self.origin()
        start = self.pos
        if self.pos < len(self.text) and self.text[self.pos] == "-":
            self.pos += 1
        while self.pos < len(self.text) and self.text[self.pos].isdigit():
            self.pos += 1
        digits = self.text[start : self.pos]
        if digits in ("", "-"):
            raise self.error("expected an index")
        return int(digits)


@lru_cache(maxsize=4096)
def _parse_cached(text: str) -> Origin:
    return _OriginParser(text).parse()


def variable_name(origin: str | Origin) -> str:
    """Identifier-safe name for an origin (``{ROOT}:x`` -> ``__ROOT_x``)."""
    return str(origin).replace(ROOT_PREFIX, VARIABLE_PREFIX)


def origin_from_variable(name: str) -> str:
    """Inverse of :func:`variable_name`."""
    return name.replace(VARIABLE_PREFIX, ROOT_PREFIX)


__all__ = [
    "ROOT_PREFIX",
    "FieldStep",
    "IndexStep",
    "Step",
    "Origin",
    "variable_name",
    "origin_from_variable",
]
