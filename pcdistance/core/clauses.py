"""Path-condition clauses and the engine's final-state view.
A path condition is the ordered list of assumptions the symbolic engine
made while exploring one path. Order matters: an alias clause refers to
the object introduced by an earlier fresh-object clause.
"""
from __future__ import annotations
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union, overload
from pcdistance.core.errors import StructuralInconsistencyError
from pcdistance.core.expressions import Expression, Symbol
from pcdistance.core.origins import Origin
@dataclass(frozen=True)
class NumericAssumption:
    """A boolean-valued expression over primitive symbols."""
    condition: Expression
    def __str__(self) -> str:
        return str(self.condition)
@dataclass(frozen=True)
class NullAssumption:
    """The reference ``symbol`` is null."""
    symbol: Symbol
    def __str__(self) -> str:
        return f"{self.symbol} == null"
@dataclass(frozen=True)
class FreshObjectAssumption:
    """The reference ``symbol`` points to a new object at ``heap_id``.
    ``type_name`` may be left out when the final state's heap knows the type.
    """
    symbol: Symbol
    heap_id: int
    type_name: str | type | None = None
    def __str__(self) -> str:
        return f"{self.symbol} fresh Object[{self.heap_id}]"
@dataclass(frozen=True)
class AliasAssumption:
    """The reference ``symbol`` points to the object introduced at ``heap_id``."""
    symbol: Symbol
    heap_id: int
    def __str__(self) -> str:
        return f"{self.symbol} aliases Object[{self.heap_id}]"
Clause = Union[NumericAssumption, NullAssumption, FreshObjectAssumption, AliasAssumption]
class PathCondition:
    """Ordered, immutable sequence of clauses."""
    def __init__(self, clauses: Iterable[Clause] = ()):
        self._clauses: tuple[Clause, ...] = tuple(clauses)
    @overload
    def __getitem__(self, index: int) -> Clause: ...
    @overload
    def __getitem__(self, index: slice) -> PathCondition: ...
    def __getitem__(self, index):
        if isinstance(index, slice):
            return PathCondition(self._clauses[index])
        return self._clauses[index]
    def __iter__(self) -> Iterator[Clause]:
        return iter(self._clauses)
    def __len__(self) -> int:
        return len(self._clauses)
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathCondition):
            return NotImplemented
        return self._clauses == other._clauses
    def __hash__(self) -> int:
        return hash(self._clauses)
    def append(self, clause: Clause) -> PathCondition:
        """Return a new path condition extended with ``clause``."""
        return PathCondition(self._clauses + (clause,))
    def fresh_origin_of(self, heap_id: int, before: int | None = None) -> Origin | None:
        """Origin of the earliest fresh-object clause for ``heap_id``.
        Args:
            heap_id: Heap identity to look up.
            before: Only consider clauses with a smaller position.
        Returns:
            The origin, or None if no such clause precedes ``before``.
        """
        end = len(self._clauses) if before is None else before
        for clause in self._clauses[:end]:
            if isinstance(clause, FreshObjectAssumption) and clause.heap_id == heap_id:
                return clause.symbol.origin
        return None
    def __repr__(self) -> str:
        return f"PathCondition({len(self._clauses)} clauses)"
    def __str__(self) -> str:
        return " && ".join(str(c) for c in self._clauses) or "true"
@dataclass(frozen=True)
class HeapObject:
    """An object of the engine's final heap."""
    heap_id: int
    type_name: str
@dataclass
class SymbolicState:
    """Final state of one explored path, as handed over by the engine.
    Attributes:
        path_condition: Clauses collected along the path.
        heap: Final heap, by heap identity.
        inputs: Input symbols of the unit in declaration order.
        identifier: Engine-side state identifier, used in log messages.
    """
    path_condition: PathCondition
    heap: Mapping[int, HeapObject] = field(default_factory=dict)
    inputs: list[Symbol] = field(default_factory=list)
    identifier: str = ""
    def __post_init__(self) -> None:
        if not isinstance(self.path_condition, PathCondition):
            self.path_condition = PathCondition(self.path_condition)
    def type_of_object(self, heap_id: int) -> str:
        """Runtime type of the heap object ``heap_id``."""
        obj = self.heap.get(heap_id)
        if obj is None:
            raise StructuralInconsistencyError(
                f"Object[{heap_id}] is not in the final heap", heap_id=heap_id
            )
        return obj.type_name
    def origin_of_object(self, heap_id: int) -> Origin | None:
        """Origin under which the path condition introduced ``heap_id``."""
        return self.path_condition.fresh_origin_of(heap_id)
__all__ = [
    "NumericAssumption",
    "NullAssumption",
    "FreshObjectAssumption",
    "AliasAssumption",
    "Clause",
    "PathCondition",
    "HeapObject",
    "SymbolicState",
]
