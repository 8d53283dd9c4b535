"""Candidate backbone.
The backbone records, for one candidate evaluation, which concrete value
sits at each origin the path condition has mentioned so far. Values are
read lazily from the candidate's inputs the first time an origin is
needed, and stay bound for the rest of the evaluation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pcdistance.core.errors import TypeMismatchError, UnboundInputError
from pcdistance.core.origins import FieldStep, IndexStep, Origin


class OriginNotInCandidate(Exception):
    """The candidate's object graph does not reach an origin.
    Raised when a step goes through ``None`` or past the end of a sequence.
    Handlers turn it into a zero similarity: the clause is evaluable and
    violated by this candidate.
    """

    def __init__(self, origin: Origin, reason: str):
        self.origin = origin
        self.reason = reason
        super().__init__(f"{origin} is not in the candidate: {reason}")


_SEQUENCE_TYPES = (list, tuple, str, bytes, bytearray)


class CandidateBackbone:
    """Per-evaluation map from origins to the candidate's concrete values."""

    def __init__(self):
        self._values: dict[Origin, Any] = {}
        self._fresh_origins: dict[int, Origin] = {}
        self._visited: dict[int, tuple[Any, Origin]] = {}

    @classmethod
    def new(cls) -> CandidateBackbone:
        return cls()

    def retrieve_or_visit(self, origin: Origin | str, candidate: Mapping[str, Any]) -> Any:
        """Value of the candidate at ``origin``, binding it on first access.
        Args:
            origin: Origin to resolve.
            candidate: Root inputs, keyed by ``{ROOT}:name`` or ``name``.
        Raises:
            OriginNotInCandidate: A step of the origin cannot be followed.
            UnboundInputError: The candidate has no value for the root input.
            TypeMismatchError: A field is missing on a non-null object.
        """
        origin = Origin.of(origin)
        if origin in self._values:
            return self._values[origin]
        parent = origin.parent
        if parent is None:
            value = self._root_value(origin, candidate)
        else:
            owner = self.retrieve_or_visit(parent, candidate)
            value = self._read_step(origin, owner, candidate)
        self._values[origin] = value
        return value

    def _root_value(self, origin: Origin, candidate: Mapping[str, Any]) -> Any:
        key = str(origin)
        if key in candidate:
            return candidate[key]
        if origin.root in candidate:
            return candidate[origin.root]
        raise UnboundInputError(origin)

    def _read_step(self, origin: Origin, owner: Any, candidate: Mapping[str, Any]) -> Any:
        step = origin.last_step
        if owner is None:
            raise OriginNotInCandidate(origin, "null dereference")
        if isinstance(step, IndexStep):
            index = step.index
            if isinstance(index, Origin):
                index = self.retrieve_or_visit(index, candidate)
            if not isinstance(owner, _SEQUENCE_TYPES) and not isinstance(owner, Sequence):
                raise TypeMismatchError(origin, "sequence", owner)
            if isinstance(index, bool) or not isinstance(index, int):
                raise TypeMismatchError(origin, "integral index", index)
            if not 0 <= index < len(owner):
                raise OriginNotInCandidate(origin, f"index {index} out of range")
            return owner[index]
        assert isinstance(step, FieldStep)
        name = step.name
        if isinstance(owner, Mapping):
            if name in owner:
                return owner[name]
            raise TypeMismatchError(origin, f"mapping with key {name!r}", owner)
        if name == "length" and isinstance(owner, (_SEQUENCE_TYPES, Sequence)):
            return len(owner)
        try:
            return getattr(owner, name)
        except AttributeError:
            raise TypeMismatchError(origin, f"object with field {name!r}", owner) from None

    def is_bound(self, origin: Origin | str) -> bool:
        return Origin.of(origin) in self._values

    def bind(self, origin: Origin | str, value: Any) -> None:
        """Bind ``origin`` explicitly; rebinding a different value is refused."""
        origin = Origin.of(origin)
        if origin in self._values and self._values[origin] is not value:
            raise ValueError(f"{origin} is already bound")
        self._values[origin] = value

    def register_fresh(self, heap_id: int, origin: Origin | str) -> None:
        """Record that the object at ``heap_id`` was introduced under ``origin``."""
        self._fresh_origins.setdefault(heap_id, Origin.of(origin))

    def origin_of(self, heap_id: int) -> Origin | None:
        return self._fresh_origins.get(heap_id)

    def mark_visited(self, obj: Any, origin: Origin) -> None:
        """Remember that ``obj`` was matched as a fresh object at ``origin``."""
        self._visited.setdefault(id(obj), (obj, origin))

    def visited_origin(self, obj: Any) -> Origin | None:
        entry = self._visited.get(id(obj))
        if entry is None or entry[0] is not obj:
            return None
        return entry[1]

    def bindings(self) -> dict[str, Any]:
        """Snapshot of the bound origins, keyed by their canonical text."""
        return {str(origin): value for origin, value in self._values.items()}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, origin: Origin | str) -> bool:
        return self.is_bound(origin)

    def __repr__(self) -> str:
        return (
            f"CandidateBackbone(bound={len(self._values)}, "
            f"fresh={len(self._fresh_origins)})"
        )


__all__ = ["CandidateBackbone", "OriginNotInCandidate"]
