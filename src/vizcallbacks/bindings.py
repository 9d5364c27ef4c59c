from __future__ import annotations

import keyword
import unicodedata
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from vizcallbacks.errors import InvalidBindingError, UnresolvedReferenceError
from vizcallbacks.model import EntityReference, Model, ModelLookup

PRIMARY_PARAM = "cb_obj"
AUX_PARAM = "cb_data"
REQUIRE_PARAM = "require"
EXPORTS_PARAM = "exports"

RESERVED_PARAMS: tuple[str, ...] = (
	PRIMARY_PARAM,
	AUX_PARAM,
	REQUIRE_PARAM,
	EXPORTS_PARAM,
)

# Global name of the strict mode guard inside compiled callbacks
STRICT_GUARD = "__strict__"


@dataclass(frozen=True, slots=True)
class Literal:
	value: Any


BoundValue: TypeAlias = Literal | EntityReference


def normalize_name(name: str) -> str:
	"""The identifier Python sees for ``name`` once it is parsed (NFKC)."""
	return unicodedata.normalize("NFKC", name)


def validate_name(name: object) -> str:
	if not isinstance(name, str):
		raise InvalidBindingError(f"Argument names must be strings, got {name!r}")
	if not name.isidentifier():
		raise InvalidBindingError(f"{name!r} is not a valid argument name")
	normalized = normalize_name(name)
	if keyword.iskeyword(normalized):
		raise InvalidBindingError(f"{name!r} is a reserved keyword")
	if normalized in RESERVED_PARAMS or normalized == STRICT_GUARD:
		raise InvalidBindingError(f"{name!r} is reserved for the callback runtime")
	return name


def validate_names(names: Iterable[object]) -> tuple[str, ...]:
	seen: set[str] = set()
	validated: list[str] = []
	for name in names:
		name = validate_name(name)
		normalized = normalize_name(name)
		if normalized in seen:
			raise InvalidBindingError(f"Duplicate argument name {name!r}")
		seen.add(normalized)
		validated.append(name)
	return tuple(validated)


def to_bound_value(value: Any) -> BoundValue:
	if isinstance(value, Model):
		return value.ref()
	if isinstance(value, EntityReference):
		return value
	return Literal(value)


@dataclass(frozen=True, slots=True)
class BindingSnapshot:
	"""Immutable state of a BindingSet at one point in time."""

	names: tuple[str, ...]
	bound: tuple[BoundValue, ...]

	def resolve(self, lookup: ModelLookup) -> list[Any]:
		values: list[Any] = []
		for name, bound in zip(self.names, self.bound, strict=True):
			if isinstance(bound, Literal):
				values.append(bound.value)
				continue
			model = bound.resolve(lookup)
			if model is None:
				raise UnresolvedReferenceError(bound.id, name)
			values.append(model)
		return values


EMPTY_SNAPSHOT = BindingSnapshot(names=(), bound=())


class BindingSet:
	"""Named arguments of a callback, kept in the order they were last set.

	Model values are stored as entity references and resolved on demand, so the
	set never keeps the models themselves alive.
	"""

	__slots__: tuple[str, ...] = ("_snapshot",)
	_snapshot: BindingSnapshot

	def __init__(
		self, mapping: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None
	) -> None:
		self._snapshot = EMPTY_SNAPSHOT
		if mapping is not None:
			self.set(mapping)

	def set(self, mapping: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
		pairs = list(mapping.items() if isinstance(mapping, Mapping) else mapping)
		names = validate_names(name for name, _ in pairs)
		bound = tuple(to_bound_value(value) for _, value in pairs)
		# Swap in one piece so readers never observe a half-applied update
		self._snapshot = BindingSnapshot(names=names, bound=bound)

	def restore(self, snapshot: BindingSnapshot) -> None:
		"""Put back a snapshot taken earlier with ``snapshot()``."""
		self._snapshot = snapshot

	def snapshot(self) -> BindingSnapshot:
		return self._snapshot

	@property
	def names(self) -> tuple[str, ...]:
		return self._snapshot.names

	def resolved_values(self, lookup: ModelLookup) -> list[Any]:
		return self._snapshot.resolve(lookup)

	def references(self) -> Iterator[EntityReference]:
		for bound in self._snapshot.bound:
			if isinstance(bound, EntityReference):
				yield bound

	def items(self) -> list[tuple[str, Any]]:
		"""Name/value pairs, literals unwrapped and references left as is."""
		snapshot = self._snapshot
		return [
			(name, bound.value if isinstance(bound, Literal) else bound)
			for name, bound in zip(snapshot.names, snapshot.bound, strict=True)
		]

	def __len__(self) -> int:
		return len(self._snapshot.names)

	def __contains__(self, name: object) -> bool:
		return name in self._snapshot.names


__all__ = [
	"AUX_PARAM",
	"BindingSet",
	"BindingSnapshot",
	"BoundValue",
	"EXPORTS_PARAM",
	"Literal",
	"PRIMARY_PARAM",
	"REQUIRE_PARAM",
	"RESERVED_PARAMS",
	"STRICT_GUARD",
	"normalize_name",
	"to_bound_value",
	"validate_name",
	"validate_names",
]
