from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, override

from vizcallbacks.bindings import BindingSet
from vizcallbacks.compiler import CompiledUnit, compile_cached
from vizcallbacks.env import env
from vizcallbacks.invoker import execute
from vizcallbacks.model import MISSING, Model, ModelLookup, Property
from vizcallbacks.serializer import (
	PlainJSON,
	decode,
	encode,
	is_ref_payload,
	iter_references,
)


class Callback(Model, ABC):
	"""Base class for models run in response to an event."""

	@abstractmethod
	def execute(self, cb_obj: Any, cb_data: Any = MISSING) -> Any:
		"""Run the callback for ``cb_obj`` and return its result."""
		...


class CustomCallback(Callback):
	"""A callback whose body is user-supplied Python source.

	``args`` binds extra names for the body. Models bound this way are held by
	reference and resolved through the callback's document at call time::

		cb = CustomCallback(args={"rng": rng}, code="return rng.end - cb_obj")
		cb.execute(2.0)

	Besides ``args``, the body sees ``cb_obj`` (the object that triggered the
	callback), ``cb_data`` (extra event data, ``{}`` by default), ``require``
	and ``exports``.
	"""

	code = Property[str]("")
	strict_mode = Property[bool](default_factory=lambda: env.strict_mode)

	_bindings: BindingSet

	def __init__(
		self,
		*,
		args: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
		**props: Any,
	) -> None:
		self._bindings = BindingSet()
		super().__init__(**props)
		if args is not None:
			self.args = args

	@property
	def args(self) -> dict[str, Any]:
		return dict(self._bindings.items())

	@args.setter
	def args(self, value: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
		previous = self._bindings.snapshot()
		self._bindings.set(value)
		try:
			self._property_changed("args")
		except Exception:
			self._bindings.restore(previous)
			raise

	@property
	def values(self) -> list[Any]:
		return self._bindings.resolved_values(self.lookup)

	@property
	def func(self) -> CompiledUnit:
		return compile_cached(self.code, self._bindings.names, self.strict_mode)

	@override
	def execute(self, cb_obj: Any, cb_data: Any = MISSING) -> Any:
		# Names and values come from one snapshot so each value lands on its own parameter
		snapshot = self._bindings.snapshot()
		unit = compile_cached(self.code, snapshot.names, self.strict_mode)
		return execute(unit, snapshot.resolve(self.lookup), cb_obj, cb_data)

	@override
	def to_attributes(self) -> dict[str, Any]:
		attributes = super().to_attributes()
		attributes["args"] = [
			[name, encode(value)] for name, value in self._bindings.items()
		]
		return attributes

	@override
	def apply_attributes(self, attributes: dict[str, Any], lookup: ModelLookup) -> None:
		attributes = dict(attributes)
		pairs = attributes.pop("args", [])
		super().apply_attributes(attributes, lookup)
		self._bindings.set(
			(name, _decode_binding(payload, lookup)) for name, payload in pairs
		)

	@override
	def references(self) -> Iterator[Model]:
		yield from super().references()
		for _, value in self._bindings.items():
			yield from self._resolve_references(iter_references(value))


def _decode_binding(payload: PlainJSON, lookup: ModelLookup) -> Any:
	# Top-level references stay lazy; nested ones resolve right away
	if is_ref_payload(payload):
		return decode(payload)
	return decode(payload, lookup)


__all__ = ["Callback", "CustomCallback"]
