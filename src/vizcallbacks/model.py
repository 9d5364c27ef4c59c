# pyright: reportImportCycles=false
from __future__ import annotations

import uuid
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, overload

from vizcallbacks.errors import UnresolvedReferenceError

if TYPE_CHECKING:
	from vizcallbacks.document import Document

T = TypeVar("T")

MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class EntityReference:
	"""Non-owning pointer to a model, resolved by id through a lookup."""

	id: str

	def resolve(self, lookup: ModelLookup) -> Model | None:
		return lookup.get_model_by_id(self.id)


class ModelLookup(Protocol):
	def get_model_by_id(self, model_id: str) -> Model | None: ...


class ModelRegistry:
	"""Process-wide weak index of live models.

	Used to resolve references of models that are not attached to a document.
	When two live models share an id (e.g. after a document round trip), the
	most recently created one wins.
	"""

	__slots__: tuple[str, ...] = ("_models",)
	_models: weakref.WeakValueDictionary[str, Model]

	def __init__(self) -> None:
		self._models = weakref.WeakValueDictionary()

	def register(self, model: Model) -> None:
		self._models[model.id] = model

	def get_model_by_id(self, model_id: str) -> Model | None:
		return self._models.get(model_id)

	def __len__(self) -> int:
		return len(self._models)


MODEL_REGISTRY = ModelRegistry()

# Concrete model classes by name, used to instantiate models on deserialization
MODEL_TYPES: dict[str, type[Model]] = {}


class Property(Generic[T]):
	"""Serializable attribute of a model.

	Assigning a property notifies the owning model so that a document it belongs
	to can pick up newly referenced models. If the document refuses them the
	previous value is put back.
	"""

	name: str
	default: T | None
	default_factory: Callable[[], T] | None

	def __init__(
		self,
		default: T | None = None,
		*,
		default_factory: Callable[[], T] | None = None,
	) -> None:
		self.default = default
		self.default_factory = default_factory

	def __set_name__(self, owner: type[Model], name: str) -> None:
		self.name = name

	def make_default(self) -> T | None:
		if self.default_factory is not None:
			return self.default_factory()
		return self.default

	@overload
	def __get__(self, instance: None, owner: type[Model]) -> Property[T]: ...
	@overload
	def __get__(self, instance: Model, owner: type[Model]) -> T: ...
	def __get__(self, instance: Model | None, owner: type[Model]) -> Any:
		if instance is None:
			return self
		return instance._property_values[self.name]  # pyright: ignore[reportPrivateUsage]

	def __set__(self, instance: Model, value: T) -> None:
		values = instance._property_values  # pyright: ignore[reportPrivateUsage]
		previous = values[self.name]
		values[self.name] = value
		try:
			instance._property_changed(self.name)  # pyright: ignore[reportPrivateUsage]
		except Exception:
			values[self.name] = previous
			raise


class Model:
	"""Base class for objects that live in a document and can be referenced by id."""

	id: str
	_document: Document | None
	_property_values: dict[str, Any]

	def __init_subclass__(cls, **kwargs: Any) -> None:
		super().__init_subclass__(**kwargs)
		MODEL_TYPES[cls.__name__] = cls

	def __init__(self, *, id: str | None = None, **props: Any) -> None:
		self.id = id or uuid.uuid4().hex
		self._document = None
		properties = self.properties()
		self._property_values = {
			name: prop.make_default() for name, prop in properties.items()
		}
		for name, value in props.items():
			if name not in properties:
				raise TypeError(f"{type(self).__name__} has no property {name!r}")
			setattr(self, name, value)
		MODEL_REGISTRY.register(self)

	@classmethod
	def properties(cls) -> dict[str, Property[Any]]:
		found: dict[str, Property[Any]] = {}
		for klass in reversed(cls.__mro__):
			for name, value in vars(klass).items():
				if isinstance(value, Property):
					found[name] = value
		return found

	@property
	def document(self) -> Document | None:
		return self._document

	@property
	def lookup(self) -> ModelLookup:
		"""Where this model's entity references resolve: its document, if any."""
		if self._document is not None:
			return self._document
		return MODEL_REGISTRY

	def ref(self) -> EntityReference:
		return EntityReference(self.id)

	def property_values(self) -> dict[str, Any]:
		return dict(self._property_values)

	def to_attributes(self) -> dict[str, Any]:
		"""Encode the model's properties into JSON-compatible values."""
		# Local import to avoid import cycles with vizcallbacks.serializer -> vizcallbacks.model
		from vizcallbacks.serializer import encode

		return {name: encode(value) for name, value in self._property_values.items()}

	def apply_attributes(self, attributes: dict[str, Any], lookup: ModelLookup) -> None:
		"""Decode serialized attributes and assign them to this model."""
		from vizcallbacks.serializer import decode

		properties = self.properties()
		for name, payload in attributes.items():
			if name not in properties:
				raise ValueError(
					f"Unknown attribute {name!r} for model type {type(self).__name__}"
				)
			self._property_values[name] = decode(payload, lookup)

	def references(self) -> Iterator[Model]:
		"""Models directly referenced by this model's attributes.

		Raises ``UnresolvedReferenceError`` for a reference no live model answers.
		"""
		from vizcallbacks.serializer import iter_references

		for value in self._property_values.values():
			yield from self._resolve_references(iter_references(value))

	def _resolve_references(
		self, found: Iterator[Model | EntityReference]
	) -> Iterator[Model]:
		lookup = self.lookup
		for item in found:
			if isinstance(item, Model):
				yield item
				continue
			model = item.resolve(lookup)
			if model is None and lookup is not MODEL_REGISTRY:
				# Newly bound models are found here before their document knows them
				model = item.resolve(MODEL_REGISTRY)
			if model is None:
				raise UnresolvedReferenceError(item.id)
			yield model

	def _property_changed(self, name: str) -> None:
		if self._document is not None:
			self._document._update(self)  # pyright: ignore[reportPrivateUsage]

	def __repr__(self) -> str:
		return f"{type(self).__name__}(id={self.id!r})"


__all__ = [
	"EntityReference",
	"MISSING",
	"MODEL_REGISTRY",
	"MODEL_TYPES",
	"Model",
	"ModelLookup",
	"ModelRegistry",
	"Property",
]
