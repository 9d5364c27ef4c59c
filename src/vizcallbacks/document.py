from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from vizcallbacks.errors import UnresolvedReferenceError
from vizcallbacks.model import MODEL_TYPES, Model
from vizcallbacks.version import __version__

logger = logging.getLogger(__name__)


class Document:
	"""A collection of root models and every model reachable from them.

	The document is also the lookup through which attached models resolve
	their entity references.
	"""

	__slots__: tuple[str, ...] = ("_roots", "_models")
	_roots: list[Model]
	_models: dict[str, Model]

	def __init__(self) -> None:
		self._roots = []
		self._models = {}

	@property
	def roots(self) -> list[Model]:
		return list(self._roots)

	@property
	def models(self) -> list[Model]:
		return list(self._models.values())

	def get_model_by_id(self, model_id: str) -> Model | None:
		return self._models.get(model_id)

	def add_root(self, model: Model) -> None:
		if any(root is model for root in self._roots):
			return
		self._attach(model)
		self._roots.append(model)

	def remove_root(self, model: Model) -> None:
		for index, root in enumerate(self._roots):
			if root is model:
				del self._roots[index]
				break
		else:
			raise ValueError(f"{model!r} is not a root of this document")
		self._prune()

	def _check(self, model: Model, pending: Mapping[str, Model]) -> None:
		current = model._document  # pyright: ignore[reportPrivateUsage]
		if current is not None and current is not self:
			raise RuntimeError(f"{model!r} already belongs to another document")
		existing = self._models.get(model.id, pending.get(model.id))
		if existing is not None and existing is not model:
			raise RuntimeError(
				f"Document already contains a different model with id {model.id!r}"
			)

	def _register(self, model: Model) -> None:
		self._check(model, {})
		self._models[model.id] = model
		model._document = self  # pyright: ignore[reportPrivateUsage]

	def _attach(self, model: Model) -> None:
		"""Register ``model`` and everything it references, transitively.

		Every model is checked before the first one is registered, so on error
		neither the document nor the models have changed.
		"""
		pending: dict[str, Model] = {}
		for found in _walk([model]):
			self._check(found, pending)
			if found.id not in self._models:
				pending[found.id] = found
		for found in pending.values():
			self._register(found)
		if pending:
			logger.debug("Attached %d model(s) to document via %r", len(pending), model)

	def _update(self, model: Model) -> None:
		"""Follow a property change of an attached model."""
		self._attach(model)
		self._prune()

	def _prune(self) -> None:
		"""Detach models no root reaches anymore."""
		reachable = {id(m) for m in _walk(self._roots)}
		detached = 0
		for model_id, candidate in list(self._models.items()):
			if id(candidate) not in reachable:
				del self._models[model_id]
				candidate._document = None  # pyright: ignore[reportPrivateUsage]
				detached += 1
		if detached:
			logger.debug("Detached %d unreachable model(s) from document", detached)

	def to_json(self) -> dict[str, Any]:
		return {
			"version": __version__,
			"roots": [root.id for root in self._roots],
			"models": [
				{
					"type": type(model).__name__,
					"id": model.id,
					"attributes": model.to_attributes(),
				}
				for model in self._models.values()
			],
		}

	def to_json_string(self, indent: int | None = None) -> str:
		return json.dumps(self.to_json(), indent=indent, allow_nan=False)

	@classmethod
	def from_json(cls, data: Mapping[str, Any]) -> Document:
		version = data.get("version")
		if version != __version__:
			logger.warning(
				"Document was written by vizcallbacks %s, loading with %s",
				version,
				__version__,
			)

		doc = cls()
		pending: list[tuple[Model, dict[str, Any]]] = []
		# Create every model before decoding attributes so references can point
		# forward in the model list.
		for entry in data.get("models", []):
			type_name = entry["type"]
			model_cls = MODEL_TYPES.get(type_name)
			if model_cls is None:
				raise ValueError(f"Unknown model type {type_name!r}")
			model = model_cls(id=entry["id"])
			doc._register(model)
			pending.append((model, entry.get("attributes", {})))

		for model, attributes in pending:
			model.apply_attributes(attributes, doc)
		for model, _ in pending:
			for found in model.references():
				if doc._models.get(found.id) is not found:
					raise UnresolvedReferenceError(found.id)

		for root_id in data.get("roots", []):
			root = doc._models.get(root_id)
			if root is None:
				raise ValueError(f"Document root {root_id!r} is not among its models")
			doc._roots.append(root)
		return doc

	@classmethod
	def from_json_string(cls, text: str) -> Document:
		return cls.from_json(json.loads(text))


def _walk(start: Iterable[Model]) -> list[Model]:
	seen: set[int] = set()
	order: list[Model] = []
	stack = list(start)
	while stack:
		model = stack.pop()
		if id(model) in seen:
			continue
		seen.add(id(model))
		order.append(model)
		stack.extend(model.references())
	return order


__all__ = ["Document"]
