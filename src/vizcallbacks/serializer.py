"""Attribute value encoding for documents.

Models are never inlined inside another model's attributes. Both a live
``Model`` and an ``EntityReference`` encode to a reference payload::

    {"$ref": "<model id>"}

and the referenced model is written once, at the top level of the document.

Supported values are primitives, lists/tuples (both decode to lists), ``dict``
with string keys, dataclasses (decode to dicts), models and entity references.
NaN floats encode as ``None``; infinities are rejected since they are not valid
JSON.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import fields, is_dataclass
from typing import Any

from vizcallbacks.errors import UnresolvedReferenceError
from vizcallbacks.model import EntityReference, Model, ModelLookup

Primitive = int | float | str | bool | None
PlainJSON = Primitive | list["PlainJSON"] | dict[str, "PlainJSON"]

REF_KEY = "$ref"

__all__ = [
	"PlainJSON",
	"REF_KEY",
	"decode",
	"encode",
	"is_ref_payload",
	"iter_references",
]


def encode(value: Any) -> PlainJSON:
	if value is None or isinstance(value, (bool, int, str)):
		return value

	if isinstance(value, float):
		if math.isnan(value):
			return None
		if math.isinf(value):
			raise ValueError("Infinity is not valid JSON")
		return value

	if isinstance(value, Model):
		return {REF_KEY: value.id}

	if isinstance(value, EntityReference):
		return {REF_KEY: value.id}

	if isinstance(value, dict):
		result_dict: dict[str, PlainJSON] = {}
		for key, entry in value.items():
			if not isinstance(key, str):
				raise TypeError(f"Unsupported dict key in serialization: {key!r}")
			result_dict[key] = encode(entry)
		return result_dict

	if isinstance(value, (list, tuple)):
		return [encode(entry) for entry in value]

	if is_dataclass(value) and not isinstance(value, type):
		return {f.name: encode(getattr(value, f.name)) for f in fields(value)}

	raise TypeError(f"Unsupported value in serialization: {type(value)!r}")


def is_ref_payload(value: Any) -> bool:
	return (
		isinstance(value, dict)
		and len(value) == 1
		and isinstance(value.get(REF_KEY), str)
	)


def decode(payload: PlainJSON, lookup: ModelLookup | None = None) -> Any:
	"""Rebuild a value from its encoded form.

	With a ``lookup``, reference payloads become the models they point to and a
	missing id raises ``UnresolvedReferenceError``. Without one they decode to
	``EntityReference`` objects.
	"""
	if is_ref_payload(payload):
		assert isinstance(payload, dict)
		ref = EntityReference(str(payload[REF_KEY]))
		if lookup is None:
			return ref
		model = ref.resolve(lookup)
		if model is None:
			raise UnresolvedReferenceError(ref.id)
		return model

	if payload is None or isinstance(payload, (bool, int, float, str)):
		return payload

	if isinstance(payload, list):
		return [decode(entry, lookup) for entry in payload]

	if isinstance(payload, dict):
		return {key: decode(entry, lookup) for key, entry in payload.items()}

	raise TypeError(f"Unsupported value in deserialization: {type(payload)!r}")


def iter_references(value: Any) -> Iterator[Model | EntityReference]:
	"""Yield the models and entity references nested inside ``value``."""
	if isinstance(value, (Model, EntityReference)):
		yield value
	elif isinstance(value, dict):
		for entry in value.values():
			yield from iter_references(entry)
	elif isinstance(value, (list, tuple)):
		for entry in value:
			yield from iter_references(entry)
	elif is_dataclass(value) and not isinstance(value, type):
		for f in fields(value):
			yield from iter_references(getattr(value, f.name))
