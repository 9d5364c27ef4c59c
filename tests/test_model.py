from __future__ import annotations

import pytest
from vizcallbacks.errors import UnresolvedReferenceError
from vizcallbacks.model import MODEL_REGISTRY, MODEL_TYPES, EntityReference, Model, Property
from vizcallbacks.models import Range1d


class Marker(Model):
	size = Property[float](4.0)
	tags = Property[list[str]](default_factory=list)


def test_models_get_unique_ids():
	assert Range1d().id != Range1d().id


def test_explicit_id():
	assert Range1d(id="fixed").id == "fixed"


def test_property_defaults():
	first, second = Marker(), Marker()
	assert first.size == 4.0
	assert first.tags == []
	assert first.tags is not second.tags


def test_properties_in_definition_order():
	assert list(Marker.properties()) == ["size", "tags"]


def test_subclasses_are_registered():
	assert MODEL_TYPES["Marker"] is Marker
	assert MODEL_TYPES["Range1d"] is Range1d


def test_ref():
	rng = Range1d()
	assert rng.ref() == EntityReference(rng.id)
	assert rng.ref().resolve(MODEL_REGISTRY) is rng


def test_detached_models_resolve_through_the_registry():
	rng = Range1d()
	assert rng.document is None
	assert rng.lookup is MODEL_REGISTRY


def test_references_from_properties():
	rng = Range1d()

	class Holder(Model):
		target = Property[object](None)

	holder = Holder(target=[rng, EntityReference(rng.id)])
	assert list(holder.references()) == [rng, rng]


def test_range_span():
	assert Range1d(start=2, end=5).span == 3


def test_unresolved_references_raise():
	class Holder(Model):
		target = Property[object](None)

	holder = Holder(target=EntityReference("no-such-model"))
	with pytest.raises(UnresolvedReferenceError, match="no-such-model"):
		list(holder.references())
