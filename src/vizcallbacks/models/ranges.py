from vizcallbacks.model import Model, Property


class Range1d(Model):
	"""A fixed numeric interval."""

	start = Property[float](0.0)
	end = Property[float](1.0)

	@property
	def span(self) -> float:
		return self.end - self.start


__all__ = ["Range1d"]
