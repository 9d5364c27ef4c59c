import os

ENV_VIZCALLBACKS_STRICT_MODE = "VIZCALLBACKS_STRICT_MODE"
ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE = "VIZCALLBACKS_COMPILE_CACHE_SIZE"

DEFAULT_COMPILE_CACHE_SIZE = 256


class Env:
	"""Typed access to the environment variables read by vizcallbacks.

	Values are read on every access so tests can use ``monkeypatch.setenv``.
	"""

	@property
	def strict_mode(self) -> bool:
		value = os.environ.get(ENV_VIZCALLBACKS_STRICT_MODE)
		if value is None:
			return True
		return value not in {"0", "false", "False"}

	@property
	def compile_cache_size(self) -> int:
		raw = os.environ.get(ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE)
		if not raw:
			return DEFAULT_COMPILE_CACHE_SIZE
		try:
			size = int(raw)
		except ValueError:
			raise ValueError(
				f"{ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE} must be an integer, got {raw!r}"
			) from None
		if size < 0:
			raise ValueError(f"{ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE} must be >= 0")
		return size


env = Env()

__all__ = [
	"ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE",
	"ENV_VIZCALLBACKS_STRICT_MODE",
	"Env",
	"env",
]
