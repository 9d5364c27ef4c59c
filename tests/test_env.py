import pytest
from vizcallbacks.env import (
	ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE,
	ENV_VIZCALLBACKS_STRICT_MODE,
	env,
)


def test_strict_mode_default(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.delenv(ENV_VIZCALLBACKS_STRICT_MODE, raising=False)
	assert env.strict_mode is True


@pytest.mark.parametrize(
	("raw", "expected"),
	[("0", False), ("false", False), ("False", False), ("1", True), ("yes", True)],
)
def test_strict_mode_values(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool):
	monkeypatch.setenv(ENV_VIZCALLBACKS_STRICT_MODE, raw)
	assert env.strict_mode is expected


def test_cache_size_default(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.delenv(ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE, raising=False)
	assert env.compile_cache_size == 256


def test_cache_size_from_env(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE, "16")
	assert env.compile_cache_size == 16


@pytest.mark.parametrize("raw", ["many", "-1"])
def test_cache_size_invalid(monkeypatch: pytest.MonkeyPatch, raw: str):
	monkeypatch.setenv(ENV_VIZCALLBACKS_COMPILE_CACHE_SIZE, raw)
	with pytest.raises(ValueError):
		env.compile_cache_size  # pyright: ignore[reportUnusedExpression]
