import pytest
from vizcallbacks.compiler import clear_compile_cache


@pytest.fixture(autouse=True)
def _clear_compile_cache():  # pyright: ignore[reportUnusedFunction]
	clear_compile_cache()
	yield
	clear_compile_cache()
