"""Tests for compiling callback bodies into functions."""

from __future__ import annotations

import traceback

import pytest
from vizcallbacks.compiler import FILENAME, compile_cached, compile_unit
from vizcallbacks.errors import CompilationError, ExecutionError, InvalidBindingError
from vizcallbacks.invoker import execute

RESERVED = ("cb_obj", "cb_data", "require", "exports")


class TestParameters:
	def test_no_names_gives_reserved_parameters(self):
		unit = compile_unit("return 10", [], True)
		assert unit.parameter_names == RESERVED
		assert unit.names == ()

	def test_names_come_first_in_order(self):
		unit = compile_unit("return 10", ["b", "a"], True)
		assert unit.parameter_names == ("b", "a", *RESERVED)
		assert unit.names == ("b", "a")

	def test_duplicate_names_rejected(self):
		with pytest.raises(InvalidBindingError):
			compile_unit("return 1", ["a", "a"], True)

	@pytest.mark.parametrize("name", ["cb_obj", "exports", "for", "9lives", "a-b"])
	def test_invalid_names_rejected(self, name: str):
		with pytest.raises(InvalidBindingError):
			compile_unit("return 1", [name], True)

	def test_normalized_duplicates_rejected(self):
		with pytest.raises(InvalidBindingError, match="Duplicate"):
			compile_unit("return 1", ["\ufb01", "fi"], True)

	def test_ligature_name_binds_its_normalized_form(self):
		unit = compile_unit("return fi", ["\ufb01"], True)
		assert unit.fn(3, None, {}, None, {}) == 3

	def test_names_must_not_be_a_string(self):
		with pytest.raises(TypeError):
			compile_unit("return 1", "abc", True)


class TestSource:
	def test_strict_source(self):
		unit = compile_unit("return 10", ["foo"], True)
		assert unit.source == (
			"def callback(foo, cb_obj, cb_data, require, exports):\n"
			+ "    with __strict__():\n"
			+ "        return 10"
		)

	def test_non_strict_source(self):
		unit = compile_unit("return 10", [], False)
		assert unit.source == (
			"def callback(cb_obj, cb_data, require, exports):\n" + "    return 10"
		)

	def test_compilation_is_deterministic(self):
		first = compile_unit("return a + b", ["a", "b"], True)
		second = compile_unit("return a + b", ["a", "b"], True)
		assert first == second
		assert first.fn is not second.fn
		assert execute(first, [1, 2], None) == execute(second, [1, 2], None) == 3

	def test_cached_compilation_reuses_units(self):
		first = compile_cached("return a", ["a"], True)
		assert compile_cached("return a", ("a",), True) is first
		assert compile_cached("return a", ("a",), False) is not first


class TestBodies:
	def test_empty_body_returns_none(self):
		unit = compile_unit("", [], True)
		assert execute(unit, [], "foo") is None

	def test_indented_body_is_dedented(self):
		unit = compile_unit("\n    x = 2\n    return x * 3\n", [], True)
		assert execute(unit, [], None) == 6

	def test_multiline_body(self):
		body = "total = 0\nfor value in values:\n    total += value\nreturn total"
		unit = compile_unit(body, ["values"], True)
		assert execute(unit, [[1, 2, 3]], None) == 6

	def test_nested_generator_is_allowed(self):
		body = "def gen():\n    yield 1\n    yield 2\nreturn list(gen())"
		unit = compile_unit(body, [], True)
		assert execute(unit, [], None) == [1, 2]

	def test_yield_rejected(self):
		with pytest.raises(CompilationError, match="yield"):
			compile_unit("yield 1", [], True)

	def test_yield_from_rejected(self):
		with pytest.raises(CompilationError, match="yield"):
			compile_unit("x = 1\nyield from range(3)", [], False)


class TestSyntaxErrors:
	def test_syntax_error_is_surfaced(self):
		with pytest.raises(CompilationError) as info:
			compile_unit("return (", [], True)
		err = info.value
		assert isinstance(err.diagnostic, SyntaxError)
		assert err.__cause__ is err.diagnostic
		assert err.lineno == 1
		assert err.code == "compile"

	def test_line_numbers_match_the_body(self):
		with pytest.raises(CompilationError) as info:
			compile_unit("x = 1\nreturn x +", [], True)
		assert info.value.lineno == 2
		assert "line 2" in str(info.value)

	def test_await_outside_async_is_rejected(self):
		with pytest.raises(CompilationError) as info:
			compile_unit("return await foo", ["foo"], True)
		assert isinstance(info.value.diagnostic, SyntaxError)

	def test_runtime_tracebacks_point_into_the_body(self):
		unit = compile_unit("x = 1\nraise ValueError('boom')", [], False)
		with pytest.raises(ExecutionError) as info:
			execute(unit, [], None)
		frame = traceback.extract_tb(info.value.original.__traceback__)[-1]
		assert frame.filename == FILENAME
		assert frame.lineno == 2


class TestStrictMode:
	def test_global_rejected_in_strict_mode(self):
		with pytest.raises(CompilationError, match="global"):
			compile_unit("global leaked\nleaked = 1", [], True)

	def test_global_allowed_without_strict_mode(self):
		unit = compile_unit("global counter\ncounter = 1\nreturn counter", [], False)
		assert execute(unit, [], None) == 1

	def test_global_does_not_leak_between_units(self):
		body = "global counter\ncounter = 1\nreturn counter"
		first = compile_unit(body, [], False)
		second = compile_unit("return 'counter' in globals()", [], False)
		execute(first, [], None)
		assert execute(second, [], None) is False

	def test_warnings_are_errors_in_strict_mode(self):
		body = "import warnings\nwarnings.warn('careful')\nreturn 1"
		unit = compile_unit(body, [], True)
		with pytest.raises(ExecutionError) as info:
			execute(unit, [], None)
		assert isinstance(info.value.original, UserWarning)

	def test_warnings_pass_without_strict_mode(self):
		body = "import warnings\nwarnings.warn('careful')\nreturn 1"
		unit = compile_unit(body, [], False)
		with pytest.warns(UserWarning, match="careful"):
			assert execute(unit, [], None) == 1
