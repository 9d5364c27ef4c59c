from __future__ import annotations

import ast
import builtins
import logging
import textwrap
import warnings
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from vizcallbacks.bindings import RESERVED_PARAMS, STRICT_GUARD, validate_names
from vizcallbacks.env import env
from vizcallbacks.errors import CompilationError

logger = logging.getLogger(__name__)

FILENAME = "<callback>"
FUNCTION_NAME = "callback"

_SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


@dataclass(frozen=True, slots=True)
class CompiledUnit:
	"""A callback body compiled against a fixed parameter list.

	``source`` is the generated function definition, as Python source.
	"""

	parameter_names: tuple[str, ...]
	body: str
	strict_mode: bool
	source: str
	fn: Callable[..., Any] = field(compare=False, repr=False)

	@property
	def names(self) -> tuple[str, ...]:
		"""The bound argument names, without the trailing runtime parameters."""
		return self.parameter_names[: len(self.parameter_names) - len(RESERVED_PARAMS)]


@contextmanager
def strict_guard() -> Iterator[None]:
	with warnings.catch_warnings():
		warnings.simplefilter("error")
		yield


def compile_unit(
	body: str, names: Sequence[str], strict_mode: bool = True
) -> CompiledUnit:
	"""Compile ``body`` into a function taking ``names`` followed by
	``cb_obj, cb_data, require, exports``.

	The body is a sequence of Python statements; its ``return`` value is the
	result of the callback. In strict mode the body runs with warnings raised
	as errors and may not declare globals.

	Raises ``InvalidBindingError`` for unusable or duplicate names and
	``CompilationError`` when the body does not compile.
	"""
	if isinstance(names, str):
		raise TypeError("names must be a sequence of strings, not a string")
	parameter_names = (*validate_names(names), *RESERVED_PARAMS)

	statements = _parse_body(body)
	_check_statements(statements, strict_mode)
	module = _build_module(parameter_names, statements, strict_mode)
	source = ast.unparse(module)

	try:
		code = compile(module, FILENAME, "exec")
	except SyntaxError as exc:
		raise CompilationError.from_syntax_error(exc) from exc

	namespace: dict[str, Any] = {
		"__builtins__": builtins,
		"__name__": FILENAME,
		STRICT_GUARD: strict_guard,
	}
	exec(code, namespace)
	fn: Callable[..., Any] = namespace[FUNCTION_NAME]
	logger.debug(
		"Compiled callback with parameters (%s), strict_mode=%s",
		", ".join(parameter_names),
		strict_mode,
	)
	return CompiledUnit(
		parameter_names=parameter_names,
		body=body,
		strict_mode=strict_mode,
		source=source,
		fn=fn,
	)


@lru_cache(maxsize=env.compile_cache_size)
def _compile_cached(
	body: str, names: tuple[str, ...], strict_mode: bool
) -> CompiledUnit:
	return compile_unit(body, names, strict_mode)


def compile_cached(
	body: str, names: Sequence[str], strict_mode: bool = True
) -> CompiledUnit:
	"""``compile_unit`` memoized on ``(body, names, strict_mode)``."""
	return _compile_cached(body, tuple(names), strict_mode)


def clear_compile_cache() -> None:
	_compile_cached.cache_clear()


def _parse_body(body: str) -> list[ast.stmt]:
	try:
		module = ast.parse(textwrap.dedent(body), filename=FILENAME, mode="exec")
	except SyntaxError as exc:
		raise CompilationError.from_syntax_error(exc) from exc
	except ValueError as exc:
		raise CompilationError(str(exc)) from exc
	return module.body


def _own_nodes(statements: list[ast.stmt]) -> Iterator[ast.AST]:
	"""Walk the body without entering nested functions, lambdas or classes."""
	stack: list[ast.AST] = list(statements)
	while stack:
		node = stack.pop()
		yield node
		if not isinstance(node, _SCOPE_NODES):
			stack.extend(ast.iter_child_nodes(node))


def _check_statements(statements: list[ast.stmt], strict_mode: bool) -> None:
	for node in _own_nodes(statements):
		if isinstance(node, (ast.Yield, ast.YieldFrom)):
			raise CompilationError(
				f"Callbacks must return a single value, 'yield' is not allowed (line {node.lineno})"
			)
	if not strict_mode:
		return
	for node in ast.walk(ast.Module(body=statements, type_ignores=[])):
		if isinstance(node, ast.Global):
			raise CompilationError(
				f"'global' declarations are not allowed in strict mode (line {node.lineno})"
			)


def _build_module(
	parameter_names: tuple[str, ...], statements: list[ast.stmt], strict_mode: bool
) -> ast.Module:
	# Parse the header instead of building nodes by hand, the FunctionDef fields
	# differ between Python versions.
	module = ast.parse(f"def {FUNCTION_NAME}({', '.join(parameter_names)}):\n\tpass")
	fndef = module.body[0]
	assert isinstance(fndef, ast.FunctionDef)

	body = statements or ast.parse("pass").body
	if strict_mode:
		guard = ast.parse(f"with {STRICT_GUARD}():\n\tpass").body[0]
		assert isinstance(guard, ast.With)
		guard.body = body
		body = [guard]
	fndef.body = body
	return ast.fix_missing_locations(module)


__all__ = [
	"CompiledUnit",
	"FILENAME",
	"clear_compile_cache",
	"compile_cached",
	"compile_unit",
	"strict_guard",
]
