from __future__ import annotations

from typing import ClassVar, Literal

ErrorCode = Literal[
	"binding",
	"reference",
	"compile",
	"arity",
	"execute",
]


class CallbackError(Exception):
	"""Base class for every error raised while building or running a callback."""

	code: ClassVar[ErrorCode]


class InvalidBindingError(CallbackError, ValueError):
	"""An argument name cannot be used as a parameter of the compiled callback."""

	code: ClassVar[ErrorCode] = "binding"


class UnresolvedReferenceError(CallbackError, LookupError):
	"""A bound entity reference points at a model the lookup does not know."""

	code: ClassVar[ErrorCode] = "reference"

	def __init__(self, ref_id: str, name: str | None = None) -> None:
		self.ref_id = ref_id
		self.name = name
		where = f" bound to {name!r}" if name is not None else ""
		super().__init__(f"Unresolved reference to model {ref_id!r}{where}")


class CompilationError(CallbackError):
	"""The callback body is not a valid sequence of Python statements.

	When the failure comes from the Python parser, the original ``SyntaxError``
	is kept in ``diagnostic`` (and as ``__cause__``).
	"""

	code: ClassVar[ErrorCode] = "compile"

	def __init__(self, message: str, diagnostic: SyntaxError | None = None) -> None:
		self.diagnostic = diagnostic
		super().__init__(message)

	@classmethod
	def from_syntax_error(cls, exc: SyntaxError) -> CompilationError:
		location = ""
		if exc.lineno is not None:
			location = f" (line {exc.lineno}"
			if exc.offset is not None:
				location += f", column {exc.offset}"
			location += ")"
		return cls(f"{exc.msg}{location}", diagnostic=exc)

	@property
	def lineno(self) -> int | None:
		return self.diagnostic.lineno if self.diagnostic is not None else None

	@property
	def offset(self) -> int | None:
		return self.diagnostic.offset if self.diagnostic is not None else None


class ArityMismatchError(CallbackError):
	"""The number of bound values does not match the compiled parameter list."""

	code: ClassVar[ErrorCode] = "arity"

	def __init__(self, expected: int, received: int) -> None:
		self.expected = expected
		self.received = received
		super().__init__(f"Expected {expected} bound values, received {received}")


class ExecutionError(CallbackError):
	"""Wraps an exception raised while the callback body was running."""

	code: ClassVar[ErrorCode] = "execute"

	def __init__(self, original: BaseException) -> None:
		self.original = original
		super().__init__(f"Callback raised {type(original).__name__}: {original}")


__all__ = [
	"ArityMismatchError",
	"CallbackError",
	"CompilationError",
	"ErrorCode",
	"ExecutionError",
	"InvalidBindingError",
	"UnresolvedReferenceError",
]
