from typing import get_args

import pytest
from vizcallbacks.errors import (
	ArityMismatchError,
	CallbackError,
	CompilationError,
	ErrorCode,
	ExecutionError,
	InvalidBindingError,
	UnresolvedReferenceError,
)


@pytest.mark.parametrize(
	("error_cls", "code"),
	[
		(InvalidBindingError, "binding"),
		(UnresolvedReferenceError, "reference"),
		(CompilationError, "compile"),
		(ArityMismatchError, "arity"),
		(ExecutionError, "execute"),
	],
)
def test_error_codes(error_cls: type[CallbackError], code: str):
	assert issubclass(error_cls, CallbackError)
	assert error_cls.code == code
	assert code in get_args(ErrorCode)


def test_builtin_bases():
	assert issubclass(InvalidBindingError, ValueError)
	assert issubclass(UnresolvedReferenceError, LookupError)


def test_compilation_error_message_has_location():
	exc = SyntaxError("invalid syntax", ("<callback>", 3, 7, "return (", 3, 8))
	err = CompilationError.from_syntax_error(exc)
	assert str(err) == "invalid syntax (line 3, column 7)"
	assert err.diagnostic is exc
	assert err.lineno == 3
	assert err.offset == 7


def test_compilation_error_without_diagnostic():
	err = CompilationError("bad body")
	assert err.lineno is None
	assert err.offset is None
