from __future__ import annotations

import importlib
import logging
from collections.abc import Sequence
from types import ModuleType
from typing import Any

from vizcallbacks.compiler import CompiledUnit
from vizcallbacks.errors import ArityMismatchError, ExecutionError
from vizcallbacks.model import MISSING

logger = logging.getLogger(__name__)


def require(name: str) -> ModuleType:
	"""Module loader handed to callbacks, backed by the regular import system."""
	return importlib.import_module(name)


def execute(
	unit: CompiledUnit,
	bound_values: Sequence[Any],
	primary: Any,
	aux: Any = MISSING,
) -> Any:
	"""Run ``unit`` with ``bound_values`` followed by ``primary`` and ``aux``.

	``aux`` becomes an empty dict only when it is not passed at all; any value
	given explicitly, falsy or not, reaches the body unchanged.
	"""
	expected = len(unit.names)
	if len(bound_values) != expected:
		raise ArityMismatchError(expected, len(bound_values))

	aux_resolved = {} if aux is MISSING else aux
	exports: dict[str, Any] = {}
	try:
		return unit.fn(*bound_values, primary, aux_resolved, require, exports)
	except Exception as exc:
		logger.debug("Callback raised %s", type(exc).__name__, exc_info=exc)
		raise ExecutionError(exc) from exc


__all__ = ["execute", "require"]
