from vizcallbacks.bindings import (
	AUX_PARAM,
	EXPORTS_PARAM,
	PRIMARY_PARAM,
	REQUIRE_PARAM,
	BindingSet,
	BindingSnapshot,
	BoundValue,
	Literal,
)
from vizcallbacks.compiler import (
	CompiledUnit,
	clear_compile_cache,
	compile_cached,
	compile_unit,
)
from vizcallbacks.document import Document
from vizcallbacks.env import env
from vizcallbacks.errors import (
	ArityMismatchError,
	CallbackError,
	CompilationError,
	ErrorCode,
	ExecutionError,
	InvalidBindingError,
	UnresolvedReferenceError,
)
from vizcallbacks.invoker import execute
from vizcallbacks.model import (
	MISSING,
	MODEL_REGISTRY,
	EntityReference,
	Model,
	ModelLookup,
	Property,
)
from vizcallbacks.models import Callback, CustomCallback, Range1d
from vizcallbacks.version import __version__

__all__ = [
	"AUX_PARAM",
	"ArityMismatchError",
	"BindingSet",
	"BindingSnapshot",
	"BoundValue",
	"Callback",
	"CallbackError",
	"CompilationError",
	"CompiledUnit",
	"CustomCallback",
	"Document",
	"EXPORTS_PARAM",
	"EntityReference",
	"ErrorCode",
	"ExecutionError",
	"InvalidBindingError",
	"Literal",
	"MISSING",
	"MODEL_REGISTRY",
	"Model",
	"ModelLookup",
	"PRIMARY_PARAM",
	"Property",
	"REQUIRE_PARAM",
	"Range1d",
	"UnresolvedReferenceError",
	"__version__",
	"clear_compile_cache",
	"compile_cached",
	"compile_unit",
	"env",
	"execute",
]
