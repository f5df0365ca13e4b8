"""
Utility functions for the lazy sequence service.

Builds lazy pipelines from declarative operation lists, evaluates them to a
bounded prefix, and keeps a small performance ledger.
"""

import gc
import logging
import math
import os
import random
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Optional, Union

from lazy import DEFAULT_POOL_SIZE, PullSequence, ensure_sequence
from generators import positives, non_negatives, negatives, non_positives, all_integers

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_EVALUATION_LIMIT = int(os.environ.get("LAZY_DEFAULT_LIMIT", "20"))
MAX_EVALUATION_LIMIT = int(os.environ.get("LAZY_MAX_LIMIT", "10000"))


class PipelineError(Exception):
    """Raised when a declarative pipeline cannot be built."""
    pass


# Named sources, transforms and predicates a pipeline may refer to
SOURCES: Dict[str, Callable[[], PullSequence]] = {
    "positives": positives,
    "non_negatives": non_negatives,
    "negatives": negatives,
    "non_positives": non_positives,
    "all_integers": all_integers,
}

TRANSFORMS: Dict[str, Callable[[Any], Callable[[Any], Any]]] = {
    "identity": lambda value: (lambda x: x),
    "add": lambda value: (lambda x: x + value),
    "multiply": lambda value: (lambda x: x * value),
    "negate": lambda value: (lambda x: -x),
    "square": lambda value: (lambda x: x * x),
    "mod": lambda value: (lambda x: x % value),
    "wrap": lambda value: (lambda x: [x]),
    "mirror": lambda value: (lambda x: [x, -x]),
    "multiples": lambda value: (lambda x: ensure_sequence(_multiples(x))),
}

PREDICATES: Dict[str, Callable[[Any], Callable[[Any], bool]]] = {
    "gt": lambda value: (lambda x: x > value),
    "ge": lambda value: (lambda x: x >= value),
    "lt": lambda value: (lambda x: x < value),
    "le": lambda value: (lambda x: x <= value),
    "eq": lambda value: (lambda x: x == value),
    "ne": lambda value: (lambda x: x != value),
    "even": lambda value: (lambda x: x % 2 == 0),
    "odd": lambda value: (lambda x: x % 2 != 0),
    "divisible_by": lambda value: (lambda x: x % value == 0),
}

SIDE_EFFECTS: Dict[str, Callable[[Any], Callable[[Any], None]]] = {
    "log": lambda value: (lambda x: logger.info(f"touch: {x!r}")),
}

# Named functions that are meaningless without a numeric value
_NEEDS_VALUE = {"add", "multiply", "mod", "gt", "ge", "lt", "le", "eq", "ne", "divisible_by"}

_PREDICATE_OPS = {"select", "reject", "start_when", "start_after", "do_while", "do_until",
                  "stop_before", "stop_when"}
_COUNT_OPS = {"skip", "take", "repeat"}
_PLAIN_OPS = {"cons", "weave", "diagonalize", "ltranspose", "cycle"}

SUPPORTED_OPERATIONS = sorted(_PREDICATE_OPS | _COUNT_OPS | _PLAIN_OPS | {"map", "touch", "randomly"})


def _multiples(x):
    n = x
    while True:
        yield n
        n += x


# Global performance tracking
_performance_metrics = {
    "operations": [],
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def _resolve(registry: Dict[str, Callable], kind: str, name: Optional[str], value: Any) -> Callable:
    """Look up a named function factory and bind its value."""
    if not name:
        raise PipelineError(f"Missing {kind} name")
    factory = registry.get(name)
    if factory is None:
        raise PipelineError(f"Unknown {kind}: {name!r}. Available: {sorted(registry)}")
    if name in _NEEDS_VALUE and value is None:
        raise PipelineError(f"{kind.capitalize()} {name!r} requires a value")
    if isinstance(value, float) and not math.isfinite(value):
        raise PipelineError(f"{kind.capitalize()} {name!r} requires a finite value, got {value}")
    if name in ("mod", "divisible_by") and value == 0:
        raise PipelineError(f"{kind.capitalize()} {name!r} cannot use a value of 0")
    return factory(value)


def resolve_source(source: Union[str, List[Any], PullSequence]) -> PullSequence:
    """Turn a generator name or a literal collection into a sequence."""
    if isinstance(source, str):
        factory = SOURCES.get(source)
        if factory is None:
            raise PipelineError(f"Unknown generator: {source!r}. Available: {sorted(SOURCES)}")
        return factory()
    try:
        return ensure_sequence(source)
    except TypeError as e:
        raise PipelineError(str(e)) from e


def apply_operation(seq: PullSequence, op: Dict[str, Any]) -> PullSequence:
    """Apply a single declarative operation to a sequence."""
    op_type = op.get("type")

    if op_type == "map":
        return seq.map(_resolve(TRANSFORMS, "transform", op.get("function"), op.get("value")))

    elif op_type == "touch":
        return seq.touch(_resolve(SIDE_EFFECTS, "side effect", op.get("function", "log"), op.get("value")))

    elif op_type in _PREDICATE_OPS:
        pred = _resolve(PREDICATES, "predicate", op.get("predicate"), op.get("value"))
        return getattr(seq, op_type)(pred)

    elif op_type in _COUNT_OPS:
        count = op.get("count")
        if count is None:
            raise PipelineError(f"Operation {op_type!r} requires a count")
        if not isinstance(count, (int, float)) or not math.isfinite(count):
            raise PipelineError(f"Operation {op_type!r} requires a finite count, got {count}")
        return getattr(seq, op_type)(count)

    elif op_type == "randomly":
        size = op.get("size") or DEFAULT_POOL_SIZE
        seed = op.get("seed")
        rng = random.Random(seed) if seed is not None else None
        return seq.randomly(size, rng=rng)

    elif op_type in _PLAIN_OPS:
        return getattr(seq, op_type)()

    raise PipelineError(f"Unknown operation: {op_type!r}. Supported: {SUPPORTED_OPERATIONS}")


def build_pipeline(source: Union[str, List[Any], PullSequence], operations: List[Dict[str, Any]]) -> PullSequence:
    """Build a lazy pipeline. Nothing is pulled from the source here."""
    seq = resolve_source(source)
    for op in operations:
        seq = apply_operation(seq, op)
    logger.info(f"Built pipeline with {len(operations)} operations: {[op.get('type') for op in operations]}")
    return seq


def _check_item(item: Any) -> Any:
    if isinstance(item, PullSequence):
        raise PipelineError("Pipeline yields nested sequences; flatten them with cons, weave or diagonalize")
    if isinstance(item, tuple):
        return [_check_item(x) for x in item]
    if isinstance(item, list):
        return [_check_item(x) for x in item]
    return item


def evaluate_pipeline(source: Union[str, List[Any]], operations: List[Dict[str, Any]],
                      limit: int = DEFAULT_EVALUATION_LIMIT) -> Dict[str, Any]:
    """Build a pipeline and pull at most limit elements from it."""
    if limit < 0 or limit > MAX_EVALUATION_LIMIT:
        raise PipelineError(f"Limit must be between 0 and {MAX_EVALUATION_LIMIT}, got {limit}")

    start_time = time.perf_counter()
    seq = build_pipeline(source, operations)

    tracemalloc.start()
    gc.collect()
    try:
        items = [_check_item(x) for x in seq.grab(limit)]
        # A full prefix leaves has_more unknown; checking would pull past the limit
        has_more = None if len(items) == limit else False
        current, peak = tracemalloc.get_traced_memory()
    except (TypeError, ArithmeticError) as e:
        logger.warning(f"Pipeline failed while pulling: {e}")
        raise PipelineError(f"Operation failed on an element: {e}") from e
    finally:
        tracemalloc.stop()

    processing_time_ms = (time.perf_counter() - start_time) * 1000

    return {
        "items": items,
        "count": len(items),
        "has_more": has_more,
        "operations_applied": [op.get("type") for op in operations],
        "performance": {
            "processing_time_ms": processing_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "limit": limit,
            "operation": "lazy_pipeline"
        }
    }


def _record(performance_info: Dict[str, Any]):
    _performance_metrics["operations"].append(performance_info)
    _performance_metrics["total_time_ms"] += performance_info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += performance_info["memory_usage_mb"]
    _performance_metrics["operation_count"] += 1


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Measure performance of a function call with memory tracking"""

    # Start memory tracking
    tracemalloc.start()
    gc.collect()

    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        current, peak = tracemalloc.get_traced_memory()

        performance_info = {
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": True,
            "result_size": len(result) if hasattr(result, "__len__") else None,
            "timestamp": time.time()
        }
        _record(performance_info)
        # The ledger keeps metrics only; the result goes back to the caller
        return {**performance_info, "result": result}

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        current, peak = tracemalloc.get_traced_memory()

        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        logger.error(f"{operation_name} failed after {execution_time_ms:.2f}ms: {e}")
        raise

    finally:
        tracemalloc.stop()


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    if _performance_metrics["operation_count"] == 0:
        return {
            "total_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": _performance_metrics["operation_count"],
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / _performance_metrics["operation_count"],
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / _performance_metrics["operation_count"]
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }
