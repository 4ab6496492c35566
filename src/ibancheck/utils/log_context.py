from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator

# Per-thread/async-task context attached to every log record.
batch_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("batch_id", default=None)
source_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("source", default=None)

_VARS: Dict[str, contextvars.ContextVar] = {
    "batch_id": batch_id_var,
    "source": source_var,
}


def new_batch_id() -> str:
    return str(uuid.uuid4())


def get_context_fields() -> Dict[str, Any]:
    return {name: var.get() for name, var in _VARS.items()}


@contextmanager
def log_scope(**fields: Any) -> Iterator[None]:
    """
    Temporarily set context fields (batch_id, source).
    Previous values are restored on exit.
    """
    unknown = set(fields) - set(_VARS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
    tokens = []
    try:
        for name, value in fields.items():
            var = _VARS[name]
            tokens.append((var, var.set(value)))
        yield
    finally:
        for var, tok in reversed(tokens):
            var.reset(tok)
