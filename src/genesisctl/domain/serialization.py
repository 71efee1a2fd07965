"""YAML and canonical-JSON helpers for the coordination-store file formats.

Loading uses the safe (pure-Python) constructor so values come back as plain
``dict``/``list``/``int``/``str``. Dumping uses the round-trip emitter in
block style; plain mappings come out with sorted keys and strings that would
read back as another type (``0x123``, ``yes``) are quoted.
"""

from __future__ import annotations

import json
from io import StringIO
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from genesisctl.errors import SchemaError

T = TypeVar("T", bound=BaseModel)


def _new_yaml(typ: str = "rt") -> YAML:
    """Create a fresh YAML instance.

    A new instance per call avoids stale emitter state leaking across
    operations (ruamel.yaml's YAML object is stateful).
    """
    if typ == "safe":
        y = YAML(typ="safe", pure=True)
    else:
        y = YAML()
    y.default_flow_style = False
    return y


def load_yaml(data: bytes | str, *, what: str) -> Any:
    """Parse YAML *data*, raising :class:`SchemaError` naming *what* on failure."""
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        return _new_yaml("safe").load(text)
    except (YAMLError, UnicodeDecodeError) as exc:
        raise SchemaError(f"Malformed {what}: {exc}", file=what) from exc


def dump_yaml(data: Any) -> str:
    """Render plain Python data as block-style YAML."""
    buf = StringIO()
    _new_yaml().dump(data, buf)
    return buf.getvalue()


def validate_model(model_cls: type[T], data: Any, *, what: str) -> T:
    """Validate *data* against *model_cls*, mapping pydantic errors to :class:`SchemaError`."""
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise SchemaError(
            f"Invalid {what}: {'; '.join(problems)}",
            file=what,
            problems=problems,
        ) from exc


def canonical_json(data: Any) -> bytes:
    """Sorted-key, whitespace-free UTF-8 JSON used wherever bytes must be stable."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")
