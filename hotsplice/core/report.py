"""Human-readable dump of the patch and injection registries.

The output is YAML meant for logs and debugging sessions. It is never read
back: records hold live callables and do not survive the process.
"""

import io
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO

from ruamel.yaml import YAML
from ruamel.yaml.scalarstring import LiteralScalarString

from hotsplice.core.schema.injection import InjectRecord
from hotsplice.core.schema.patch import PatchRecord


def _callable_name(fn: Optional[Callable[..., Any]]) -> Optional[str]:
    if fn is None:
        return None
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


def _create_yaml_instance() -> YAML:
    """Create a ruamel.yaml instance that writes block style without wrapping."""
    yaml = YAML()
    yaml.width = 4096
    yaml.default_flow_style = False
    yaml.allow_unicode = True
    return yaml


def _timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts).isoformat()


def patch_to_dict(record: PatchRecord) -> Dict[str, Any]:
    """Serialize a PatchRecord to plain data."""
    patch = record.patch
    return {
        "id": record.id,
        "member": record.member,
        "timestamp": _timestamp(record.timestamp),
        "original": _callable_name(record.original),
        "hooks": {
            "prefix": _callable_name(patch.prefix),
            "postfix": _callable_name(patch.postfix),
            "replace": _callable_name(patch.replace),
        },
        "metadata": {
            str(k): v if isinstance(v, str) else repr(v) for k, v in patch.metadata.items()
        },
        "allow_unsafe_injection": patch.allow_unsafe_injection,
    }


def injection_to_dict(record: InjectRecord) -> Dict[str, Any]:
    """Serialize an InjectRecord to plain data."""
    spec = record.spec
    return {
        "id": record.id,
        "member": record.member,
        "timestamp": _timestamp(record.timestamp),
        "original": _callable_name(record.original),
        "spec": {
            "code": LiteralScalarString(spec.code),
            "line": spec.line,
            "loc": getattr(spec.loc, "value", spec.loc),
        },
        "source": LiteralScalarString(record.source),
    }


def build_report(
    patches: Iterable[PatchRecord], injections: Iterable[InjectRecord]
) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "patches": [patch_to_dict(r) for r in patches],
        "injections": [injection_to_dict(r) for r in injections],
    }


def dump_report(report: Dict[str, Any], stream: Optional[TextIO] = None) -> str:
    """Render a report as YAML.

    Args:
        report: Output of build_report
        stream: Optional stream to also write the YAML to

    Returns:
        The YAML text
    """
    yaml = _create_yaml_instance()
    buffer = io.StringIO()
    yaml.dump(report, buffer)
    text = buffer.getvalue()
    if stream is not None:
        stream.write(text)
    return text
