"""Backend service helpers with lazy imports to avoid circular dependencies."""

from importlib import import_module
from typing import Any, Dict

__all__ = [
    "NearestPointLocator",
    "RecordStore",
    "SegmentEncoder",
    "decimate",
    "decimate_for_overview",
    "decimate_for_window",
    "encode_segments",
    "nearest_index",
    "state_colors",
]

_MODULE_MAP: Dict[str, str] = {
    "NearestPointLocator": ".nearest_point",
    "RecordStore": ".record_store",
    "SegmentEncoder": ".segment_service",
    "decimate": ".decimation_service",
    "decimate_for_overview": ".decimation_service",
    "decimate_for_window": ".decimation_service",
    "encode_segments": ".segment_service",
    "nearest_index": ".nearest_point",
    "state_colors": ".segment_service",
}


def __getattr__(name: str) -> Any:
    module_name = _MODULE_MAP.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(f"{__name__}{module_name}")
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:  # pragma: no cover - convenience
    return sorted(set(__all__ + list(globals().keys())))
