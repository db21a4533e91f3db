from .engines import (
    EngineName,
    engine_trial_order,
    has_documentclass,
    infer_engine,
    strip_code_fences,
)
from .archive import (
    ENTRY_POINT,
    find_missing_packages,
    pack_document,
    pack_sources,
)

__all__ = [
    "EngineName",
    "engine_trial_order",
    "has_documentclass",
    "infer_engine",
    "strip_code_fences",
    "ENTRY_POINT",
    "find_missing_packages",
    "pack_document",
    "pack_sources",
]
