"""
Schema definitions for patches, injections and their records.
"""

from hotsplice.core.schema.injection import InjectionSpec, InjectRecord, InsertLocation
from hotsplice.core.schema.patch import FlowControl, PatchRecord, PatchSpec

__all__ = [
    "FlowControl",
    "InjectionSpec",
    "InjectRecord",
    "InsertLocation",
    "PatchRecord",
    "PatchSpec",
]
