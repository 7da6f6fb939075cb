"""Data models for pveconnect.

This module contains Pydantic models for listed VMs and containers.
"""

from pveconnect.models.resource import (
    CT_LIST_LAYOUT,
    VM_LIST_LAYOUT,
    ColumnLayout,
    Resource,
    ResourceKind,
)

__all__ = [
    "CT_LIST_LAYOUT",
    "VM_LIST_LAYOUT",
    "ColumnLayout",
    "Resource",
    "ResourceKind",
]
