"""
Data-binding model supplied by the host dashboard, plus the normalizer that
turns its metadata mappings into ordered field descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

DIMENSIONS_KEY = "dimensions"
MEASURES_KEY = "mainStructureMembers"


class BindingState(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    ERROR = "error"


@dataclass(frozen=True)
class CellValue:
    """One bound value: raw label for dimensions, display string for measures."""

    label: str = ""
    formatted: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CellValue":
        label = raw.get("label", raw.get("id", raw.get("description", "")))
        formatted = raw.get("formatted")
        if formatted is None:
            formatted = raw.get("raw", "")
        return cls(
            label="" if label is None else str(label),
            formatted="" if formatted is None else str(formatted),
        )


@dataclass(frozen=True)
class FieldDescriptor:
    key: str
    label: str
    extra: Dict[str, Any] = field(default_factory=dict)


DataRow = Mapping[str, CellValue]


@dataclass
class DataBinding:
    state: BindingState
    metadata: Mapping[str, Any] = field(default_factory=dict)
    data: List[DataRow] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.state == BindingState.SUCCESS

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "DataBinding":
        """Build a binding from the JSON shape the host runtime hands out."""
        try:
            state = BindingState(payload.get("state", BindingState.PENDING))
        except ValueError:
            state = BindingState.ERROR
        rows: List[DataRow] = []
        for raw_row in payload.get("data") or []:
            row: Dict[str, CellValue] = {}
            for key, value in raw_row.items():
                if isinstance(value, CellValue):
                    row[key] = value
                elif isinstance(value, Mapping):
                    row[key] = CellValue.from_mapping(value)
                else:
                    text = "" if value is None else str(value)
                    row[key] = CellValue(label=text, formatted=text)
            rows.append(row)
        return cls(state=state, metadata=dict(payload.get("metadata") or {}), data=rows)


def _descriptors(mapping: Optional[Mapping[str, Any]]) -> List[FieldDescriptor]:
    descriptors: List[FieldDescriptor] = []
    if not mapping:
        return descriptors
    for key, fragment in mapping.items():
        fragment = dict(fragment or {})
        label = fragment.get("description") or key
        descriptors.append(FieldDescriptor(key=key, label=str(label), extra=fragment))
    return descriptors


def parse_metadata(metadata: Optional[Mapping[str, Any]]) -> Tuple[List[FieldDescriptor], List[FieldDescriptor]]:
    """Return (dimensions, measures) in the metadata's own enumeration order.

    Absent or empty mappings produce empty lists; callers decide what that means.
    """
    metadata = metadata or {}
    return _descriptors(metadata.get(DIMENSIONS_KEY)), _descriptors(metadata.get(MEASURES_KEY))
