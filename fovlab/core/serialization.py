"""Versioned JSON import/export of layout documents.

Import validates section by section in a fixed order so that the first bad
section decides the failure message. Malformed content never raises; it is
reported through :class:`ImportResult`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .geometry import polygon_area
from .models import (
    SCHEMA_VERSION,
    Constraints,
    Layers,
    LayoutDocument,
    LayoutState,
    Meta,
    Scenarios,
    Sensor,
    Settings,
    VehicleTemplate,
    VendorSelection,
)
from .utils import get_logger

_log = get_logger()

MSG_INVALID_JSON = "Invalid JSON format."
MSG_SCHEMA_VERSION = "Unsupported or missing schemaVersion."
MSG_VEHICLE = "Invalid vehicle data."
MSG_CONSTRAINTS = "Invalid constraints data."
MSG_LAYERS = "Invalid layers data."
MSG_SETTINGS = "Invalid settings data."
MSG_SCENARIOS = "Invalid scenarios data."
MSG_SENSORS = "Invalid sensor data."
MSG_VENDORS = "Invalid vendors data."

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ImportResult:
    ok: bool
    data: Optional[LayoutDocument] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: LayoutDocument) -> "ImportResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "ImportResult":
        return cls(ok=False, error=error)


def to_document(state: LayoutDocument) -> LayoutDocument:
    """Drop transient selection/error fields from a state."""
    if type(state) is LayoutDocument:
        return state
    return LayoutDocument(**{name: getattr(state, name) for name in LayoutDocument.model_fields})


def export_state(state: LayoutDocument) -> Dict[str, Any]:
    return to_document(state).model_dump(by_alias=True, mode="json")


def export_state_json(state: LayoutDocument, indent: Optional[int] = 2) -> str:
    return json.dumps(export_state(state), indent=indent)


def _validate(model: Type[M], value: Any) -> Optional[M]:
    if not isinstance(value, dict):
        return None
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        _log.debug("%s rejected: %s", model.__name__, exc.errors()[:1])
        return None


def _validate_vehicle(value: Any) -> Optional[VehicleTemplate]:
    vehicle = _validate(VehicleTemplate, value)
    if vehicle is None or polygon_area(vehicle.polygon) <= 0.0:
        return None
    return vehicle


def _validate_sensors(value: Any) -> Optional[List[Sensor]]:
    if not isinstance(value, list):
        return None
    sensors: List[Sensor] = []
    for item in value:
        sensor = _validate(Sensor, item)
        if sensor is None:
            return None
        sensors.append(sensor)
    ids = [s.id for s in sensors]
    if len(set(ids)) != len(ids):
        return None
    group_sizes: Dict[str, int] = {}
    for sensor in sensors:
        if sensor.mirror_group:
            group_sizes[sensor.mirror_group] = group_sizes.get(sensor.mirror_group, 0) + 1
    if any(size > 2 for size in group_sizes.values()):
        return None
    return sensors


def import_document(data: Any) -> ImportResult:
    """Validate an already-decoded JSON value."""
    if not isinstance(data, dict) or data.get("schemaVersion") != SCHEMA_VERSION:
        return ImportResult.failure(MSG_SCHEMA_VERSION)

    vehicle = _validate_vehicle(data.get("vehicle"))
    if vehicle is None:
        return ImportResult.failure(MSG_VEHICLE)
    constraints = _validate(Constraints, data.get("constraints"))
    if constraints is None:
        return ImportResult.failure(MSG_CONSTRAINTS)
    layers = _validate(Layers, data.get("layers"))
    if layers is None:
        return ImportResult.failure(MSG_LAYERS)
    settings = _validate(Settings, data.get("settings"))
    if settings is None:
        return ImportResult.failure(MSG_SETTINGS)
    scenarios = _validate(Scenarios, data.get("scenarios"))
    if scenarios is None:
        return ImportResult.failure(MSG_SCENARIOS)
    sensors = _validate_sensors(data.get("sensors"))
    if sensors is None:
        return ImportResult.failure(MSG_SENSORS)

    if "vendors" in data:
        vendors = _validate(VendorSelection, data["vendors"])
        if vendors is None:
            return ImportResult.failure(MSG_VENDORS)
    else:
        vendors = VendorSelection()
    meta = _validate(Meta, data.get("meta")) or Meta()

    return ImportResult.success(
        LayoutDocument(
            schema_version=SCHEMA_VERSION,
            meta=meta,
            vehicle=vehicle,
            constraints=constraints,
            layers=layers,
            settings=settings,
            scenarios=scenarios,
            vendors=vendors,
            sensors=sensors,
        )
    )


def import_state(raw: str | bytes) -> ImportResult:
    try:
        data = json.loads(raw)
    except ValueError:
        return ImportResult.failure(MSG_INVALID_JSON)
    return import_document(data)


def state_from_document(doc: LayoutDocument) -> LayoutState:
    return LayoutState(**{name: getattr(doc, name) for name in LayoutDocument.model_fields})
