"""Layout state and the action reducer.

``reduce`` is a pure ``(LayoutState, Action) -> LayoutState`` function. Every
action that can change sensor positions re-runs the constraint solver so the
stored sensor list is always the relaxed one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from ..sensors.presets import preset_sensors, preset_vendors, resolve_preset
from ..sensors.vehicles import get_vehicle
from ..sensors.vendors import apply_vendor_specs
from .constraints import enforce_constraints
from .models import (
    Constraints,
    Layers,
    LayoutDocument,
    LayoutState,
    Meta,
    Scenarios,
    Sensor,
    Settings,
    VendorSelection,
)
from .serialization import state_from_document
from .utils import get_logger

_log = get_logger()


@dataclass(frozen=True)
class SetVehicle:
    vehicle_type: str


@dataclass(frozen=True)
class ApplyPreset:
    preset_id: str


@dataclass(frozen=True)
class UpdateSensor:
    sensor: Sensor


@dataclass(frozen=True)
class SelectSensor:
    sensor_id: Optional[str]


@dataclass(frozen=True)
class SetConstraints:
    constraints: Constraints


@dataclass(frozen=True)
class SetLayers:
    layers: Layers


@dataclass(frozen=True)
class SetSettings:
    settings: Settings


@dataclass(frozen=True)
class SetScenarios:
    scenarios: Scenarios


@dataclass(frozen=True)
class SetVendors:
    vendors: VendorSelection


@dataclass(frozen=True)
class ImportState:
    document: LayoutDocument


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


Action = Union[
    SetVehicle,
    ApplyPreset,
    UpdateSensor,
    SelectSensor,
    SetConstraints,
    SetLayers,
    SetSettings,
    SetScenarios,
    SetVendors,
    ImportState,
    SetError,
]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_initial_state() -> LayoutState:
    return LayoutState(meta=Meta(created_at=_now_iso()), vehicle=get_vehicle("sedan"))


def _relax(state: LayoutState, sensors: Sequence[Sensor]) -> List[Sensor]:
    return enforce_constraints(sensors, state.vehicle, state.constraints)


def reduce(state: LayoutState, action: object) -> LayoutState:
    """Return the state after ``action``; unknown actions are a no-op."""
    if isinstance(action, SetVehicle):
        vehicle = get_vehicle(action.vehicle_type)
        next_state = state.model_copy(update={"vehicle": vehicle})
        return next_state.model_copy(update={"sensors": _relax(next_state, state.sensors)})

    if isinstance(action, ApplyPreset):
        preset_id = resolve_preset(action.preset_id)
        vendors = preset_vendors(preset_id)
        sensors = _relax(state, preset_sensors(preset_id, state.vehicle, vendors))
        _log.info("Applied preset %s (%d sensors)", preset_id, len(sensors))
        return state.model_copy(
            update={
                "meta": state.meta.model_copy(update={"preset_id": preset_id}),
                "vendors": vendors,
                "sensors": sensors,
                "selected_sensor_id": sensors[0].id if sensors else None,
            }
        )

    if isinstance(action, UpdateSensor):
        replaced = [action.sensor if s.id == action.sensor.id else s for s in state.sensors]
        return state.model_copy(update={"sensors": _relax(state, replaced)})

    if isinstance(action, SelectSensor):
        return state.model_copy(update={"selected_sensor_id": action.sensor_id})

    if isinstance(action, SetConstraints):
        next_state = state.model_copy(update={"constraints": action.constraints})
        return next_state.model_copy(update={"sensors": _relax(next_state, state.sensors)})

    if isinstance(action, SetLayers):
        return state.model_copy(update={"layers": action.layers})

    if isinstance(action, SetSettings):
        return state.model_copy(update={"settings": action.settings})

    if isinstance(action, SetScenarios):
        return state.model_copy(update={"scenarios": action.scenarios})

    if isinstance(action, SetVendors):
        rebound = apply_vendor_specs(state.sensors, action.vendors)
        return state.model_copy(update={"vendors": action.vendors, "sensors": _relax(state, rebound)})

    if isinstance(action, ImportState):
        imported = state_from_document(action.document)
        sensors = _relax(imported, imported.sensors)
        return imported.model_copy(
            update={"sensors": sensors, "selected_sensor_id": sensors[0].id if sensors else None}
        )

    if isinstance(action, SetError):
        return state.model_copy(update={"error": action.message})

    return state
