from __future__ import annotations

from typing import List, Sequence

from ..core.models import FieldOfView, Sensor, VendorSelection
from .catalog import DEFAULT_CATEGORY_BY_TYPE, VendorSpec, find_spec


def bind_spec(sensor: Sensor, spec: VendorSpec, category: str) -> Sensor:
    values = spec.specs
    return sensor.model_copy(
        update={
            "spec_category": category,
            "spec_point_rate_kpps": None if values.point_rate_kpps is None else float(values.point_rate_kpps),
            "fov": FieldOfView(
                horizontal_deg=float(values.horizontal_fov_deg),
                vertical_deg=None if values.vertical_fov_deg is None else float(values.vertical_fov_deg),
            ),
            "range_m": float(values.range_m),
        }
    )


def apply_vendor_specs(sensors: Sequence[Sensor], vendors: VendorSelection) -> List[Sensor]:
    """Re-resolve numeric specs for the selected vendors.

    Each sensor keeps its ``spec_category`` (or the type default); sensors
    whose category/vendor pair is not in the catalog are returned unchanged.
    """
    out: List[Sensor] = []
    for sensor in sensors:
        category = sensor.spec_category or DEFAULT_CATEGORY_BY_TYPE[sensor.type]
        spec = find_spec(sensor.type, vendors.for_type(sensor.type), category)
        out.append(sensor if spec is None else bind_spec(sensor, spec, category))
    return out
