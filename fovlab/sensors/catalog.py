"""Static catalog of vendor sensor data sheets.

Values are public reference numbers, approximated; each entry records where
it came from. The engine only needs :func:`find_spec` and
:func:`vendor_options`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

_ACCESSED = "2026-01-15"


class MissingSpecError(LookupError):
    """A (type, vendor, category) triple that must exist is absent from the catalog."""


@dataclass(frozen=True)
class SpecValues:
    horizontal_fov_deg: float
    vertical_fov_deg: Optional[float]
    range_m: float
    point_rate_kpps: Optional[float] = None


@dataclass(frozen=True)
class SpecSource:
    url: str
    accessed_at: str
    note: str


@dataclass(frozen=True)
class VendorSpec:
    vendor_id: str
    vendor_name: str
    sensor_type: str
    category: str
    model_name: str
    specs: SpecValues
    source: SpecSource


def _spec(vendor_id, vendor_name, sensor_type, category, model_name, values, url, note) -> VendorSpec:
    return VendorSpec(vendor_id, vendor_name, sensor_type, category, model_name, values, SpecSource(url, _ACCESSED, note))


_MOBILEYE = "https://www.mobileye.com/"
_ONSEMI = "https://www.onsemi.com/"
_CONTINENTAL = "https://www.continental-automotive.com/"
_BOSCH = "https://www.bosch-mobility.com/"

SENSOR_SPECS: List[VendorSpec] = [
    _spec("mobileye", "Mobileye", "camera", "narrow", "EyeQ camera (narrow, ref)",
          SpecValues(45, 30, 200), _MOBILEYE, "Public references to narrow camera tiers; approximated."),
    _spec("mobileye", "Mobileye", "camera", "main", "EyeQ camera (main, ref)",
          SpecValues(80, 45, 140), _MOBILEYE, "Publicly discussed main camera FOV ranges; approximated."),
    _spec("mobileye", "Mobileye", "camera", "wide", "EyeQ camera (wide, ref)",
          SpecValues(140, 60, 100), _MOBILEYE, "Wide camera tiers publicly referenced; approximated."),
    _spec("onsemi", "onsemi", "camera", "narrow", "AR0234 module (narrow ref)",
          SpecValues(55, 35, 180), _ONSEMI, "AR-series image sensors; module-level FOV approximated."),
    _spec("onsemi", "onsemi", "camera", "main", "AR0820 module (main ref)",
          SpecValues(90, 50, 140), _ONSEMI, "AR-series image sensors; module-level FOV approximated."),
    _spec("onsemi", "onsemi", "camera", "wide", "AR0144 module (wide ref)",
          SpecValues(120, 60, 110), _ONSEMI, "AR-series image sensors; wide FOV approximated."),
    _spec("continental", "Continental", "radar", "srr", "SRR (short range)",
          SpecValues(120, 20, 50), _CONTINENTAL, "Public SRR family specs; approximated."),
    _spec("continental", "Continental", "radar", "mrr", "MRR (mid range)",
          SpecValues(60, 12, 120), _CONTINENTAL, "Public MRR family specs; approximated."),
    _spec("continental", "Continental", "radar", "lrr", "LRR (long range)",
          SpecValues(20, 6, 250), _CONTINENTAL, "Public LRR family specs; approximated."),
    _spec("bosch", "Bosch", "radar", "srr", "Bosch SRR (short range)",
          SpecValues(110, 20, 45), _BOSCH, "Public Bosch SRR references; approximated."),
    _spec("bosch", "Bosch", "radar", "mrr", "Bosch MRR (mid range)",
          SpecValues(50, 10, 130), _BOSCH, "Public Bosch mid-range radar references; approximated."),
    _spec("bosch", "Bosch", "radar", "lrr", "Bosch LRR (long range)",
          SpecValues(18, 6, 220), _BOSCH, "Public Bosch long-range radar references; approximated."),
    _spec("bosch", "Bosch", "ultrasonic", "parking", "Bosch ultrasonic (parking)",
          SpecValues(120, 60, 5), _BOSCH, "Ultrasonic parking sensors; approximated cone FOV."),
    _spec("continental", "Continental", "ultrasonic", "parking", "Continental ultrasonic (parking)",
          SpecValues(120, 60, 5.5), _CONTINENTAL, "Ultrasonic parking sensors; approximated."),
    _spec("luminar", "Luminar", "lidar", "long", "Luminar Iris (ref)",
          SpecValues(120, 30, 250, 300), "https://www.luminartech.com/", "Public LiDAR range/FOV references; approximated."),
    _spec("innoviz", "Innoviz", "lidar", "mid", "InnovizTwo (ref)",
          SpecValues(120, 40, 200, 200), "https://innoviz.tech/", "Public Innoviz references; approximated."),
]

DEFAULT_VENDOR_BY_TYPE: Dict[str, str] = {
    "camera": "onsemi",
    "radar": "continental",
    "ultrasonic": "bosch",
    "lidar": "luminar",
}

DEFAULT_CATEGORY_BY_TYPE: Dict[str, str] = {
    "camera": "main",
    "radar": "mrr",
    "ultrasonic": "parking",
    "lidar": "long",
}

_INDEX: Dict[Tuple[str, str, str], VendorSpec] = {
    (s.sensor_type, s.vendor_id, s.category.lower()): s for s in SENSOR_SPECS
}


def find_spec(sensor_type: str, vendor_id: str, category: str) -> Optional[VendorSpec]:
    """Catalog entry for the triple, matching ``category`` case-insensitively."""
    return _INDEX.get((sensor_type, vendor_id, category.lower()))


def require_spec(sensor_type: str, vendor_id: str, category: str) -> VendorSpec:
    spec = find_spec(sensor_type, vendor_id, category)
    if spec is None:
        raise MissingSpecError(
            f"No catalog entry for {sensor_type}/{vendor_id}/{category}"
        )
    return spec


def vendor_options(sensor_type: str) -> List[Tuple[str, str]]:
    """``(vendor_id, vendor_name)`` pairs offering ``sensor_type``, in catalog order."""
    seen: Dict[str, str] = {}
    for spec in SENSOR_SPECS:
        if spec.sensor_type == sensor_type and spec.vendor_id not in seen:
            seen[spec.vendor_id] = spec.vendor_name
    return list(seen.items())
