"""fovlab – vehicle sensor layout engine.

This package contains the layout engine components:
- Geometry kernel (core.geometry): point-in-polygon, clamping, wedge triangles,
  convex intersection area
- Layout data model (core.models) and the action reducer (core.state)
- Constraint solver (core.constraints): boundary clamp, min spacing, mirroring
- Coverage sampler (core.coverage) and overlap detector (core.overlap)
- Scenario evaluator (core.scenarios)
- Preset assembler and vendor catalog (sensors.presets, sensors.catalog)
- Deterministic lidar point clouds (sensors.lidar) and LAS/LAZ/PLY/NPZ writers
  (core.exporter)
- Versioned JSON import/export (core.serialization)
"""

from .core.geometry import (
    point_in_polygon, clamp_point_to_polygon, wedge_triangle, intersection_area_convex,
)
from .core.models import (
    SCHEMA_VERSION, Sensor, VehicleTemplate, Constraints, Layers, Settings,
    Scenarios, VendorSelection, LayoutDocument, LayoutState,
)
from .core.constraints import enforce_constraints
from .core.coverage import CoverageResult, compute_coverage
from .core.overlap import Overlap, detect_overlaps
from .core.scenarios import is_point_in_sensor_volume, scenario_status
from .core.pointcloud import PointBatch
from .core.exporter import LasWriter, PlyWriter, NpzWriter
from .core.serialization import ImportResult, export_state, import_state
from .core.state import create_initial_state, reduce
from .sensors.catalog import MissingSpecError, find_spec, vendor_options
from .sensors.presets import preset_sensors, preset_vendors
from .sensors.lidar import generate_lidar_points
