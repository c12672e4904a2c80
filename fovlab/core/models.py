from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from .geometry import Point2

SCHEMA_VERSION = "1.0.0"

SensorType = Literal["camera", "radar", "ultrasonic", "lidar"]
VehicleType = Literal["sedan", "hatchback", "suv"]

SENSOR_TYPES: tuple[str, ...] = ("camera", "radar", "ultrasonic", "lidar")


class LayoutModel(BaseModel):
    """Frozen, strictly typed base for every layout document value.

    Field names are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Vec2(LayoutModel):
    x: StrictFloat
    y: StrictFloat


class Vec3(LayoutModel):
    x: StrictFloat
    y: StrictFloat
    z: StrictFloat


class Dimensions(LayoutModel):
    length: StrictFloat = Field(gt=0)
    width: StrictFloat = Field(gt=0)
    wheelbase: StrictFloat = Field(gt=0)


class VehicleTemplate(LayoutModel):
    type: VehicleType
    dimensions: Dimensions
    footprint_polygon: List[Vec2] = Field(min_length=3)

    @property
    def polygon(self) -> List[Point2]:
        return [(p.x, p.y) for p in self.footprint_polygon]


class Orientation(LayoutModel):
    yaw_deg: StrictFloat = 0.0
    pitch_deg: StrictFloat = 0.0
    roll_deg: StrictFloat = 0.0


class SensorPose(LayoutModel):
    position: Vec3
    orientation: Orientation = Orientation()


class FieldOfView(LayoutModel):
    horizontal_deg: StrictFloat = Field(gt=0, le=360)
    vertical_deg: Optional[StrictFloat]


class Sensor(LayoutModel):
    id: StrictStr
    type: SensorType
    label: StrictStr
    spec_category: Optional[StrictStr] = None
    spec_point_rate_kpps: Optional[StrictFloat] = None
    pose: SensorPose
    fov: FieldOfView
    range_m: StrictFloat = Field(gt=0)
    enabled: StrictBool = True
    mirror_group: Optional[StrictStr] = None

    @property
    def xy(self) -> Point2:
        return (self.pose.position.x, self.pose.position.y)

    @property
    def yaw_deg(self) -> float:
        return self.pose.orientation.yaw_deg

    def with_position(self, **coords: float) -> "Sensor":
        """Copy with some of ``x``/``y``/``z`` replaced."""
        position = self.pose.position.model_copy(update=coords)
        return self.model_copy(update={"pose": self.pose.model_copy(update={"position": position})})

    def with_orientation(self, **angles: float) -> "Sensor":
        orientation = self.pose.orientation.model_copy(update=angles)
        return self.model_copy(update={"pose": self.pose.model_copy(update={"orientation": orientation})})


def apply_top_view_drag(sensor: Sensor, x: float, y: float) -> Sensor:
    return sensor.with_position(x=x, y=y)


def apply_side_view_drag(sensor: Sensor, x: float, z: float) -> Sensor:
    return sensor.with_position(x=x, z=z)


class Constraints(LayoutModel):
    boundary_clamp: StrictBool = True
    min_spacing_m: StrictFloat = Field(default=0.15, ge=0.0, le=0.5)
    mirror_placement: StrictBool = False


class Layers(LayoutModel):
    camera: StrictBool = True
    radar: StrictBool = True
    ultrasonic: StrictBool = True
    lidar: StrictBool = True
    overlap_highlight: StrictBool = True

    def is_visible(self, sensor_type: str) -> bool:
        return bool(getattr(self, sensor_type, False))


class Settings(LayoutModel):
    enable_view_editing: StrictBool = False
    performance_mode: StrictBool = False
    lidar_point_count: StrictInt = Field(default=5000, ge=0)
    coverage_sample_count: StrictInt = Field(default=2000, ge=1)
    show_coverage_heatmap: StrictBool = False

    @property
    def effective_lidar_points(self) -> int:
        if self.performance_mode:
            return min(self.lidar_point_count, 2000)
        return self.lidar_point_count

    @property
    def effective_coverage_samples(self) -> int:
        if self.performance_mode:
            return min(self.coverage_sample_count, 800)
        return self.coverage_sample_count


class PedestrianScenario(LayoutModel):
    enabled: StrictBool = False
    crossing_distance_m: StrictFloat = 20.0
    speed_mps: StrictFloat = 1.4


class IntersectionScenario(LayoutModel):
    enabled: StrictBool = False
    center_distance_m: StrictFloat = 25.0
    speed_mps: StrictFloat = 10.0


class Scenarios(LayoutModel):
    pedestrian: PedestrianScenario = PedestrianScenario()
    intersection: IntersectionScenario = IntersectionScenario()


class VendorSelection(LayoutModel):
    camera: StrictStr = "onsemi"
    radar: StrictStr = "continental"
    ultrasonic: StrictStr = "bosch"
    lidar: StrictStr = "luminar"

    def for_type(self, sensor_type: str) -> str:
        return getattr(self, sensor_type)


class Meta(LayoutModel):
    preset_id: StrictStr = ""
    created_at: StrictStr = ""
    notes: StrictStr = ""


class LayoutDocument(LayoutModel):
    """The persisted/exported layout state."""

    schema_version: StrictStr = SCHEMA_VERSION
    meta: Meta = Meta()
    vehicle: VehicleTemplate
    constraints: Constraints = Constraints()
    layers: Layers = Layers()
    settings: Settings = Settings()
    scenarios: Scenarios = Scenarios()
    vendors: VendorSelection = VendorSelection()
    sensors: List[Sensor] = Field(default_factory=list)


class LayoutState(LayoutDocument):
    """Layout document plus transient selection/error state."""

    selected_sensor_id: Optional[StrictStr] = None
    error: Optional[StrictStr] = None
