"""Pydantic schemas for network infrastructure and derived geospatial data."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# (latitude, longitude) in decimal degrees
LatLng = tuple[float, float]


def _ids_or_empty(ids: list[int] | None) -> list[int]:
    """Treat an explicit null ID list as empty; the API sends null for unset collections."""
    return [] if ids is None else ids


class ApiModel(BaseModel):
    """Base for records read from the network API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ==================== Source Records ====================


class CodeReference(ApiModel):
    """Nested reference to a coded lookup record (operational status, product)."""

    id: int | None = None
    code: str | None = None
    designation_fr: str | None = None
    designation_en: str | None = None


class PipelineSystemReference(ApiModel):
    """Pipeline system a pipeline belongs to; carries the transported product."""

    id: int | None = None
    code: str | None = None
    name: str | None = None
    product: CodeReference | None = None


class GeoLocation(ApiModel):
    """Nested location of a point entity (station, terminal, production field)."""

    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None


class InfrastructureEntity(ApiModel):
    """Common fields of every infrastructure record the map displays."""

    id: int | None = None
    code: str | None = None
    name: str | None = None
    operational_status: CodeReference | None = None
    location: GeoLocation | None = None

    @property
    def status_code(self) -> str | None:
        """Operational status code, if the record carries one."""
        return self.operational_status.code if self.operational_status else None


class Station(InfrastructureEntity):
    """Pumping or compression station."""


class Terminal(InfrastructureEntity):
    """Storage/dispatch terminal; pipelines depart from and arrive at terminals."""


class ProductionField(InfrastructureEntity):
    """Hydrocarbon production field."""


class Pipeline(InfrastructureEntity):
    """Pipeline record.

    Geographic path data lives either on child segments (current schema) or
    directly on the pipeline as coordinate/location ID lists (legacy schema).
    """

    departure_terminal_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("departureTerminalId", "departureFacilityId", "departure_terminal_id"),
    )
    arrival_terminal_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("arrivalTerminalId", "arrivalFacilityId", "arrival_terminal_id"),
    )
    nominal_diameter: float | None = None  # inches
    length: float | None = None  # km
    product: CodeReference | None = None
    pipeline_system: PipelineSystemReference | None = None
    coordinate_ids: list[int] = Field(default_factory=list)
    location_ids: list[int] = Field(default_factory=list)

    @field_validator("coordinate_ids", "location_ids", mode="before")
    @classmethod
    def validate_id_lists(cls, ids: list[int] | None) -> list[int]:
        """Accept null ID lists using shared helper."""
        return _ids_or_empty(ids)

    @property
    def product_code(self) -> str | None:
        """Product code from the pipeline itself, falling back to its pipeline system."""
        if self.product and self.product.code:
            return self.product.code
        if self.pipeline_system and self.pipeline_system.product:
            return self.pipeline_system.product.code
        return None


class PipelineSegment(ApiModel):
    """Segment of a pipeline; its position along the line is start_point (km)."""

    id: int | None = None
    code: str | None = None
    name: str | None = None
    start_point: float | None = None
    end_point: float | None = None
    coordinate_ids: list[int] = Field(default_factory=list)

    @field_validator("coordinate_ids", mode="before")
    @classmethod
    def validate_coordinate_ids(cls, ids: list[int] | None) -> list[int]:
        """Accept a null coordinate list using shared helper."""
        return _ids_or_empty(ids)


class ReferencePoint(ApiModel):
    """Coordinate or location record fetched by ID."""

    id: int
    latitude: float
    longitude: float
    altitude: float | None = None
    sequence: int | None = None

    @property
    def lat_lng(self) -> LatLng:
        return (self.latitude, self.longitude)


# ==================== Derived Data ====================


class GeoPath(BaseModel):
    """Ordered (lat, lng) path owned by a pipeline.

    Either empty or at least two points, each within valid coordinate ranges.
    """

    model_config = ConfigDict(frozen=True)

    owner_id: int
    points: tuple[LatLng, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.points


class PipelineGeoData(BaseModel):
    """A pipeline together with its resolved reference points and path."""

    model_config = ConfigDict(frozen=True)

    pipeline: Pipeline
    locations: tuple[ReferencePoint, ...] = ()
    path: GeoPath

    @property
    def coordinates(self) -> tuple[LatLng, ...]:
        return self.path.points


class CurveOffsetAssignment(BaseModel):
    """Perpendicular control-point offset given to one member of a route group."""

    model_config = ConfigDict(frozen=True)

    path_id: int
    offset: float


class StyleAttributes(BaseModel):
    """Presentation attributes for a polyline or marker."""

    model_config = ConfigDict(frozen=True)

    color: str = Field(..., description="CSS hex color (e.g., '#FFD700')")
    weight: float = 3
    opacity: float = 0.8
    dash_pattern: str | None = Field(None, description="SVG dash array (e.g., '10, 6'); None for solid lines")


class MapBounds(BaseModel):
    """Rectangular lat/lng region (inclusive edges)."""

    model_config = ConfigDict(frozen=True)

    north: float = Field(..., ge=-90, le=90)
    south: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)
    west: float = Field(..., ge=-180, le=180)


class InfrastructureData(BaseModel):
    """Full aggregated dataset handed to the presentation layer."""

    stations: list[Station] = Field(default_factory=list)
    terminals: list[Terminal] = Field(default_factory=list)
    production_fields: list[ProductionField] = Field(default_factory=list)
    pipelines: list[PipelineGeoData] = Field(default_factory=list)


class PipelineFilters(BaseModel):
    """User-selected attribute filters for the pipeline layer."""

    products: list[str] = Field(default_factory=list, description="Product codes to keep; empty keeps all")
    statuses: list[str] = Field(default_factory=list, description="Status codes to keep; empty keeps all")
    search_code: str = Field("", description="Case-insensitive substring matched against code or name")
