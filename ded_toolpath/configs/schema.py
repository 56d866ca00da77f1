"""Build file schema (``build.v1``) validated with pydantic.

A build file fully describes one toolpath: the base layer geometry, how
layers are stacked, where the G-code goes and how the run is logged.

Units:
    - Geometry: millimeters (mm)
    - Axes: direction vectors, any non-zero length

Example::

    schema: build.v1
    layer:
      pattern: zigzag
      beam_width_mm: 6.0
      side_length_mm: 24.0
      origin_mm: [13.0, 37.5, 0.0]
      main_axis: [1.0, 0.0, 0.0]
      line_axis: [0.0, 1.0, 0.0]
    build:
      n_layers: 5
      layer_height_mm: 2.0
      axis_swap: alternate
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ded_toolpath.errors import ConfigurationError
from ded_toolpath.patterns.assembler import AxisSwapRule, BuildPlan
from ded_toolpath.patterns.generator import LayerSpec, PatternType

Vec3 = Tuple[float, float, float]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LayerSection(BaseModel):
    """Base layer geometry."""
    model_config = ConfigDict(extra="forbid")

    pattern: PatternType = Field(PatternType.ZIGZAG, description="zigzag or raster")
    beam_width_mm: float = Field(..., gt=0, description="Spacing between weld lines (mm)")
    side_length_mm: float = Field(..., gt=0, description="Side of the square region (mm)")
    origin_mm: Vec3 = Field((0.0, 0.0, 0.0), description="Layer reference corner (mm)")
    main_axis: Vec3 = Field((1.0, 0.0, 0.0), description="Weld line travel direction")
    line_axis: Vec3 = Field((0.0, 1.0, 0.0), description="Line-to-line offset direction")

    @field_validator('pattern', mode='before')
    @classmethod
    def validate_pattern(cls, v: Any) -> PatternType:
        return PatternType.parse(v)

    @model_validator(mode='after')
    def validate_geometry(self) -> 'LayerSection':
        # Divisibility and non-zero axes are checked by LayerSpec itself
        self.to_spec()
        return self

    def to_spec(self) -> LayerSpec:
        return LayerSpec(
            pattern=self.pattern,
            beam_width=self.beam_width_mm,
            side_length=self.side_length_mm,
            origin=self.origin_mm,
            main_axis=self.main_axis,
            line_axis=self.line_axis,
        )


class BuildSection(BaseModel):
    """Layer stacking."""
    model_config = ConfigDict(extra="forbid")

    n_layers: int = Field(1, ge=1, description="Number of layers")
    layer_height_mm: float = Field(0.0, description="Z increment per layer (mm)")
    axis_swap: AxisSwapRule = Field(AxisSwapRule.NONE, description="none or alternate")
    start_line_index: int = Field(0, description="Index preceding the first weld line; may be negative")
    pattern_sequence: Optional[List[PatternType]] = Field(
        None, description="Patterns cycled per layer (overrides layer.pattern)"
    )

    @field_validator('axis_swap', mode='before')
    @classmethod
    def validate_axis_swap(cls, v: Any) -> AxisSwapRule:
        return AxisSwapRule.parse(v)

    @field_validator('pattern_sequence', mode='before')
    @classmethod
    def validate_pattern_sequence(cls, v: Any) -> Optional[List[PatternType]]:
        if v is None:
            return None
        if isinstance(v, str) or not v:
            raise ValueError("pattern_sequence must be a non-empty list of pattern names")
        return [PatternType.parse(p) for p in v]


class OutputSection(BaseModel):
    """G-code output."""
    model_config = ConfigDict(extra="forbid")

    origin_shift_mm: Vec3 = Field((0.0, 0.0, 0.0), description="Added to every X/Y/Z (mm)")
    gcode_path: str = Field("generated_gcode.txt", description="Output file path")
    header: bool = Field(True, description="Emit comment header/footer")
    annotate: bool = Field(True, description="Annotate rapid moves with the weld line index")


class LoggingSection(BaseModel):
    """Keyword arguments for ``setup_logging``."""
    model_config = ConfigDict(extra="forbid")

    log_level: str = Field("INFO", description="Root log level")
    log_file: Optional[str] = Field(None, description="Optional log file path")
    json_format: bool = Field(False, description="JSON lines in the log file")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(_LOG_LEVELS)}, got '{v}'")
        return level


class BuildConfig(BaseModel):
    """Build file schema v1."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_version: str = Field("build.v1", alias="schema", description="Schema version")
    layer: LayerSection
    build: BuildSection = Field(default_factory=BuildSection)
    output: OutputSection = Field(default_factory=OutputSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "build.v1":
            raise ValueError(f"Expected schema 'build.v1', got '{v}'")
        return v

    def to_plan(self) -> BuildPlan:
        """Convert to the runtime :class:`BuildPlan`."""
        return BuildPlan(
            layer=self.layer.to_spec(),
            n_layers=self.build.n_layers,
            layer_height=self.build.layer_height_mm,
            swap_rule=self.build.axis_swap,
            start_line_index=self.build.start_line_index,
            pattern_sequence=(
                tuple(self.build.pattern_sequence)
                if self.build.pattern_sequence is not None else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain YAML-ready mapping (enum values as strings)."""
        return self.model_dump(by_alias=True, mode="json")

    def with_overrides(self, **sections: Dict[str, Any]) -> 'BuildConfig':
        """Return a re-validated copy with per-section field overrides.

        Examples
        --------
        >>> cfg.with_overrides(build={"n_layers": 2}, output={"header": False})
        """
        data = self.to_dict()
        for section, values in sections.items():
            if section not in data or not isinstance(data[section], dict):
                raise ConfigurationError(f"Unknown configuration section: {section}")
            data[section].update(values)
        return validate_build_config(data)


def validate_build_config(data: Dict[str, Any], source: str = "<dict>") -> BuildConfig:
    """Validate a raw mapping against :class:`BuildConfig`.

    Raises
    ------
    ConfigurationError
        With the pydantic error report if validation fails.
    """
    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Build configuration validation failed at {source}: {e}") from e
