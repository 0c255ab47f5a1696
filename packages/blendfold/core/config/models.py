"""Configuration models for Blendfold."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Parameters driven by the avatar runtime itself; layers keyed on these
# cannot be flattened because nothing external sets them.
DEFAULT_BUILTIN_PARAMETERS: tuple[str, ...] = (
    "IsLocal",
    "Viseme",
    "GestureLeft",
    "GestureRight",
    "GestureLeftWeight",
    "GestureRightWeight",
    "AngularY",
    "VelocityX",
    "VelocityY",
    "VelocityZ",
    "Upright",
    "Grounded",
    "Seated",
    "AFK",
    "TrackingType",
    "LocomotionMode",
    "VRMode",
    "MuteSelf",
    "InStation",
)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit structured JSON log lines")


class OptimizerConfig(BaseModel):
    """Layer classification and master tree settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    weight_parameter: str = Field(
        default="Blendfold/One", description="Always-1.0 float parameter weighting every branch"
    )
    master_layer_name: str = Field(
        default="Blendfold/MasterTree", description="Name of the layer holding the master tree"
    )
    master_identifier: str = Field(
        default="Blendfold_MasterTree",
        description="Name of the muted exit any-state transition marking the master layer",
    )
    master_state_name: str = "Master BlendTree (WD On)"
    placeholder_clip_name: str = Field(
        default="Empty Clip", description="Name of the no-op clip filling empty motion slots"
    )
    builtin_parameters: tuple[str, ...] = DEFAULT_BUILTIN_PARAMETERS
    gating_prefixes: tuple[str, ...] = Field(
        default=("isloaded", "hasloaded"),
        description="Case-insensitive prefixes of auxiliary load-gating parameters",
    )


class SpeedConfig(BaseModel):
    """Speed synchronization solver settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tolerance: float = Field(default=1e-7, gt=0.0, description="Convergence threshold (L1)")
    max_iterations: int = Field(default=10_000, gt=0)


class AnalysisConfig(BaseModel):
    """Motion analysis settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    constancy_tolerance: float = Field(
        default=1e-6, ge=0.0, description="Max deviation from the first key still counted as equal"
    )


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    speed: SpeedConfig = Field(default_factory=SpeedConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
