from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import List, Literal, Mapping, NamedTuple, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Vector = Tuple[float, float, float]
Season = Literal["winter", "summer"]
VerticalOffset = Literal["top", "both"]


class ClimatePreset(NamedTuple):
    winter_c: float
    summer_c: float


WALL_U_VALUES: Mapping[str, float] = MappingProxyType(
    {
        "Uninsulated Brick (200mm)": 2.0,
        "Basic Insulation (100mm)": 0.35,
        "Double Insulation (200mm)": 0.20,
        "Passivhaus Standard (300mm)": 0.15,
        "Custom": 0.3,
    }
)

WINDOW_U_VALUES: Mapping[str, float] = MappingProxyType(
    {
        "Single Glazing": 5.0,
        "Double Glazing": 1.4,
        "Triple Glazing": 0.8,
        "Custom": 1.4,
    }
)

CLIMATES: Mapping[str, ClimatePreset] = MappingProxyType(
    {
        "London, UK": ClimatePreset(5.0, 22.0),
        "Oslo, Norway": ClimatePreset(-5.0, 18.0),
        "Barcelona, Spain": ClimatePreset(10.0, 28.0),
        "New York, USA": ClimatePreset(-2.0, 25.0),
        "Sydney, Australia": ClimatePreset(12.0, 26.0),
        "Custom": ClimatePreset(5.0, 22.0),
    }
)

TARGET_TOO_LOW_WARNING = (
    "Target heat loss is too low - even perfect insulation cannot achieve this. "
    "Reduce windows or target."
)
COOLING_WARNING = "Gains exceed losses - cooling may be needed"
HIGH_LOSS_WARNING = "High heat loss per m² - consider better insulation"
OPTIMISE_PROMPT = "Set 'Optimise' to True to generate optimised geometry"


class EnvelopeError(Exception):
    """Base class for envelope calculation failures."""


class EnvelopeValidationError(EnvelopeError, ValueError):
    """Inputs rejected before any computation took place."""


class EnvelopeComputationError(EnvelopeError, RuntimeError):
    """Arithmetic fault raised while computing a validated envelope."""


def _lookup(table: Mapping, name: str, kind: str):
    try:
        return table[name]
    except KeyError:
        choices = ", ".join(table)
        raise ValueError(f"Unknown {kind} preset: {name!r} (expected one of: {choices})") from None


def wall_u_value(name: str) -> float:
    return _lookup(WALL_U_VALUES, name, "wall")


def window_u_value(name: str) -> float:
    return _lookup(WINDOW_U_VALUES, name, "window")


def climate(name: str) -> ClimatePreset:
    return _lookup(CLIMATES, name, "climate")


@dataclass(frozen=True)
class Room:
    """Box-shaped room: edge lengths along a reference plane, placed by its centre."""

    length_m: float
    width_m: float
    height_m: float
    center: Vector = (0.0, 0.0, 0.0)
    x_axis: Vector = (1.0, 0.0, 0.0)
    y_axis: Vector = (0.0, 1.0, 0.0)

    @property
    def floor_area_m2(self) -> float:
        return self.length_m * self.width_m

    @property
    def roof_area_m2(self) -> float:
        # Flat roof: same footprint as the floor.
        return self.length_m * self.width_m

    @property
    def wall_area_m2(self) -> float:
        return 2.0 * (self.length_m + self.width_m) * self.height_m

    @property
    def volume_m3(self) -> float:
        return self.length_m * self.width_m * self.height_m

    @property
    def is_valid(self) -> bool:
        try:
            dims = np.array([float(d) for d in (self.length_m, self.width_m, self.height_m)])
            center = np.asarray(self.center, dtype=float)
            normal = np.cross(
                np.asarray(self.x_axis, dtype=float),
                np.asarray(self.y_axis, dtype=float),
            )
        except (TypeError, ValueError):
            return False
        if not np.all(np.isfinite(dims)) or np.any(dims <= 0.0):
            return False
        if center.shape != (3,) or not np.all(np.isfinite(center)):
            return False
        return bool(np.linalg.norm(normal) > 1e-12)

    def frame(self) -> np.ndarray:
        """Orthonormal plane axes as rows (x, y, z)."""
        x = np.asarray(self.x_axis, dtype=float)
        x = x / np.linalg.norm(x)
        y = np.asarray(self.y_axis, dtype=float)
        y = y - np.dot(y, x) * x
        y = y / np.linalg.norm(y)
        return np.vstack([x, y, np.cross(x, y)])

    def corners(self) -> np.ndarray:
        half = 0.5 * np.array([self.length_m, self.width_m, self.height_m])
        signs = np.array(
            [[sx, sy, sz] for sz in (-1.0, 1.0) for sy in (-1.0, 1.0) for sx in (-1.0, 1.0)]
        )
        return np.asarray(self.center, dtype=float) + (signs * half) @ self.frame()

    def offset(self, horizontal_m: float, top_m: float = 0.0, bottom_m: float = 0.0) -> Room:
        z_axis = self.frame()[2]
        shift = 0.5 * (top_m - bottom_m) * z_axis
        center = np.asarray(self.center, dtype=float) + shift
        return Room(
            length_m=self.length_m + 2.0 * horizontal_m,
            width_m=self.width_m + 2.0 * horizontal_m,
            height_m=self.height_m + top_m + bottom_m,
            center=tuple(float(c) for c in center),
            x_axis=self.x_axis,
            y_axis=self.y_axis,
        )


@dataclass
class ThermalParams:
    window_percentage: float = 20.0
    external_temp_c: float = 5.0
    desired_temp_c: float = 20.0

    u_wall_w_m2k: float = 0.3
    u_window_w_m2k: float = 1.4
    u_roof_w_m2k: float = 0.2
    u_floor_w_m2k: float = 0.25

    internal_gains_w: float = 200.0
    solar_gains_w: float = 0.0

    # 0 means analysis only.
    target_heat_loss_w: float = 0.0
    optimize: bool = False

    @classmethod
    def from_presets(
        cls,
        wall: str = "Custom",
        window: str = "Custom",
        climate_name: Optional[str] = None,
        season: Season = "winter",
        **overrides,
    ) -> ThermalParams:
        values = {
            "u_wall_w_m2k": wall_u_value(wall),
            "u_window_w_m2k": window_u_value(window),
        }
        if climate_name is not None:
            preset = climate(climate_name)
            if season == "winter":
                values["external_temp_c"] = preset.winter_c
            elif season == "summer":
                values["external_temp_c"] = preset.summer_c
            else:
                raise ValueError(f"Unknown season: {season}")
        values.update(overrides)
        return cls(**values)


@dataclass
class EnvelopeConfig:
    insulation_conductivity_w_mk: float = 0.035
    high_loss_threshold_w_m2: float = 100.0
    # "top" grows the box upwards only; "both" also lowers the floor face.
    vertical_offset: VerticalOffset = "top"

    def __post_init__(self) -> None:
        if self.vertical_offset not in ("top", "both"):
            raise ValueError(f"Unknown vertical offset mode: {self.vertical_offset}")


@dataclass(frozen=True)
class EnvelopeResult:
    room: Room
    floor_area_m2: float
    wall_area_m2: float
    roof_area_m2: float
    window_area_m2: float
    opaque_wall_area_m2: float
    volume_m3: float
    surface_to_volume: float
    temp_diff_k: float

    wall_loss_w: float
    window_loss_w: float
    roof_loss_w: float
    floor_loss_w: float
    total_heat_loss_w: float
    net_heating_w: float
    heat_loss_per_m2: float

    recommended_wall_u: float
    additional_insulation_mm: float
    optimized_room: Room
    report: str = ""
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def outputs(self) -> tuple:
        return (
            self.total_heat_loss_w,
            self.net_heating_w,
            self.wall_loss_w,
            self.window_loss_w,
            self.roof_loss_w,
            self.floor_loss_w,
            self.surface_to_volume,
            self.heat_loss_per_m2,
            self.recommended_wall_u,
            self.additional_insulation_mm,
            self.optimized_room,
            self.report,
        )


@dataclass
class _Optimization:
    recommended_wall_u: float
    additional_insulation_mm: float
    optimized_room: Room


def validate_inputs(room: Room, params: ThermalParams) -> None:
    try:
        pct = float(params.window_percentage)
    except (TypeError, ValueError):
        pct = float("nan")
    if not 0.0 <= pct <= 100.0:
        raise EnvelopeValidationError("Window percentage must be between 0 and 100")
    if not isinstance(room, Room) or not room.is_valid:
        raise EnvelopeValidationError("Invalid room geometry")


def _optimize_walls(
    room: Room,
    params: ThermalParams,
    config: EnvelopeConfig,
    opaque_wall_area_m2: float,
    temp_diff_k: float,
    other_losses_w: float,
    warnings: List[str],
) -> _Optimization:
    target_wall_loss = params.target_heat_loss_w - other_losses_w
    if target_wall_loss <= 0.0:
        warnings.append(TARGET_TOO_LOW_WARNING)
        return _Optimization(params.u_wall_w_m2k, 0.0, room)

    recommended_u = target_wall_loss / (opaque_wall_area_m2 * temp_diff_k)

    # Series resistances add: R_total = R_current + R_added.
    current_r = 1.0 / params.u_wall_w_m2k
    target_r = 1.0 / recommended_u
    additional_r = target_r - current_r
    if additional_r <= 0.0:
        return _Optimization(recommended_u, 0.0, room)

    insulation_mm = additional_r * config.insulation_conductivity_w_mk * 1000.0
    offset_m = insulation_mm / 1000.0
    bottom_m = offset_m if config.vertical_offset == "both" else 0.0
    optimized = room.offset(offset_m, top_m=offset_m, bottom_m=bottom_m)
    return _Optimization(recommended_u, insulation_mm, optimized)


def _share(part: float, total: float) -> float:
    return part / total * 100.0 if total else 0.0


def format_report(result: EnvelopeResult, params: ThermalParams) -> str:
    room = result.room
    total = result.total_heat_loss_w
    lines = [
        "=== THERMAL PERFORMANCE ANALYSIS ===",
        "",
        "GEOMETRY:",
        f"  Dimensions: {room.length_m:.2f}m × {room.width_m:.2f}m × {room.height_m:.2f}m",
        f"  Floor area: {result.floor_area_m2:.2f} m²",
        f"  Volume: {result.volume_m3:.2f} m³",
        f"  Surface/Volume ratio: {result.surface_to_volume:.3f}",
        "",
        "HEAT LOSS BREAKDOWN:",
    ]
    for label, loss in (
        ("Walls", result.wall_loss_w),
        ("Windows", result.window_loss_w),
        ("Roof", result.roof_loss_w),
        ("Floor", result.floor_loss_w),
    ):
        lines.append(f"  {label}: {loss:.0f} W ({_share(loss, total):.1f}%)")
    lines.append(f"  TOTAL: {total:.0f} W")
    lines.append("")

    if params.target_heat_loss_w > 0 and params.optimize:
        lines += [
            "OPTIMIZATION:",
            f"  Target heat loss: {params.target_heat_loss_w:.0f} W",
            f"  Current wall U-value: {params.u_wall_w_m2k:.3f} W/m²K",
            f"  Required wall U-value: {result.recommended_wall_u:.3f} W/m²K",
            f"  Additional insulation: {result.additional_insulation_mm:.0f} mm",
        ]
        if result.recommended_wall_u < params.u_wall_w_m2k:
            savings = (total - params.target_heat_loss_w) / total * 100.0
            lines.append(f"  Heat loss reduction: {savings:.1f}%")
        lines.append("")
    elif params.target_heat_loss_w > 0:
        lines += [OPTIMISE_PROMPT, ""]

    return "\n".join(lines)


def _compute(room: Room, params: ThermalParams, config: EnvelopeConfig) -> EnvelopeResult:
    warnings: List[str] = []

    floor_area = room.floor_area_m2
    roof_area = room.roof_area_m2
    wall_area = room.wall_area_m2
    window_area = wall_area * (params.window_percentage / 100.0)
    opaque_area = wall_area - window_area
    volume = room.volume_m3
    surface_to_volume = (wall_area + roof_area + floor_area) / volume

    # Flow direction is not modelled.
    temp_diff = abs(params.desired_temp_c - params.external_temp_c)

    wall_loss = opaque_area * params.u_wall_w_m2k * temp_diff
    window_loss = window_area * params.u_window_w_m2k * temp_diff
    roof_loss = roof_area * params.u_roof_w_m2k * temp_diff
    floor_loss = floor_area * params.u_floor_w_m2k * temp_diff
    total = wall_loss + window_loss + roof_loss + floor_loss

    net_heating = total - (params.internal_gains_w + params.solar_gains_w)
    loss_per_m2 = total / floor_area

    if params.target_heat_loss_w > 0 and params.optimize:
        opt = _optimize_walls(
            room,
            params,
            config,
            opaque_area,
            temp_diff,
            window_loss + roof_loss + floor_loss,
            warnings,
        )
    else:
        opt = _Optimization(params.u_wall_w_m2k, 0.0, room)

    if net_heating < 0:
        warnings.append(COOLING_WARNING)
    if loss_per_m2 > config.high_loss_threshold_w_m2:
        warnings.append(HIGH_LOSS_WARNING)

    result = EnvelopeResult(
        room=room,
        floor_area_m2=floor_area,
        wall_area_m2=wall_area,
        roof_area_m2=roof_area,
        window_area_m2=window_area,
        opaque_wall_area_m2=opaque_area,
        volume_m3=volume,
        surface_to_volume=surface_to_volume,
        temp_diff_k=temp_diff,
        wall_loss_w=wall_loss,
        window_loss_w=window_loss,
        roof_loss_w=roof_loss,
        floor_loss_w=floor_loss,
        total_heat_loss_w=total,
        net_heating_w=net_heating,
        heat_loss_per_m2=loss_per_m2,
        recommended_wall_u=opt.recommended_wall_u,
        additional_insulation_mm=opt.additional_insulation_mm,
        optimized_room=opt.optimized_room,
        warnings=tuple(warnings),
    )
    return replace(result, report=format_report(result, params))


def calculate_envelope(
    room: Room,
    params: ThermalParams | None = None,
    config: EnvelopeConfig | None = None,
) -> EnvelopeResult:
    """Steady-state heat loss through a box room, with optional wall insulation sizing.

    Raises EnvelopeValidationError for rejected inputs and EnvelopeComputationError
    for arithmetic faults; never returns a partial result.
    """
    params = params or ThermalParams()
    config = config or EnvelopeConfig()
    validate_inputs(room, params)

    try:
        result = _compute(room, params, config)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise EnvelopeComputationError(str(exc)) from exc

    for message in result.warnings:
        logger.warning(message)
    logger.debug(
        "envelope total=%.1fW net=%.1fW per_m2=%.2fW/m2 insulation=%.1fmm",
        result.total_heat_loss_w,
        result.net_heating_w,
        result.heat_loss_per_m2,
        result.additional_insulation_mm,
    )
    return result
