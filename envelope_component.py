from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from envelope_calc import (
    EnvelopeComputationError,
    EnvelopeConfig,
    EnvelopeValidationError,
    OPTIMISE_PROMPT,
    Room,
    ThermalParams,
    calculate_envelope,
)

logger = logging.getLogger(__name__)

_BOOL_TEXT = {"true": True, "1": True, "false": False, "0": False}


class MessageLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    REMARK = "remark"


@dataclass(frozen=True)
class RuntimeMessage:
    level: MessageLevel
    text: str


@dataclass(frozen=True)
class ParamSpec:
    name: str
    nickname: str
    description: str
    attr: Optional[str] = None
    default: Any = None
    optional: bool = False


INPUTS: Tuple[ParamSpec, ...] = (
    ParamSpec("Room", "R", "Room as a box"),
    ParamSpec("WindowPercentage", "W%", "Window area as percentage of wall area (0-100)",
              "window_percentage", 20.0),
    ParamSpec("ExternalTemp", "Te", "External temperature (°C)", "external_temp_c", 5.0),
    ParamSpec("DesiredTemp", "Ti", "Desired internal temperature (°C)", "desired_temp_c", 20.0),
    ParamSpec("WallUValue", "Uw", "Wall U-value (W/m²K) - lower is better", "u_wall_w_m2k", 0.3),
    ParamSpec("WindowUValue", "Uwi", "Window U-value (W/m²K) - lower is better",
              "u_window_w_m2k", 1.4),
    ParamSpec("RoofUValue", "Ur", "Roof U-value (W/m²K) - lower is better", "u_roof_w_m2k", 0.2),
    ParamSpec("FloorUValue", "Uf", "Floor U-value (W/m²K) - lower is better",
              "u_floor_w_m2k", 0.25),
    ParamSpec("InternalGains", "Ig", "Internal heat gains from people/equipment (Watts)",
              "internal_gains_w", 200.0),
    ParamSpec("SolarGains", "Sg", "Solar heat gains (Watts) - optional", "solar_gains_w", 0.0,
              optional=True),
    ParamSpec("TargetHeatLoss", "Th", "Target heat loss (Watts) - 0 for analysis only",
              "target_heat_loss_w", 0.0, optional=True),
    ParamSpec("Optimise", "O", "Generate optimised geometry", "optimize", False),
)

OUTPUTS: Tuple[ParamSpec, ...] = (
    ParamSpec("TotalHeatLoss", "Q", "Total heat loss through envelope (Watts)"),
    ParamSpec("NetHeating", "Qnet", "Net heating requirement (Watts)"),
    ParamSpec("WallLoss", "Qw", "Heat loss through walls (Watts)"),
    ParamSpec("WindowLoss", "Qwi", "Heat loss through windows (Watts)"),
    ParamSpec("RoofLoss", "Qr", "Heat loss through roof (Watts)"),
    ParamSpec("FloorLoss", "Qf", "Heat loss through floor (Watts)"),
    ParamSpec("SurfaceToVolume", "S/V", "Surface to volume ratio"),
    ParamSpec("HeatLossPerM2", "Q/m²", "Heat loss per square meter floor area (W/m²)"),
    ParamSpec("RecommendedWallU", "Uw*", "Recommended wall U-value for target"),
    ParamSpec("RecommendedInsulation", "t*", "Additional insulation thickness needed (mm)"),
    ParamSpec("OptimizedRoom", "R*", "Room with optimized wall thickness"),
    ParamSpec("Report", "Info", "Performance report"),
)


@dataclass
class SolveOutcome:
    outputs: Optional[Dict[str, Any]] = None
    messages: List[RuntimeMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outputs is not None

    def texts(self, level: MessageLevel) -> List[str]:
        return [m.text for m in self.messages if m.level == level]


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in _BOOL_TEXT:
        return _BOOL_TEXT[raw.strip().lower()]
    raise ValueError(f"Not a boolean: {raw!r}")


class ThermalEnvelopeComponent:
    """Ordered-parameter front end for the envelope calculator.

    Mirrors a node in a visual-programming host: inputs are bound by position or
    name with per-input defaults, failures become runtime messages, and no
    outputs are written unless the whole calculation succeeds.
    """

    name = "Thermal Envelope Optimiser"
    nickname = "ThermalOpt"
    description = "Analyses and optimises room geometry for thermal performance"
    category = "MyTools"
    subcategory = "Thermal"

    def __init__(self, config: EnvelopeConfig | None = None):
        self.config = config or EnvelopeConfig()

    def bind(self, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        if len(args) > len(INPUTS):
            raise TypeError(f"{self.nickname} takes at most {len(INPUTS)} inputs ({len(args)} given)")

        lookup = {spec.name: spec for spec in INPUTS}
        lookup.update({spec.attr: spec for spec in INPUTS if spec.attr})
        lookup["room"] = INPUTS[0]

        values: Dict[str, Any] = {spec.name: value for spec, value in zip(INPUTS, args)}
        for key, value in kwargs.items():
            spec = lookup.get(key)
            if spec is None:
                raise TypeError(f"Unknown input: {key}")
            if spec.name in values:
                raise TypeError(f"Input {spec.name} given more than once")
            values[spec.name] = value

        for spec in INPUTS:
            if values.get(spec.name) is None:
                values[spec.name] = spec.default
        return values

    def _read_params(self, values: Dict[str, Any]) -> ThermalParams:
        params = {}
        for spec in INPUTS[1:]:
            raw = values[spec.name]
            try:
                params[spec.attr] = _parse_bool(raw) if spec.attr == "optimize" else float(raw)
            except (TypeError, ValueError) as exc:
                raise EnvelopeValidationError(
                    f"Input parameter {spec.name} failed to collect data"
                ) from exc
        return ThermalParams(**params)

    def solve(self, *args: Any, **kwargs: Any) -> SolveOutcome:
        outcome = SolveOutcome()
        values = self.bind(*args, **kwargs)

        room = values["Room"]
        if room is None:
            outcome.messages.append(
                RuntimeMessage(MessageLevel.WARNING, "Input parameter Room failed to collect data")
            )
            return outcome

        try:
            params = self._read_params(values)
            result = calculate_envelope(room, params, self.config)
        except EnvelopeValidationError as exc:
            logger.error("%s rejected inputs: %s", self.nickname, exc)
            outcome.messages.append(RuntimeMessage(MessageLevel.ERROR, str(exc)))
            return outcome
        except EnvelopeComputationError as exc:
            logger.error("%s failed: %s", self.nickname, exc)
            outcome.messages.append(RuntimeMessage(MessageLevel.ERROR, str(exc)))
            return outcome
        except Exception as exc:
            logger.exception("%s failed unexpectedly", self.nickname)
            outcome.messages.append(RuntimeMessage(MessageLevel.ERROR, f"{type(exc).__name__}: {exc}"))
            return outcome

        outcome.outputs = {spec.name: value for spec, value in zip(OUTPUTS, result.outputs())}
        outcome.messages.extend(
            RuntimeMessage(MessageLevel.WARNING, text) for text in result.warnings
        )
        if params.target_heat_loss_w > 0 and not params.optimize:
            outcome.messages.append(RuntimeMessage(MessageLevel.REMARK, OPTIMISE_PROMPT))
        return outcome


def solve(room: Room | None, *args: Any, **kwargs: Any) -> SolveOutcome:
    return ThermalEnvelopeComponent().solve(room, *args, **kwargs)
