from __future__ import annotations

import argparse
import logging
import sys

from envelope_calc import CLIMATES, WALL_U_VALUES, WINDOW_U_VALUES, EnvelopeConfig, Room, ThermalParams
from envelope_component import ThermalEnvelopeComponent


def build_params(args: argparse.Namespace) -> ThermalParams:
    overrides = {
        "window_percentage": args.window_pct,
        "desired_temp_c": args.desired_temp,
        "u_roof_w_m2k": args.u_roof,
        "u_floor_w_m2k": args.u_floor,
        "internal_gains_w": args.internal_gains,
        "solar_gains_w": args.solar_gains,
        "target_heat_loss_w": args.target,
        "optimize": args.optimize,
    }
    if args.external_temp is not None:
        overrides["external_temp_c"] = args.external_temp
    if args.u_wall is not None:
        overrides["u_wall_w_m2k"] = args.u_wall
    if args.u_window is not None:
        overrides["u_window_w_m2k"] = args.u_window
    return ThermalParams.from_presets(
        wall=args.wall,
        window=args.window,
        climate_name=args.climate,
        season=args.season,
        **overrides,
    )


def main():
    parser = argparse.ArgumentParser(description="Steady-state heat loss report for a box room.")
    parser.add_argument("--length", type=float, default=5.0, help="Room length (m).")
    parser.add_argument("--width", type=float, default=4.0, help="Room width (m).")
    parser.add_argument("--height", type=float, default=2.5, help="Room height (m).")
    parser.add_argument("--window-pct", type=float, default=20.0, help="Window share of wall area (%%).")
    parser.add_argument("--climate", choices=list(CLIMATES), default=None)
    parser.add_argument("--season", choices=["winter", "summer"], default="winter")
    parser.add_argument("--external-temp", type=float, default=None, help="Overrides --climate (C).")
    parser.add_argument("--desired-temp", type=float, default=20.0, help="Internal setpoint (C).")
    parser.add_argument("--wall", choices=list(WALL_U_VALUES), default="Custom")
    parser.add_argument("--window", choices=list(WINDOW_U_VALUES), default="Custom")
    parser.add_argument("--u-wall", type=float, default=None, help="Overrides --wall (W/m2K).")
    parser.add_argument("--u-window", type=float, default=None, help="Overrides --window (W/m2K).")
    parser.add_argument("--u-roof", type=float, default=0.2)
    parser.add_argument("--u-floor", type=float, default=0.25)
    parser.add_argument("--internal-gains", type=float, default=200.0, help="Watts.")
    parser.add_argument("--solar-gains", type=float, default=0.0, help="Watts.")
    parser.add_argument("--target", type=float, default=0.0, help="Target heat loss (W), 0 = analysis only.")
    parser.add_argument("--optimize", action="store_true")
    parser.add_argument("--vertical-offset", choices=["top", "both"], default="top")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s | %(message)s",
    )

    params = build_params(args)
    room = Room(length_m=args.length, width_m=args.width, height_m=args.height)

    component = ThermalEnvelopeComponent(EnvelopeConfig(vertical_offset=args.vertical_offset))
    outcome = component.solve(room, **vars(params))

    for message in outcome.messages:
        print(f"[{message.level.value}] {message.text}", file=sys.stderr)
    if not outcome.ok:
        sys.exit(1)

    print(outcome.outputs["Report"])
    optimized = outcome.outputs["OptimizedRoom"]
    if optimized is not room:
        print(
            f"Optimized room: {optimized.length_m:.3f}m x {optimized.width_m:.3f}m "
            f"x {optimized.height_m:.3f}m"
        )


if __name__ == "__main__":
    main()
