from __future__ import annotations

import argparse

import numpy as np

from envelope_calc import CLIMATES, EnvelopeError, Room, ThermalParams, calculate_envelope


def run_sweep(
    room: Room,
    base: ThermalParams,
    start_pct: float,
    stop_pct: float,
    steps: int,
):
    print("window_pct,total_w,wall_w,window_w,net_w,w_per_m2")
    for pct in np.linspace(start_pct, stop_pct, steps):
        params = ThermalParams(**{**vars(base), "window_percentage": float(pct)})
        try:
            result = calculate_envelope(room, params)
        except EnvelopeError as exc:
            print(f"{pct:.1f},error,{exc}")
            continue
        print(
            f"{pct:.1f},{result.total_heat_loss_w:.1f},{result.wall_loss_w:.1f},"
            f"{result.window_loss_w:.1f},{result.net_heating_w:.1f},{result.heat_loss_per_m2:.2f}"
        )


def main():
    parser = argparse.ArgumentParser(description="Sweep window percentage and print heat loss as CSV.")
    parser.add_argument("--length", type=float, default=5.0, help="Room length (m).")
    parser.add_argument("--width", type=float, default=4.0, help="Room width (m).")
    parser.add_argument("--height", type=float, default=2.5, help="Room height (m).")
    parser.add_argument("--start", type=float, default=0.0, help="First window percentage.")
    parser.add_argument("--stop", type=float, default=60.0, help="Last window percentage.")
    parser.add_argument("--steps", type=int, default=13)
    parser.add_argument("--climate", choices=list(CLIMATES), default="London, UK")
    parser.add_argument("--wall", default="Custom", help="Wall U-value preset name.")
    parser.add_argument("--window", default="Double Glazing", help="Window U-value preset name.")

    args = parser.parse_args()
    base = ThermalParams.from_presets(wall=args.wall, window=args.window, climate_name=args.climate)
    run_sweep(
        room=Room(length_m=args.length, width_m=args.width, height_m=args.height),
        base=base,
        start_pct=args.start,
        stop_pct=args.stop,
        steps=args.steps,
    )


if __name__ == "__main__":
    main()
