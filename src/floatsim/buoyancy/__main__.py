#!/usr/bin/env python3
"""
Buoyancy simulation runner - steps a scenario and writes its history.

Builds the pool and bodies described by a scenario JSON file, runs the
fixed-step simulation (engine step, containment, liquid heights, boat
fill/spill, forces) and writes periodic snapshots plus the final state.

Usage:
    python -m floatsim.buoyancy \
        --scenario scenarios/boat_sink.json \
        --materials scenarios/materials.json \
        --steps 720 \
        --output artifact/boat_sink.buoyancy.json
"""

import sys
import os
import json
import logging
import argparse

from floatsim.model.material import load_materials
from floatsim.scenario import (build_model, load_scenario, run_scenario,
                               DEFAULT_DT, DEFAULT_RECORD_EVERY, DEFAULT_STEPS)


def main():
    parser = argparse.ArgumentParser(
        description='Run a fluid buoyancy simulation scenario',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--scenario', required=True,
                        help='Path to scenario JSON file')
    parser.add_argument('--output', required=True,
                        help='Path to output JSON file')
    parser.add_argument('--materials',
                        help='Path to materials JSON file (extra solids and fluids)')
    parser.add_argument('--steps', type=int, default=DEFAULT_STEPS,
                        help=f'Number of simulation steps (default: {DEFAULT_STEPS})')
    parser.add_argument('--dt', type=float, default=DEFAULT_DT,
                        help=f'Step length in seconds (default: {DEFAULT_DT:.5f})')
    parser.add_argument('--record-every', type=int, default=DEFAULT_RECORD_EVERY,
                        help=f'Snapshot interval in steps, 0 for none (default: {DEFAULT_RECORD_EVERY})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress output')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not os.path.exists(args.scenario):
        print(f"ERROR: Scenario file not found: {args.scenario}", file=sys.stderr)
        sys.exit(1)

    verbose = not args.quiet

    if verbose:
        print(f"Running buoyancy scenario: {args.scenario}")

    try:
        if args.materials:
            loaded = load_materials(args.materials)
            if verbose:
                print(f"  Materials: {', '.join(loaded)}")
        scenario = load_scenario(args.scenario)
        model = build_model(scenario)
        if verbose:
            print(f"  Bodies: {', '.join(mass.name for mass in model.masses)}")
            print(f"  Pool: {model.pool.liquid_volume * 1000:.2f} L of {model.pool.fluid.name}, "
                  f"g = {model.gravity.value:.2f} m/s²")
            print(f"  Stepping {args.steps} x {args.dt:.5f} s...")
        result = run_scenario(model, scenario, steps=args.steps, dt=args.dt,
                              record_every=args.record_every, verbose=verbose)
    except (OSError, ValueError, KeyError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    result['scenario'] = args.scenario
    result['validator'] = 'buoyancy'

    os.makedirs(os.path.dirname(args.output) or '.', exist_ok=True)
    with open(args.output, 'w') as f:
        json.dump(result, f, indent=2)

    if verbose:
        final = result['final']
        print(f"✓ Simulated {final['time_s']:.2f} s")
        for name, basin in final['basins'].items():
            print(f"  {name}: {basin['liquid_volume_liters']:.3f} L, "
                  f"level {basin['liquid_height_m']:.4f} m")
        for mass in final['masses']:
            print(f"    {mass['name']}: {mass['percent_submerged']:.1f}% submerged, "
                  f"y={mass['position_m']['y']:.4f} m")
        print(f"  Liquid: {result['liquid_liters_start']:.3f} L -> "
              f"{result['liquid_liters_end']:.3f} L")
        print(f"  Output: {args.output}")


if __name__ == "__main__":
    main()
