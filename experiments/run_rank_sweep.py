#!/usr/bin/env python3
"""
Command-line script for running rank sweeps over media files.

Usage:
    python run_rank_sweep.py photo.png --ranks 1 2 4 8 16 32
    python run_rank_sweep.py song.wav --ranks 10 20 40 --preset audio
    python run_rank_sweep.py --list-presets
"""

import argparse
import sys
from pathlib import Path

# Find project root (parent of experiments directory)
script_dir = Path(__file__).resolve().parent
project_root = script_dir.parent

# Add src to path
sys.path.insert(0, str(project_root / 'src'))

from svd_img.errors import SVDImgError
from svd_img.presets import get_preset, list_presets
from svd_img.utils.sweep_runner import SweepRunner


def main():
    parser = argparse.ArgumentParser(
        description='Measure SVD approximation quality for several triplet counts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List available presets
  python run_rank_sweep.py --list-presets

  # Sweep an image with the default preset
  python run_rank_sweep.py photo.png --ranks 1 2 4 8 16 32

  # Sweep with f32 triplets and randomized SVD
  python run_rank_sweep.py photo.png --ranks 8 16 --preset fast
        """
    )

    parser.add_argument('inputs', nargs='*', help='Media files to sweep')

    parser.add_argument(
        '--ranks',
        type=int,
        nargs='+',
        default=[1, 2, 4, 8, 16, 32],
        help='Triplet counts to evaluate. Default: 1 2 4 8 16 32'
    )

    parser.add_argument(
        '--preset',
        type=str,
        default='default',
        help='Codec preset (default, fast, archive, audio, plain, byte_packed). Default: default'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help='Output directory for results. Default: experiments/results'
    )

    parser.add_argument(
        '--list-presets',
        action='store_true',
        help='List available presets and exit'
    )

    args = parser.parse_args()

    if args.list_presets:
        list_presets()
        return 0

    if not args.inputs:
        parser.error('at least one input file is required (or use --list-presets)')

    try:
        options = get_preset(args.preset)
    except ValueError as e:
        print(f"Error: {e}")
        list_presets()
        return 1

    if args.output_dir is None:
        output_dir = str(project_root / 'experiments' / 'results')
    else:
        output_dir = args.output_dir

    print("=" * 80)
    print("SWEEP CONFIGURATION")
    print("=" * 80)
    print(f"Inputs: {', '.join(args.inputs)}")
    print(f"Ranks: {args.ranks}")
    print(f"Preset: {args.preset}")
    print(f"Output directory: {output_dir}")
    print("=" * 80)

    runner = SweepRunner(output_dir=output_dir)

    failures = 0
    for input_path in args.inputs:
        try:
            runner.run_sweep(input_path, args.ranks, options)
        except SVDImgError as e:
            print(f"Error sweeping {input_path}: {e}")
            failures += 1

    print(f"\nCompleted {len(args.inputs) - failures}/{len(args.inputs)} sweeps")
    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
