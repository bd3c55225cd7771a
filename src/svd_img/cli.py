"""
Command-line interface.

Usage:
    svd-img encode photo.png photo.svd -r 25
    svd-img encode song.wav song.svd -n 40 --f32
    svd-img decode photo.svd photo_out.png
    svd-img reduce photo.svd photo_small.svd -n 10
    svd-img preview photo.png preview.png -n 20 --no-aggregate
    svd-img sweep photo.png --ranks 1 2 4 8 16 32
    svd-img presets
"""

import argparse
import logging
import sys

from svd_img import codec
from svd_img.aggregation import Aggregation
from svd_img.errors import SVDImgError
from svd_img.options import CodecOptions, FixedCount, RatioPercent
from svd_img.presets import get_preset, list_presets


def _add_codec_arguments(parser, with_policy=True):
    parser.add_argument('--preset', type=str, default='default',
                        help='Start from a named preset (see "svd-img presets")')
    if with_policy:
        policy = parser.add_mutually_exclusive_group()
        policy.add_argument('-n', '--number', type=int, default=None,
                            help='Keep exactly N triplets')
        policy.add_argument('-r', '--ratio', type=float, default=None,
                            help='Keep triplets filling R percent of the input size')
    parser.add_argument('--f32', action='store_true',
                        help='Store triplets as f32 instead of f64')
    parser.add_argument('--no-aggregate', action='store_true',
                        help='Spread pixel channels over 2x2 blocks instead of packing them')
    parser.add_argument('--byte-packing', action='store_true',
                        help='Pack pixels byte by byte instead of interleaving bits')
    parser.add_argument('--alpha', action='store_true',
                        help='Keep the alpha channel')
    parser.add_argument('--wav', action='store_true',
                        help='Treat the input as a WAV file whatever its extension')
    parser.add_argument('--eps', type=float, default=None,
                        help='Zero/convergence tolerance of the factorization')
    parser.add_argument('--n-iter', type=int, default=None,
                        help='Iteration cap of the factorization (0 = to convergence)')
    parser.add_argument('--factorization', choices=['standard', 'randomized'], default=None,
                        help='Factorization primitive')


def build_options(args):
    """CodecOptions from the preset named in ``args`` plus explicit overrides."""
    options = get_preset(args.preset)
    changes = {}

    if getattr(args, 'number', None) is not None:
        changes['policy'] = FixedCount(args.number)
    elif getattr(args, 'ratio', None) is not None:
        changes['policy'] = RatioPercent(args.ratio)

    if args.f32:
        changes['use_f64'] = False
    if args.no_aggregate:
        changes['use_aggregate'] = False
    if args.byte_packing:
        changes['aggregator'] = Aggregation.BYTE_PACK
    if args.alpha:
        changes['with_alpha'] = True
    if args.wav:
        changes['force_wav'] = True
    if args.eps is not None:
        changes['eps'] = args.eps
    if args.n_iter is not None:
        changes['n_iter'] = args.n_iter
    if args.factorization is not None:
        changes['factorization'] = args.factorization

    return options.with_options(**changes)


def create_parser():
    parser = argparse.ArgumentParser(
        prog='svd-img',
        description='Compress images and WAV files using SVD',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('encode', help='Encode an image or WAV file')
    p.add_argument('input', help='Input media file')
    p.add_argument('output', nargs='?', default='output.svd',
                   help="Output container (default: 'output.svd')")
    _add_codec_arguments(p)

    p = subparsers.add_parser('decode', help='Decode a container to an image or WAV file')
    p.add_argument('input', help='Input container')
    p.add_argument('output', help='Output media file, format chosen by extension')

    p = subparsers.add_parser('reduce', help='Drop trailing triplets from a container')
    p.add_argument('input', help='Input container')
    p.add_argument('output', help='Output container')
    policy = p.add_mutually_exclusive_group(required=True)
    policy.add_argument('-n', '--number', type=int, default=None,
                        help='Keep exactly N triplets')
    policy.add_argument('-r', '--ratio', type=float, default=None,
                        help='Keep triplets filling R percent of the input container size')

    p = subparsers.add_parser('preview', help='Write the approximated media without a container')
    p.add_argument('input', help='Input media file')
    p.add_argument('output', help='Output media file')
    _add_codec_arguments(p)

    p = subparsers.add_parser('sweep', help='Evaluate quality over several triplet counts')
    p.add_argument('input', help='Input media file')
    p.add_argument('--ranks', type=int, nargs='+', required=True,
                   help='Triplet counts to evaluate')
    p.add_argument('--output-dir', type=str, default='experiments/results',
                   help='Directory for the JSON results')
    _add_codec_arguments(p, with_policy=False)

    subparsers.add_parser('presets', help='List available presets')

    return parser


def run(args):
    if args.command == 'presets':
        list_presets()
        return 0

    if args.command == 'decode':
        header = codec.decode(args.input, args.output)
        print(f"Decoded {header.n} triplets ({header.height}x{header.width}) to {args.output}")
        return 0

    if args.command == 'reduce':
        options = CodecOptions(
            policy=FixedCount(args.number) if args.number is not None else RatioPercent(args.ratio)
        )
        header = codec.reduce(args.input, args.output, options)
        print(f"Reduced {args.input} to {header.n} triplets in {args.output}")
        return 0

    options = build_options(args)

    if args.command == 'encode':
        header = codec.encode(args.input, args.output, options)
        print(f"Encoded {args.input} as {header.n} triplets "
              f"({header.height}x{header.width}) in {args.output}")
    elif args.command == 'preview':
        header = codec.preview(args.input, args.output, options)
        print(f"Wrote {header.n}-triplet approximation of {args.input} to {args.output}")
    elif args.command == 'sweep':
        from svd_img.utils.sweep_runner import SweepRunner
        SweepRunner(output_dir=args.output_dir).run_sweep(args.input, args.ranks, options)

    return 0


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        return run(args)
    except SVDImgError as e:
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
