"""
Named codec presets.

Each preset is a CodecOptions value; the CLI and the sweep script pick them
by name and override individual fields from their own arguments.
"""

from svd_img.aggregation import Aggregation
from svd_img.options import CodecOptions, FixedCount, RatioPercent


def create_options(policy=None, use_f64=True, use_aggregate=True,
                   aggregator=Aggregation.BIT_INTERLEAVE, with_alpha=False,
                   factorization='standard', n_iter=0, eps=1.0e-5):
    """
    Create a codec option set.

    Args:
        policy: FixedCount or RatioPercent (default: 25% of the input size)
        use_f64: Store triplets as f64 instead of f32
        use_aggregate: Pack each pixel into one cell
        aggregator: Packing scheme when aggregating
        with_alpha: Keep the alpha channel
        factorization: 'standard' or 'randomized'
        n_iter: Iteration cap for the factorization (0 = to convergence)
        eps: Zero/convergence tolerance
    """
    return CodecOptions(
        policy=policy if policy is not None else RatioPercent(25),
        use_f64=use_f64,
        eps=eps,
        n_iter=n_iter,
        factorization=factorization,
        use_aggregate=use_aggregate,
        aggregator=aggregator,
        with_alpha=with_alpha,
    )


# =============================================================================
# Presets
# =============================================================================

DEFAULT = create_options()

# Half the storage per triplet, randomized factorization for large images
FAST = create_options(use_f64=False, factorization='randomized', n_iter=4)

# Keep more of the signal
ARCHIVE = create_options(policy=RatioPercent(60), with_alpha=True)

AUDIO = create_options(policy=RatioPercent(40), use_aggregate=False)

# 2x2 block layout, one channel per cell
PLAIN = create_options(policy=FixedCount(32), use_aggregate=False)

BYTE_PACKED = create_options(aggregator=Aggregation.BYTE_PACK)

PRESETS = {
    'default': DEFAULT,
    'fast': FAST,
    'archive': ARCHIVE,
    'audio': AUDIO,
    'plain': PLAIN,
    'byte_packed': BYTE_PACKED,
}

_DESCRIPTIONS = {
    'default': 'f64, bit-interleaved pixels, 25% of input size',
    'fast': 'f32, randomized SVD (4 power iterations), 25% of input size',
    'archive': 'f64, bit-interleaved RGBA, 60% of input size',
    'audio': 'f64, 40% of input size',
    'plain': 'f64, 2x2 block layout, 32 triplets',
    'byte_packed': 'f64, byte-packed pixels, 25% of input size',
}


def get_preset(name):
    """
    Get a preset by name.

    Args:
        name: Name of the preset

    Returns:
        CodecOptions
    """
    if name not in PRESETS:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    return PRESETS[name]


def list_presets():
    """List all available presets with descriptions."""
    print("\nAvailable Codec Presets")
    print("=" * 80)
    print(f"{'Preset Name':<16} {'Policy':<24} {'Description'}")
    print("-" * 80)
    for name, options in PRESETS.items():
        print(f"{name:<16} {str(options.policy):<24} {_DESCRIPTIONS[name]}")
    print("=" * 80)
    print("\nUsage: svd-img encode --preset <preset_name> INPUT OUTPUT")
    print()
