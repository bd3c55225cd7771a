"""
svd-img: lossy image and audio compression by truncated SVD.
"""

from svd_img.aggregation import Aggregation
from svd_img.codec import decode, encode, preview, reduce
from svd_img.options import CodecOptions, FixedCount, RatioPercent, parse_policy

__version__ = '0.1.0'

__all__ = [
    'Aggregation', 'CodecOptions', 'FixedCount', 'RatioPercent', 'parse_policy',
    'encode', 'decode', 'reduce', 'preview',
]
