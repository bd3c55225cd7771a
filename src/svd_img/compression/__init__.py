"""
Factorization primitives, rank reduction and reconstruction.
"""

from .base_factorization import BaseFactorization, FactorizationResult
from .svd_factorization import StandardSVD
from .randomized_svd_factorization import RandomizedSVD
from .triplets import SVDTriplets, Triplet
from .rank_reduction import create_factorizer, factorize_matrix, matrix_reduce
from .reconstruction import recompute_matrix, recompute_matrix_float

__all__ = [
    'BaseFactorization', 'FactorizationResult', 'StandardSVD', 'RandomizedSVD',
    'SVDTriplets', 'Triplet',
    'create_factorizer', 'factorize_matrix', 'matrix_reduce',
    'recompute_matrix', 'recompute_matrix_float',
]
