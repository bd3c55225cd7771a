#!/usr/bin/env python3
"""
Test script for the factorization primitives, rank reduction and reconstruction.
"""

import os
import sys

import numpy as np
import pytest
import torch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from svd_img.compression import (
    BaseFactorization,
    FactorizationResult,
    RandomizedSVD,
    StandardSVD,
    SVDTriplets,
    create_factorizer,
    factorize_matrix,
    matrix_reduce,
    recompute_matrix,
    recompute_matrix_float,
)
from svd_img.errors import FactorizationError, MissingFactorsError, RankTooLargeError
from svd_img.options import CodecOptions, FixedCount
from svd_img.utils.metrics import compute_reconstruction_error


def low_rank_matrix(height, width, rank, seed=0):
    rng = np.random.default_rng(seed)
    left = rng.integers(-20, 20, size=(height, rank))
    right = rng.integers(-20, 20, size=(rank, width))
    return (left @ right).astype(np.int32)


class BrokenFactorization(BaseFactorization):
    """Factorizer returning a canned result"""

    def __init__(self, result=None, error=None):
        super().__init__()
        self.result = result
        self.error = error

    def factorize(self, matrix, rank=None, compute_u=True, compute_v=True):
        if self.error is not None:
            raise self.error
        return self.result


def test_exact_rank_recovery():
    matrix = low_rank_matrix(8, 6, 2)
    triplets = factorize_matrix(matrix, 2, CodecOptions(use_f64=True))

    assert len(triplets) == 2
    assert triplets.height == 8 and triplets.width == 6
    np.testing.assert_array_equal(recompute_matrix(triplets, np.int32), matrix)


def test_full_rank_recovery_f32():
    rng = np.random.default_rng(4)
    matrix = rng.integers(0, 256, size=(10, 12)).astype(np.int32)
    triplets = factorize_matrix(matrix, 10, CodecOptions(use_f64=False))

    assert triplets.weights.dtype == np.float32
    assert triplets.left.dtype == np.float32
    np.testing.assert_array_equal(recompute_matrix(triplets, np.int32), matrix)


def test_weights_descending_and_non_negative():
    rng = np.random.default_rng(5)
    matrix = rng.integers(-1000, 1000, size=(15, 9)).astype(np.int32)
    triplets = factorize_matrix(matrix, 9, CodecOptions())

    assert np.all(triplets.weights >= 0)
    assert np.all(np.diff(triplets.weights) <= 0)


def test_error_non_increasing_with_n():
    rng = np.random.default_rng(6)
    matrix = rng.integers(0, 1 << 20, size=(12, 10)).astype(np.int32)
    triplets = factorize_matrix(matrix, 10, CodecOptions())

    errors = [
        compute_reconstruction_error(matrix, recompute_matrix_float(triplets.truncate(n)),
                                     metric='frobenius')
        for n in range(1, 11)
    ]
    for previous, current in zip(errors, errors[1:]):
        assert current <= previous + 1e-6
    assert errors[-1] < 1e-3


def test_left_and_right_vectors_orthonormal():
    rng = np.random.default_rng(7)
    matrix = rng.integers(0, 100, size=(9, 7)).astype(np.int32)
    triplets = factorize_matrix(matrix, 5, CodecOptions())

    np.testing.assert_allclose(triplets.left @ triplets.left.T, np.eye(5), atol=1e-10)
    np.testing.assert_allclose(triplets.right @ triplets.right.T, np.eye(5), atol=1e-10)


def test_rank_too_large():
    with pytest.raises(RankTooLargeError):
        factorize_matrix(np.ones((4, 6), dtype=np.int32), 5, CodecOptions())


def test_matrix_reduce_resolves_policy():
    matrix = low_rank_matrix(10, 10, 3)
    triplets = matrix_reduce(matrix, CodecOptions(policy=FixedCount(3)))
    assert len(triplets) == 3


def test_missing_factors():
    s = torch.ones(3, dtype=torch.float64)
    u = torch.eye(3, dtype=torch.float64)
    options = CodecOptions()
    matrix = np.eye(3, dtype=np.int32)

    with pytest.raises(MissingFactorsError):
        factorize_matrix(matrix, 2, options,
                         factorizer=BrokenFactorization(FactorizationResult(u, s, None)))
    with pytest.raises(MissingFactorsError):
        factorize_matrix(matrix, 2, options,
                         factorizer=BrokenFactorization(FactorizationResult(None, s, u)))


def test_factorization_failure():
    matrix = np.eye(3, dtype=np.int32)
    with pytest.raises(FactorizationError):
        factorize_matrix(matrix, 1, CodecOptions(), factorizer=BrokenFactorization(None))
    with pytest.raises(FactorizationError):
        factorize_matrix(matrix, 1, CodecOptions(), factorizer=BrokenFactorization(
            error=torch.linalg.LinAlgError("did not converge")))


def test_standard_svd_flushes_small_weights():
    matrix = torch.diag(torch.tensor([5.0, 1e-7, 0.0], dtype=torch.float64))
    result = StandardSVD(eps=1e-5)(matrix)
    np.testing.assert_allclose(result.s.numpy(), [5.0, 0.0, 0.0], atol=1e-12)
    assert result.s[1].item() == 0.0

    result = StandardSVD()(matrix, compute_u=False, compute_v=False)
    assert result.u is None and result.vh is None


def test_randomized_svd_low_rank():
    matrix = low_rank_matrix(40, 30, 3, seed=8)
    options = CodecOptions(factorization='randomized', random_state=0)
    assert isinstance(create_factorizer(options), RandomizedSVD)

    triplets = factorize_matrix(matrix, 3, options)
    np.testing.assert_array_equal(recompute_matrix(triplets, np.int32), matrix)


def test_randomized_svd_iteration_cap():
    rng = np.random.default_rng(9)
    matrix = torch.from_numpy(rng.normal(size=(30, 20)))
    exact = torch.linalg.svdvals(matrix)

    result = RandomizedSVD(n_iter=3, random_state=1)(matrix, rank=4)
    assert result.s.shape == (4,)
    assert result.u.shape == (30, 4) and result.vh.shape == (4, 20)
    np.testing.assert_allclose(result.s.numpy(), exact[:4].numpy(), rtol=0.1)

    with pytest.raises(ValueError):
        RandomizedSVD()(matrix)


def test_reconstruction_saturates():
    triplets = SVDTriplets(
        weights=np.array([1000.0]),
        left=np.array([[1.0, -1.0]]),
        right=np.array([[0.4, 0.0001]]),
    )
    np.testing.assert_array_equal(recompute_matrix(triplets, np.uint8), [[255, 0], [0, 0]])
    np.testing.assert_array_equal(recompute_matrix(triplets, np.int32), [[400, 0], [-400, 0]])


def test_triplet_container_type():
    triplets = SVDTriplets(
        weights=np.array([3.0, 2.0, 1.0]),
        left=np.arange(6, dtype=np.float64).reshape(3, 2),
        right=np.arange(12, dtype=np.float64).reshape(3, 4),
    )
    assert triplets.use_f64
    assert [t.weight for t in triplets] == [3.0, 2.0, 1.0]
    np.testing.assert_array_equal(triplets[1].left, [2.0, 3.0])

    head = triplets.truncate(2)
    assert len(head) == 2 and head.width == 4

    with pytest.raises(ValueError):
        SVDTriplets(np.ones(1), np.ones((1, 2), dtype=np.float32), np.ones((1, 2)))


def main():
    print("=" * 70)
    print("Rank Reduction Test Suite")
    print("=" * 70)
    return pytest.main([__file__, '-v'])


if __name__ == '__main__':
    sys.exit(main())
