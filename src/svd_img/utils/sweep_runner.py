"""
Rank sweep runner.

Factorizes a media file once, then evaluates the approximation for several
triplet counts: reconstruction error, PSNR, container size and timing.
Results are saved as JSON for later comparison.
"""

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from svd_img.codec import read_matrix, reconstruct_media
from svd_img.adapters import imgbuf_from_matrix
from svd_img.compression import factorize_matrix, recompute_matrix_float
from svd_img.container import make_header
from svd_img.options import CodecOptions
from svd_img.utils.metrics import (
    compute_psnr,
    compute_reconstruction_error,
    container_size,
)


@dataclass
class SweepPoint:
    """Metrics for one triplet count."""
    n: int
    container_bytes: int
    compression_ratio: float
    relative_error: float
    psnr: Optional[float]
    reconstruction_time: float


@dataclass
class SweepResults:
    """Results from a single rank sweep."""
    name: str
    input_path: str
    height: int
    width: int
    original_file_size: int
    is_audio: bool
    factorization_time: float
    options: Dict[str, Any] = field(default_factory=dict)
    points: List[SweepPoint] = field(default_factory=list)

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def save(self, filepath):
        """Save results to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath):
        """Load results from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        data['points'] = [SweepPoint(**p) for p in data['points']]
        return cls(**data)


def describe_options(options: CodecOptions) -> Dict[str, Any]:
    return {
        'use_f64': options.use_f64,
        'use_aggregate': options.use_aggregate,
        'aggregator': options.aggregator.value,
        'with_alpha': options.with_alpha,
        'factorization': options.factorization,
        'eps': options.eps,
        'n_iter': options.n_iter,
    }


class SweepRunner:
    """
    Runs rank sweeps over media files and collects metrics.
    """

    def __init__(self, output_dir='experiments/results'):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def run_sweep(self, input_path, ranks: List[int], options: CodecOptions = None,
                  name: Optional[str] = None, save: bool = True) -> SweepResults:
        """
        Evaluate ``input_path`` at every triplet count in ``ranks``.

        Args:
            input_path: Image or WAV file
            ranks: Triplet counts to evaluate
            options: Codec options (the policy is ignored)
            name: Result name (default: input file stem)
            save: Write ``<name>_sweep.json`` to the output directory

        Returns:
            SweepResults with one point per rank, in ascending order
        """
        options = options or CodecOptions()
        name = name or Path(input_path).stem
        ranks = sorted(set(ranks))

        print(f"\n{'='*60}")
        print(f"Running rank sweep: {name}")
        print(f"Ranks: {ranks}")
        print(f"{'='*60}\n")

        media = read_matrix(input_path, options)
        height, width = media.matrix.shape

        start = time.time()
        triplets = factorize_matrix(media.matrix, ranks[-1], options)
        factorization_time = time.time() - start

        header = make_header(media.content_type, triplets, media.wav_header, media.sample_count)
        is_audio = media.content_type.is_audio
        if not is_audio:
            original_pixels = imgbuf_from_matrix(
                media.matrix, media.content_type.has_alpha, media.content_type.aggregator
            )

        results = SweepResults(
            name=name,
            input_path=str(input_path),
            height=height,
            width=width,
            original_file_size=media.original_file_size,
            is_audio=is_audio,
            factorization_time=factorization_time,
            options=describe_options(options),
        )

        for n in ranks:
            truncated = triplets.truncate(n)

            start = time.time()
            approx = recompute_matrix_float(truncated)
            output = reconstruct_media(header.with_count(n), truncated)
            elapsed = time.time() - start

            size = container_size(n, height, width, options.use_f64, is_audio)
            results.points.append(SweepPoint(
                n=n,
                container_bytes=size,
                compression_ratio=media.original_file_size / size,
                relative_error=compute_reconstruction_error(media.matrix, approx),
                psnr=None if is_audio else compute_psnr(original_pixels, output),
                reconstruction_time=elapsed,
            ))

        if save:
            output_file = self.output_dir / f"{name}_sweep.json"
            results.save(output_file)
            print(f"Results saved to: {output_file}")

        self.print_summary(results)
        return results

    def print_summary(self, results: SweepResults):
        """Print a summary of sweep results."""
        print(f"\n{'='*60}")
        print(f"Sweep Summary: {results.name}")
        print(f"{'='*60}")
        print(f"Matrix: {results.height} x {results.width}")
        print(f"Original size: {results.original_file_size:,} bytes")
        print(f"Factorization time: {results.factorization_time:.4f} sec")
        print(f"\n{'n':>6} {'Bytes':>12} {'Ratio':>8} {'Rel. error':>12} {'PSNR':>8}")
        print("-" * 60)
        for p in results.points:
            psnr = f"{p.psnr:8.2f}" if p.psnr is not None else f"{'-':>8}"
            print(f"{p.n:>6} {p.container_bytes:>12,} {p.compression_ratio:>8.2f} "
                  f"{p.relative_error:>12.6f} {psnr}")
        print(f"{'='*60}\n")
