"""
Image file collaborator backed by Pillow.
"""

import numpy as np
from PIL import Image, UnidentifiedImageError

from svd_img.errors import ImageFormatError, MediaReadError, MediaWriteError


def read_image(path, with_alpha=False):
    """
    Open any Pillow-readable image as an 8-bit pixel grid.

    Args:
        path: Image file path
        with_alpha: Return RGBA instead of RGB

    Returns:
        uint8 array of shape (height, width, 4 or 3)
    """
    mode = 'RGBA' if with_alpha else 'RGB'
    try:
        with Image.open(path) as img:
            return np.asarray(img.convert(mode), dtype=np.uint8).copy()
    except (FileNotFoundError, IsADirectoryError, PermissionError) as e:
        raise MediaReadError(f"Cannot open image {path}: {e}") from e
    except (UnidentifiedImageError, SyntaxError) as e:
        raise ImageFormatError(f"Unrecognized image format: {path}") from e
    except OSError as e:
        raise ImageFormatError(f"Cannot decode image {path}: {e}") from e


def write_image(path, pixels):
    """Save an RGB or RGBA uint8 grid; the format follows the file extension."""
    img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    try:
        img.save(path)
    except ValueError as e:
        raise ImageFormatError(f"Cannot choose an image format for {path}: {e}") from e
    except OSError as e:
        raise MediaWriteError(f"Cannot write image {path}: {e}") from e
