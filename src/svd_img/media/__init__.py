"""
Media file collaborators: images through Pillow, WAV through ``wave``.
"""

from svd_img.media.image_io import read_image, write_image
from svd_img.media.wav_io import WavHeader, read_wav, write_wav

__all__ = ['read_image', 'write_image', 'WavHeader', 'read_wav', 'write_wav']
