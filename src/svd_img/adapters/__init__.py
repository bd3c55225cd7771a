from svd_img.adapters.image_matrix import image_matrix, imgbuf_from_matrix
from svd_img.adapters.sound_matrix import sound_from_matrix, sound_matrix

__all__ = ['image_matrix', 'imgbuf_from_matrix', 'sound_matrix', 'sound_from_matrix']
