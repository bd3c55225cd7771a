"""
Exceptions raised by the svd-img codec.

Every failure surfaced by encode, decode, reduce and preview derives from
SVDImgError, so callers can report them uniformly.
"""


class SVDImgError(Exception):
    """Base class for all codec failures."""


class MediaReadError(SVDImgError):
    """Input file could not be opened or read."""


class MediaWriteError(SVDImgError):
    """Output file could not be created or written."""


class ImageFormatError(SVDImgError):
    """Image data is in an unrecognized or undecodable format."""


class AudioFormatError(SVDImgError):
    """WAV data uses an encoding or bit depth the codec cannot handle."""


class FactorizationError(SVDImgError):
    """The factorization primitive could not produce a result."""


class MissingFactorsError(FactorizationError):
    """The factorization result lacks the left or right factor set."""


class PolicyError(SVDImgError):
    """A compression policy could not be resolved to a triplet count."""


class NTooSmallError(PolicyError):
    pass


class RatioTooRestrictiveError(PolicyError):
    pass


class InvalidRatioError(PolicyError):
    pass


class RankTooLargeError(PolicyError):
    pass


class ReduceError(SVDImgError):
    """Reduction asked for more triplets than the container holds."""


class ContainerError(SVDImgError):
    """Malformed or inconsistent container data."""


class UnexpectedEOFError(ContainerError):
    pass
