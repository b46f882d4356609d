""" Payload compression for published messages. Compressed messages travel
    in the request body, gzip-framed, rather than in the request path.
"""

import logging
import zlib

logger = logging.getLogger(__name__)

# A wbits value of 16 + 15 selects the gzip container with a 32 KB window.

gzip_wbits = 16 + zlib.MAX_WBITS


def compress(data, level=zlib.Z_DEFAULT_COMPRESSION):
    """ Return the gzip compressed representation of *data*. This never
        raises: if the data cannot be compressed an empty byte sequence is
        returned, and the caller is expected to send an empty body.
    """

    if data is None:
        return b''

    try:
        compressor = zlib.compressobj(level, zlib.DEFLATED, gzip_wbits)
        compressed = compressor.compress(data) + compressor.flush()
    except (zlib.error, TypeError, ValueError):
        logger.exception("message compression failed")
        return b''

    return compressed



def decompress(data):
    """ The inverse of :func:`compress`. Unlike :func:`compress`, a failure
        here raises :class:`zlib.error`.
    """

    return zlib.decompress(data, gzip_wbits)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
