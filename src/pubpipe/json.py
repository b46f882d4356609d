''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`, plus the
    text-oriented :func:`encode` and :func:`decode` used by the publish
    pipeline.
'''

import base64
import functools

from .errors import EncodeError

# msgspec is preferred when it is installed; orjson is the declared
# dependency and is always available.

msgspec = None

try:
    import msgspec
except ImportError:
    pass

import orjson


# orjson is configured to match msgspec: non-string dictionary keys become
# strings, and bytes are encoded as base64 text.

def _default(value):

    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(value).decode('ascii')

    raise TypeError('Type is not JSON serializable: ' + type(value).__name__)


# Both the msgspec 'encode' operation and orjson.dumps return bytes; the
# selected 'dumps' and 'loads' retain that convention.

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    encode_errors = (TypeError, ValueError, msgspec.EncodeError)
    decode_errors = (ValueError, msgspec.DecodeError)
else:
    dumps = functools.partial(orjson.dumps, default=_default, option=orjson.OPT_NON_STR_KEYS)
    loads = orjson.loads
    encode_errors = (TypeError, ValueError, orjson.JSONEncodeError)
    decode_errors = (ValueError, orjson.JSONDecodeError)


def encode(value):
    """ Serialize *value* to canonical, compact JSON text. Any failure to
        represent the value is raised as a
        :class:`pubpipe.errors.EncodeError`, chained to the original
        exception.
    """

    try:
        encoded = dumps(value)
    except encode_errors as e:
        raise EncodeError('cannot encode value as JSON: ' + str(e)) from e

    return encoded.decode('utf-8')


def decode(text):
    """ The inverse of :func:`encode`. Bytes and str are both accepted.
    """

    try:
        text.decode
    except AttributeError:
        text = text.encode('utf-8')

    return loads(text)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
