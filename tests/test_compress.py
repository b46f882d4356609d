import gzip
import pubpipe


def test_round_trip():

    data = b'{"pn_other":"test","pn_gcm":{"data":{"summary":"hi"}}}'
    compressed = pubpipe.compress.compress(data)

    assert compressed != data
    assert compressed[:2] == b'\x1f\x8b'
    assert gzip.decompress(compressed) == data
    assert pubpipe.compress.decompress(compressed) == data


def test_empty_input():

    compressed = pubpipe.compress.compress(b'')
    assert pubpipe.compress.decompress(compressed) == b''

    assert pubpipe.compress.compress(None) == b''


def test_failure_is_not_fatal():

    assert pubpipe.compress.compress('not bytes') == b''


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
