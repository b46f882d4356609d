import json
import pubpipe
import pytest


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_pubpipe_encode_and_decode():
    encode_and_decode(pubpipe.json.dumps, pubpipe.json.loads)


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['dict'] = {1: 'one', 'two': 2}
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    decoded = loads(encoded)
    assert isinstance(decoded, dict)

    # Integer dictionary keys come back as strings.

    assert decoded != input_dictionary

    del decoded['dict']['1']
    decoded['dict'][1] = 'one'
    assert decoded == input_dictionary


def test_encode_is_compact_text():

    encoded = pubpipe.json.encode({'foo': 'bar', 'list': [1, 2]})
    assert isinstance(encoded, str)
    assert encoded == '{"foo":"bar","list":[1,2]}'

    # A bare string is a valid message; it encodes as a JSON string literal.

    assert pubpipe.json.encode('test') == '"test"'
    assert pubpipe.json.encode(5) == '5'
    assert pubpipe.json.encode(None) == 'null'


def test_encode_non_ascii():

    encoded = pubpipe.json.encode({'alert': 'zażółć'})
    assert pubpipe.json.decode(encoded) == {'alert': 'zażółć'}
    assert pubpipe.json.decode(encoded.encode('utf-8')) == {'alert': 'zażółć'}



def test_encode_non_string_keys_and_bytes():
    """ Every JSON backend renders integer keys as strings and bytes as
        base64 text, so whether a message can be published does not depend
        on which backend is installed.
    """

    assert pubpipe.json.encode({1: 'one'}) == '{"1":"one"}'
    assert pubpipe.json.encode({'raw': b'\x00\x01pubpipe'}) == '{"raw":"AAFwdWJwaXBl"}'


def test_encode_error():

    with pytest.raises(pubpipe.errors.EncodeError) as caught:
        pubpipe.json.encode({'value': object()})

    assert isinstance(caught.value.__cause__, TypeError)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
