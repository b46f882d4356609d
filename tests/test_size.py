import pubpipe
import pytest

from pubpipe.protocol import fields
from pubpipe.protocol.options import PublishOptions

from conftest import FakeTransport


class Recorder:

    def __init__(self):
        self.calls = list()

    def __call__(self, *args):
        self.calls.append(args)


def test_size(client, transport):

    completion = Recorder()
    pending = client.size({'text': 'hello'}, 'a', completion=completion)

    size, error = pending.wait(1)

    assert error is None
    assert size > 0
    assert completion.calls == [(size, None)]
    assert transport.sent == []
    assert len(transport.measured) == 1


def test_size_does_not_consume_sequence(client, transport):

    first = client.size('test', 'a').wait(1)
    second = client.size('test', 'a').wait(1)

    assert first == second
    assert client.sequence.peek() == 1

    assert transport.measured[0][1] == transport.measured[1][1]
    assert transport.measured[0][1].query['seqn'] == '1'

    client.publish('test', 'a')
    assert transport.sent[0][1].query['seqn'] == '1'

    client.size('test', 'a')
    assert transport.measured[-1][1].query['seqn'] == '2'


def test_size_mirrors_publish(client_factory):
    """ The measured request is exactly the request publish would send.
    """

    transport = FakeTransport()
    client = client_factory(transport, cipher_key='enigma')

    payloads = {'aps': {'alert': 'hi'}, 'gcm': {'data': 1}}
    options = PublishOptions(should_store=False, ttl=3, compress=True, replicate=False)
    metadata = {'foo': 'bar'}

    client.size('test', 'a', payloads=payloads, options=options, metadata=metadata).wait(1)
    client.publish('test', 'a', payloads=payloads, options=options, metadata=metadata).wait(1)

    measured = transport.measured[0]
    sent = transport.sent[0]

    assert measured == sent
    assert 'ttl' not in sent[1].query


def test_size_encode_failure(client, transport):

    completion = Recorder()
    size, error = client.size({'bad': object()}, 'a', completion=completion).wait(1)

    assert size == -1
    assert isinstance(error, pubpipe.errors.SizeComputationError)
    assert isinstance(error.__cause__, pubpipe.errors.EncodeError)
    assert completion.calls == [(-1, error)]
    assert transport.measured == []


def test_size_crypto_failure(client, transport, monkeypatch):

    def broken(text, key, random_iv=False):
        raise pubpipe.errors.CryptoError('broken cipher')

    monkeypatch.setattr(pubpipe.crypto, 'encrypt', broken)

    size, error = client.size('test', 'a').wait(1)

    assert size == -1
    assert isinstance(error.__cause__, pubpipe.errors.CryptoError)


def test_size_compression(client, transport):

    plain, error = client.size('test' * 200, 'a').wait(1)
    compressed, error = client.size('test' * 200, 'a', options=PublishOptions(compress=True)).wait(1)

    assert compressed < plain

    operation, parameters, body = transport.measured[1]
    assert parameters.path_components[fields.MESSAGE] == ''
    assert pubpipe.compress.decompress(body) == pubpipe.json.encode('test' * 200).encode()


def test_size_builder(client, transport):

    size, error = client.size_builder().channel('a').message('test').should_store(False).ttl(9).perform().wait(1)

    assert error is None
    parameters = transport.measured[0][1]
    assert parameters.query['store'] == '0'
    assert 'ttl' not in parameters.query


def test_size_validation(client):

    with pytest.raises(ValueError):
        client.size('test', '')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
