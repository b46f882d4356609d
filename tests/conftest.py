import concurrent.futures
import threading

import pytest

import pubpipe
from pubpipe.transport.base import Transport, TransportConnectionError


class InlineExecutor(concurrent.futures.Executor):
    """ Run submitted work immediately on the calling thread, so that a
        pipeline run is complete by the time publish() returns.
    """

    def __init__(self):
        self.submitted = 0

    def submit(self, function, *args, **kwargs):
        self.submitted += 1
        future = concurrent.futures.Future()

        try:
            result = function(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

        return future


class FakeTransport(Transport):
    """ Record every request; fail the first *failures* sends with a
        connection error, acknowledge the rest.
    """

    timetoken = '14613497208195952'

    def __init__(self, failures=0):
        self.failures = failures
        self.sent = list()
        self.measured = list()
        self.lock = threading.Lock()

    def _request(self, operation, parameters, body):
        with self.lock:
            self.sent.append((operation, parameters, body))

            if self.failures > 0:
                self.failures -= 1
                raise TransportConnectionError('connection refused')

        return {'information': 'Sent', 'timetoken': self.timetoken}, 200

    def estimate_size(self, operation, parameters, body):
        self.measured.append((operation, parameters, body))

        size = len(repr(parameters))
        if body is not None:
            size += len(body)

        return size


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def inline():
    return InlineExecutor()


@pytest.fixture
def client_factory(inline, tmp_path):
    """ Build clients that run everything inline, with sequence state kept
        in a temporary directory.
    """

    clients = list()

    def factory(transport=None, **kwargs):
        if transport is None:
            transport = FakeTransport()

        kwargs.setdefault('publish_key', 'demo')
        kwargs.setdefault('subscribe_key', 'demo')
        kwargs.setdefault('uuid', 'unit-test')

        sequence = pubpipe.sequence.Sequence(str(tmp_path / 'sequence.json'))

        client = pubpipe.Client(transport=transport, sequence=sequence,
                                worker=inline, callbacks=inline, **kwargs)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def client(client_factory, transport):
    return client_factory(transport)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / 'home'
    monkeypatch.setenv('PUBPIPE_HOME', str(home))
    monkeypatch.setattr(pubpipe.config.directory, 'found', None)

    for variable in ('PUBLISH_KEY', 'SUBSCRIBE_KEY', 'CIPHER_KEY', 'TRANSPORT', 'UUID'):
        monkeypatch.delenv('PUBPIPE_' + variable, raising=False)

    return home


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
