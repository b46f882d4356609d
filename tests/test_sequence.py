import concurrent.futures
import logging
import os

import pubpipe


def test_allocate_and_peek():

    sequence = pubpipe.sequence.Sequence()

    assert sequence.peek() == 1
    assert sequence.peek() == 1

    assert sequence.allocate() == 1
    assert sequence.peek() == 2
    assert sequence.allocate() == 2
    assert sequence.allocate() == 3


def test_strictly_increasing_across_threads():
    """ Concurrent allocations must each receive a distinct value, with no
        gaps, regardless of how the threads interleave.
    """

    sequence = pubpipe.sequence.Sequence()
    workers = concurrent.futures.ThreadPoolExecutor(max_workers=8)

    futures = [workers.submit(sequence.allocate) for i in range(500)]
    values = [future.result() for future in futures]
    workers.shutdown()

    assert sorted(values) == list(range(1, 501))
    assert sequence.peek() == 501


def test_wrap_around():

    sequence = pubpipe.sequence.Sequence()
    sequence._last = pubpipe.sequence.maximum - 1

    assert sequence.allocate() == pubpipe.sequence.maximum
    assert sequence.peek() == pubpipe.sequence.minimum
    assert sequence.allocate() == pubpipe.sequence.minimum


def test_persistence(tmp_path):

    path = str(tmp_path / 'state' / 'sequence.json')

    first = pubpipe.sequence.Sequence(path)
    first.allocate()
    first.allocate()
    first.peek()

    assert os.path.exists(path)

    second = pubpipe.sequence.Sequence(path)
    assert second.peek() == 3
    assert second.allocate() == 3


def test_peek_does_not_persist(tmp_path):

    path = str(tmp_path / 'sequence.json')

    sequence = pubpipe.sequence.Sequence(path)
    sequence.peek()

    assert not os.path.exists(path)


def test_unreadable_state(tmp_path):

    path = tmp_path / 'sequence.json'
    path.write_text('this is not JSON')

    sequence = pubpipe.sequence.Sequence(str(path))
    assert sequence.peek() == 1

    path.write_text('{"last": -5}')

    sequence = pubpipe.sequence.Sequence(str(path))
    assert sequence.peek() == 1



def test_unwritable_state(tmp_path, caplog):
    """ A state path that cannot be written does not interrupt allocation;
        the in-memory counter carries on.
    """

    blocker = tmp_path / 'file'
    blocker.write_text('not a directory')
    path = str(blocker / 'sub' / 'sequence.json')

    sequence = pubpipe.sequence.Sequence(path)
    assert sequence.peek() == 1

    with caplog.at_level(logging.WARNING, logger='pubpipe.sequence'):
        assert sequence.allocate() == 1
        assert sequence.allocate() == 2

    assert 'cannot save sequence state' in caplog.text
    assert sequence.peek() == 3


def test_shared_state_path(tmp_path, caplog):
    """ Two instances persisting to the same path must not trip over each
        other's temporary files.
    """

    path = str(tmp_path / 'sequence.json')
    first = pubpipe.sequence.Sequence(path)
    second = pubpipe.sequence.Sequence(path)

    def allocate(sequence):
        for i in range(500):
            sequence.allocate()

    workers = concurrent.futures.ThreadPoolExecutor(max_workers=2)

    with caplog.at_level(logging.WARNING, logger='pubpipe.sequence'):
        futures = [workers.submit(allocate, first), workers.submit(allocate, second)]
        for future in futures:
            future.result()

    workers.shutdown()

    assert caplog.text == ''
    assert first.peek() == 501
    assert second.peek() == 501
    assert pubpipe.sequence.Sequence(path).peek() == 501
    assert os.listdir(str(tmp_path)) == ['sequence.json']


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
