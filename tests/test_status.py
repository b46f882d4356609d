import pytest

import pubpipe

fields = pubpipe.protocol.fields
Status = pubpipe.Status


def test_acknowledgment():

    status = Status(fields.PUBLISH, data={'timetoken': '14613497208195952', 'information': 'Sent'})

    assert status.is_error == False
    assert status.category == fields.ACKNOWLEDGMENT
    assert status.timetoken == '14613497208195952'
    assert status.retryable == False


def test_failure_retry():

    error = pubpipe.errors.DispatchError('boom')
    status = Status.failure(fields.PUBLISH, fields.DISPATCH_ERROR, error, status_code=503)

    assert status.is_error == True
    assert status.timetoken is None
    assert status.status_code == 503

    with pytest.raises(RuntimeError):
        status.retry()

    with pytest.raises(TypeError):
        status.attach_retry('not callable')

    status.attach_retry(lambda: 'again')
    assert status.retryable == True
    assert status.retry() == 'again'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
