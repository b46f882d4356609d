""" The publish pipeline. A publish call is described completely by a
    :class:`PublishCall`, and runs against a :class:`Context`, a snapshot of
    everything the pipeline needs from the client that issued it. Neither
    refers back to the client, so a :class:`PublishCall` can be re-run at
    any time, which is exactly what the retry attached to a failed
    :class:`~pubpipe.protocol.status.Status` does.

    The stages, in order:

    1. allocate a sequence number, on the calling thread;
    2. move to the worker executor;
    3. encode the message as JSON;
    4. encrypt it, if a cipher key is configured;
    5. encode the metadata, if any;
    6. merge in the mobile push payloads, if any, and re-encode;
    7. assemble the request parameters;
    8. compress the message, if requested;
    9. dispatch the request via the transport;
    10. attach a retry to any dispatch failure;
    11. deliver the status on the callback executor.

    Size estimation runs stages 3 through 8 the same way, but only peeks at
    the next sequence number, and measures the request instead of sending
    it.
"""

import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NamedTuple, Optional

from . import compress
from . import crypto
from . import json
from .errors import CryptoError, DispatchError, EncodeError, SizeComputationError
from .protocol import fields
from .protocol import push
from .protocol.options import PublishOptions
from .protocol.parameters import RequestParameters, assemble
from .protocol.status import Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishCall:
    """ The original logical arguments of a single publish or size call.
    """

    message: Any
    channel: str
    payloads: Optional[Mapping[str, Any]] = None
    options: PublishOptions = field(default_factory=PublishOptions)
    metadata: Optional[Mapping[str, Any]] = None
    completion: Optional[Callable] = None
    operation: str = fields.PUBLISH


class Context(NamedTuple):
    """ What a pipeline run needs from the client: a copy of the
        configuration taken when the call was issued, the shared sequence
        source, the transport, and the executors to run on.
    """

    config: Any
    sequence: Any
    transport: Any
    worker: Any
    callbacks: Any


class Prepared(NamedTuple):
    message: str
    metadata: Optional[str]
    parameters: RequestParameters
    body: Optional[bytes]


class PendingCall:
    """ Returned by every publish and size call. The result is whatever was
        delivered to the completion handler: a
        :class:`~pubpipe.protocol.status.Status` for a publish, a
        ``(size, error)`` tuple for a size estimate.
    """

    def __init__(self, seqn):

        self.seqn = seqn
        self.result = None
        self._done = threading.Event()


    def _complete(self, result):
        self.result = result
        self._done.set()


    def poll(self):
        """ Return True if the call is complete, otherwise return False.
        """

        return self._done.is_set()


    def wait(self, timeout=60):
        """ Block until the call is complete and return the result; the
            result is None if the call is still pending after *timeout*
            seconds.
        """

        self._done.wait(timeout)
        return self.result


# end of class PendingCall



def prepare(call, config, seqn):
    """ Run the transform stages of the pipeline and return a
        :class:`Prepared` request. Raises :class:`EncodeError` or
        :class:`CryptoError`; no partially transformed request is ever
        returned.
    """

    options = call.options

    message = json.encode(call.message)

    encrypted_message = crypto.encrypt(message, config.cipher_key, config.random_iv)
    encrypted = encrypted_message != message
    message = encrypted_message

    metadata = None
    if call.metadata is not None:
        metadata = json.encode(call.metadata)

    if call.payloads:
        if encrypted:
            base = message
        else:
            base = call.message

        merged = push.merge(base, call.payloads)
        message = json.encode(merged)

    parameters = assemble(message, call.channel, options, metadata, seqn)

    body = None
    if options.compress:
        body = compress.compress(message.encode('utf-8'))
        if not body:
            body = b''

    return Prepared(message, metadata, parameters, body)



def publish(call, context):
    """ Start a publish pipeline run for *call*, returning a
        :class:`PendingCall`. The sequence number is allocated before this
        function returns, even if the run later fails.
    """

    seqn = context.sequence.allocate()
    pending = PendingCall(seqn)

    context.worker.submit(_publish, call, context, seqn, pending)
    return pending



def _publish(call, context, seqn, pending):

    operation = call.operation

    try:
        prepared = prepare(call, context.config, seqn)
    except EncodeError as e:
        logger.warning("%s to '%s' failed, cannot encode: %s", operation.lower(), call.channel, e)
        status = Status.failure(operation, fields.ENCODE_ERROR, e)
    except CryptoError as e:
        logger.warning("%s to '%s' failed, cannot encrypt: %s", operation.lower(), call.channel, e)
        status = Status.failure(operation, fields.CRYPTO_ERROR, e)
    except Exception as e:
        logger.exception("%s to '%s' failed while preparing the request", operation.lower(), call.channel)
        error = EncodeError('cannot prepare message: ' + str(e))
        error.__cause__ = e
        status = Status.failure(operation, fields.ENCODE_ERROR, error)
    else:
        _log_api_call(call, prepared)
        status = _dispatch(call, context, prepared)

        if status.is_error:
            status.attach_retry(functools.partial(publish, call, context))

    _deliver(context, call.completion, (status,), status, pending)



def _dispatch(call, context, prepared):

    try:
        return context.transport.send(call.operation, prepared.parameters, prepared.body)
    except Exception as e:
        logger.exception("transport failed unexpectedly for %s to '%s'", call.operation.lower(), call.channel)
        error = DispatchError(str(e))
        error.__cause__ = e
        return Status.failure(call.operation, fields.DISPATCH_ERROR, error)



def _log_api_call(call, prepared):

    options = call.options

    if options.compress:
        compressed = ' compressed'
        message = '.'
    else:
        compressed = ''
        message = ': ' + prepared.message

    if call.metadata is not None:
        metadata = ' with metadata (%s)' % (prepared.metadata)
    else:
        metadata = ''

    if options.should_store:
        stored = ''
    else:
        stored = " which won't be saved in history"

    if call.operation == fields.FIRE:
        verb = 'Fire'
    else:
        verb = 'Publish'

    logger.info("%s%s message to '%s' channel%s%s%s", verb, compressed, call.channel, metadata, stored, message)



def size(call, context):
    """ Start a size estimate for *call*, returning a :class:`PendingCall`.
        The completion handler, if any, is invoked as
        ``completion(size, error)``; *size* is -1 when *error* is set.
    """

    seqn = context.sequence.peek()
    pending = PendingCall(seqn)

    context.worker.submit(_size, call, context, seqn, pending)
    return pending



def _size(call, context, seqn, pending):

    error = None

    try:
        prepared = prepare(call, context.config, seqn)
    except (EncodeError, CryptoError) as e:
        error = SizeComputationError('cannot compute message size: ' + str(e))
        error.__cause__ = e
        result = -1
    except Exception as e:
        logger.exception("size estimate failed while preparing the request for '%s'", call.channel)
        error = SizeComputationError('cannot compute message size: ' + str(e))
        error.__cause__ = e
        result = -1
    else:
        try:
            result = context.transport.estimate_size(call.operation, prepared.parameters, prepared.body)
        except Exception as e:
            logger.exception("size estimate failed for '%s'", call.channel)
            error = SizeComputationError('cannot compute message size: ' + str(e))
            error.__cause__ = e
            result = -1

    _deliver(context, call.completion, (result, error), (result, error), pending)



def _deliver(context, completion, arguments, result, pending):
    context.callbacks.submit(_invoke, completion, arguments, result, pending)



def _invoke(completion, arguments, result, pending):

    if completion is not None:
        try:
            completion(*arguments)
        except Exception:
            logger.exception("completion handler raised an exception")

    pending._complete(result)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
