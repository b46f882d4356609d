""" The :class:`Client` is the public face of the publish pipeline. It owns
    the configuration, the sequence source, the transport, and the executors
    that pipeline runs are scheduled on.
"""

import concurrent.futures
import logging
from collections.abc import Mapping

from . import config as configmodule
from . import publish as pipeline
from . import transport as transportmodule
from .protocol import fields
from .protocol.builder import PublishBuilder
from .protocol.options import PublishOptions
from .sequence import Sequence

logger = logging.getLogger(__name__)


class Client:
    """ A publishing client. Keyword arguments not listed below are passed
        to :class:`pubpipe.config.Configuration`; a ready-made
        *configuration* may be passed instead.

        The remaining arguments replace the default collaborators:

        :param transport: A :class:`pubpipe.transport.Transport` instance;
            by default one is created according to the configuration.
        :param sequence: A :class:`pubpipe.sequence.Sequence` instance; by
            default one is created, persisted under
            :func:`pubpipe.config.directory` if a publish key is set.
        :param worker: The executor for the transform and dispatch stages.
        :param main: The executor used instead of *worker* when the client
            runs inside an application extension (see
            :attr:`pubpipe.config.Configuration.constrained_host`).
        :param callbacks: The executor completion handlers are invoked on.

        Executors created here are shut down by :func:`close`; executors
        passed in are left alone.
    """

    workers = 4

    def __init__(self, configuration=None, transport=None, sequence=None,
                 worker=None, main=None, callbacks=None, **kwargs):

        if configuration is None:
            configuration = configmodule.Configuration(**kwargs)
        elif kwargs:
            raise TypeError('pass either a configuration or keyword arguments, not both')

        self.config = configuration
        self._owned = list()

        if transport is None:
            transport = transportmodule.create(configuration)
            self._owned.append(transport)

        if sequence is None:
            sequence = Sequence(configuration.sequence_path())

        if configuration.constrained_host:
            if main is None:
                main = self._executor(1, 'pubpipe-main')
            worker = main
        elif worker is None:
            worker = self._executor(self.workers, 'pubpipe-worker')

        if callbacks is None:
            callbacks = self._executor(1, 'pubpipe-callback')

        self.transport = transport
        self.sequence = sequence
        self.worker = worker
        self.callbacks = callbacks


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    def _executor(self, workers, name):
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
        self._owned.append(executor)
        return executor


    def close(self):
        """ Wait for any pending calls to complete, then release the
            executors and transport created by this client.
        """

        owned = self._owned
        self._owned = list()

        # Pipeline runs hand off to the callback executor, so the worker
        # must drain before the callback executor is shut down.

        for thing in owned:
            if isinstance(thing, concurrent.futures.Executor) and thing is not self.callbacks:
                thing.shutdown(wait=True)

        for thing in owned:
            if thing is self.callbacks:
                thing.shutdown(wait=True)

        for thing in owned:
            if isinstance(thing, transportmodule.Transport):
                thing.close()


    def context(self):
        """ Return the :class:`pubpipe.publish.Context` for a new call,
            including a snapshot of the current configuration.
        """

        return pipeline.Context(self.config.copy(), self.sequence, self.transport, self.worker, self.callbacks)


    def publish(self, message, channel, payloads=None, options=None, metadata=None, completion=None):
        """ Publish *message* to *channel*, returning a
            :class:`pubpipe.publish.PendingCall`. The *completion* handler,
            if any, receives the resulting
            :class:`~pubpipe.protocol.status.Status`.

            *payloads* maps push vendor tokens to the payload for that
            vendor; *metadata* is a dictionary the service can use to filter
            messages; *options* is a
            :class:`~pubpipe.protocol.options.PublishOptions` instance.
        """

        call = self._call(message, channel, payloads, options, metadata, completion, fields.PUBLISH)
        return pipeline.publish(call, self.context())


    def fire(self, message, channel, payloads=None, options=None, metadata=None, completion=None):
        """ Publish a message that is neither stored in history nor
            replicated. Otherwise identical to :func:`publish`.
        """

        if options is None:
            options = PublishOptions()

        options = options.replace(should_store=False, replicate=False)

        call = self._call(message, channel, payloads, options, metadata, completion, fields.FIRE)
        return pipeline.publish(call, self.context())


    def size(self, message, channel, payloads=None, options=None, metadata=None, completion=None):
        """ Compute the size in bytes of the request that :func:`publish`
            would send for the same arguments, without sending anything and
            without consuming a sequence number. The *completion* handler,
            if any, is invoked as ``completion(size, error)``.
        """

        call = self._call(message, channel, payloads, options, metadata, completion, fields.PUBLISH)
        return pipeline.size(call, self.context())


    def publish_builder(self):
        return PublishBuilder(self.publish)


    def fire_builder(self):
        return PublishBuilder(self.fire, should_store=False, replicate=False)


    def size_builder(self):
        return PublishBuilder(self.size)


    def _call(self, message, channel, payloads, options, metadata, completion, operation):

        if not channel or not isinstance(channel, str):
            raise ValueError('a non-empty channel name is required')

        if payloads is not None and not isinstance(payloads, Mapping):
            raise TypeError('push payloads must be a mapping: ' + repr(payloads))

        if payloads:
            for token in payloads:
                if isinstance(token, str):
                    pass
                else:
                    raise TypeError('push payload vendor tokens must be strings: ' + repr(token))

        if options is None:
            options = PublishOptions()

        if completion is not None and not callable(completion):
            raise TypeError('completion must be callable')

        return pipeline.PublishCall(message, channel, payloads, options.resolved(),
                                    metadata, completion, operation)


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
