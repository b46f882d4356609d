""" Exceptions raised within the publish pipeline. Every one of these is
    caught at the pipeline boundary and delivered to the caller's completion
    handler as part of a :class:`pubpipe.protocol.status.Status`; none of
    them are expected to escape a :func:`pubpipe.client.Client.publish`
    call.
"""


class PubpipeError(Exception):
    """Base class for all publish pipeline errors."""


class EncodeError(PubpipeError):
    """A message or its metadata cannot be represented as JSON."""


class CryptoError(PubpipeError):
    """Encryption failed under the configured cipher key."""


class DispatchError(PubpipeError):
    """The transport failed to deliver a request. The only retryable error."""


class SizeComputationError(PubpipeError):
    """ The size of a message could not be computed, because the message
        could not be encoded or encrypted. The underlying error is available
        as the ``__cause__`` attribute.
    """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
