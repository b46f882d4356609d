""" The :class:`Status` is what every publish call ultimately delivers to
    its completion handler: either an acknowledgment from the server, or a
    description of what went wrong.
"""

from . import fields


class Status:
    """ The outcome of a single request. The fields are:

        :ivar operation: The operation kind, for example ``'PUBLISH'``.
        :ivar category: One of the status categories defined in
            :mod:`pubpipe.protocol.fields`.
        :ivar error: The exception describing the failure, or None.
        :ivar data: A dictionary of operation-specific response data; for a
            successful publish this contains the server-assigned
            ``timetoken`` and the ``information`` string.
        :ivar status_code: The transport-level status code, if any.
    """

    def __init__(self, operation, category=fields.ACKNOWLEDGMENT, error=None, data=None, status_code=None):

        self.operation = operation
        self.category = category
        self.error = error
        self.status_code = status_code

        if data is None:
            data = dict()

        self.data = data

        self._retry = None


    def __repr__(self):

        if self.error is None:
            return 'Status(%s, %s, %r)' % (self.operation, self.category, self.data)
        else:
            return 'Status(%s, %s, error=%r)' % (self.operation, self.category, self.error)


    @classmethod
    def failure(cls, operation, category, error, status_code=None):
        """ Construct an error :class:`Status` for the provided *error*.
        """

        return cls(operation, category, error=error, status_code=status_code)


    @property
    def is_error(self):
        return self.error is not None


    @property
    def timetoken(self):
        """ The server-assigned timetoken for a successful publish, which is
            opaque to the client; None if no timetoken was reported.
        """

        return self.data.get('timetoken')


    @property
    def retryable(self):
        return self._retry is not None


    def attach_retry(self, retry):
        """ Associate a zero-argument callable with this :class:`Status`.
            Only dispatch failures are retryable.
        """

        if callable(retry):
            pass
        else:
            raise TypeError('retry must be callable')

        self._retry = retry


    def retry(self):
        """ Run the entire request again with the original arguments. The
            outcome of the new attempt is delivered to the original completion
            handler; the return value is the handle for the new attempt.
        """

        if self._retry is None:
            raise RuntimeError('this status is not retryable: ' + repr(self))

        return self._retry()


# end of class Status


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
