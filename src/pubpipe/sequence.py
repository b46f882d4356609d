""" Per-client sequence numbers attached to every published message. Each
    :class:`Sequence` hands out unique, strictly increasing values; the
    value last handed out can optionally be persisted to disk so that a
    restarted client picks up where the previous instance left off.
"""

import logging
import os
import tempfile
import threading

from . import json

logger = logging.getLogger(__name__)

minimum = 1
maximum = 0xFFFFFFFF


class Sequence:
    """ A thread-safe source of sequence numbers. :func:`allocate` advances
        the counter and returns the new value; :func:`peek` returns the value
        the next :func:`allocate` call would return, without advancing
        anything.

        If a *path* is provided the most recently allocated value is written
        to that file after every allocation, and read back upon
        construction.
    """

    def __init__(self, path=None):

        self.path = path
        self._lock = threading.Lock()
        self._last = minimum - 1

        if path is not None:
            self._last = self._load()


    def allocate(self):
        """ Advance the counter and return the newly allocated value. Calls
            are serialized; concurrent callers each receive a distinct value
            reflecting the order in which they acquired the lock.
        """

        with self._lock:
            value = self._next()
            self._last = value

            if self.path is not None:
                self._save(value)

        return value


    def peek(self):
        """ Return the value the next :func:`allocate` call will produce.
        """

        with self._lock:
            return self._next()


    def _next(self):

        value = self._last + 1

        # Zero is never handed out.

        if value > maximum:
            value = minimum

        return value


    def _load(self):

        try:
            with open(self.path, 'rb') as file:
                contents = file.read()
        except FileNotFoundError:
            return minimum - 1
        except OSError as e:
            logger.warning("cannot read sequence state in %s: %s", self.path, e)
            return minimum - 1

        try:
            state = json.loads(contents)
            last = int(state['last'])
        except (ValueError, KeyError, TypeError) + json.decode_errors:
            logger.warning("ignoring unreadable sequence state in %s", self.path)
            return minimum - 1

        if last < minimum - 1 or last > maximum:
            logger.warning("ignoring out-of-range sequence state in %s", self.path)
            return minimum - 1

        return last


    def _save(self, value):
        """ Persist *value*. A failure to write is logged and otherwise
            ignored; the in-memory counter remains authoritative.
        """

        directory = os.path.dirname(self.path)
        contents = json.dumps({'last': value})
        temporary = None

        # The state file is replaced whole, never rewritten in place. Other
        # instances may write the same path concurrently.

        try:
            if directory and not os.path.isdir(directory):
                os.makedirs(directory, mode=0o775, exist_ok=True)

            descriptor, temporary = tempfile.mkstemp(dir=directory or os.curdir, prefix='.sequence-', suffix='.tmp')

            with os.fdopen(descriptor, 'wb') as file:
                file.write(contents)

            os.replace(temporary, self.path)
            temporary = None

        except OSError as e:
            logger.warning("cannot save sequence state to %s: %s", self.path, e)

        finally:
            if temporary is not None:
                try:
                    os.unlink(temporary)
                except OSError as e:
                    logger.debug("cannot remove %s: %s", temporary, e)


# end of class Sequence


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
