""" Client configuration. A :class:`Configuration` is assembled once when a
    client is created; every publish call captures an immutable snapshot of
    it (see :func:`Configuration.copy`) so that later changes to the client
    never affect a pipeline that is already running.
"""

import copy
import os
import uuid as uuidmodule


defaults = dict(
    publish_key=None,
    subscribe_key=None,
    uuid=None,
    auth_key=None,
    cipher_key=None,
    random_iv=False,
    origin='ps.pndsn.com',
    secure=True,
    request_timeout=10.0,
    transport='http',
    zmq_address=None,
    application_extension_group=None,
)

booleans = set(('random_iv', 'secure'))
floats = set(('request_timeout',))
untruths = set(('', '0', 'false', 'f', 'no', 'n', 'off'))


class Configuration:
    """ Settings for a single client. Every field listed in
        :data:`defaults` can also be provided by an environment variable
        named ``PUBPIPE_`` plus the upper-case field name, for example
        ``PUBPIPE_PUBLISH_KEY``; keyword arguments take precedence over
        the environment.

        If no *uuid* is available one is generated, so that it remains stable
        for the lifetime of this instance.
    """

    def __init__(self, **kwargs):

        unknown = set(kwargs) - set(defaults)
        if unknown:
            raise TypeError('unknown configuration fields: ' + ', '.join(sorted(unknown)))

        for field, default in defaults.items():
            try:
                value = kwargs[field]
            except KeyError:
                value = from_environment(field, default)

            setattr(self, field, value)

        if self.uuid is None:
            self.uuid = str(uuidmodule.uuid4())


    def __repr__(self):

        shown = list()
        for field in defaults:
            value = getattr(self, field)

            # Never show secrets in log output.
            if field == 'cipher_key' and value:
                value = '<set>'

            shown.append('%s=%r' % (field, value))

        return 'Configuration(' + ', '.join(shown) + ')'


    @property
    def constrained_host(self):
        """ True if the client runs inside an application extension that
            shares a resource group with its host application. Background
            worker pools are not available in that environment.
        """

        return bool(self.application_extension_group)


    def copy(self):
        """ Return an independent copy of this configuration.
        """

        return copy.copy(self)


    def sequence_path(self):
        """ Return the location of the persisted sequence state for this
            configuration, or None if no publish key is set.
        """

        if not self.publish_key:
            return None

        base_dir = directory()
        return os.path.join(base_dir, 'sequence', self.publish_key + '.json')


# end of class Configuration



def from_environment(field, default=None):
    """ Return the value for *field* from the environment, converted to the
        type appropriate for that field; *default* is returned if the
        variable is not set.
    """

    name = 'PUBPIPE_' + field.upper()

    try:
        value = os.environ[name]
    except KeyError:
        return default

    if field in booleans:
        return value.strip().lower() not in untruths

    if field in floats:
        try:
            return float(value)
        except ValueError:
            raise ValueError('%s must be a number: %r' % (name, value))

    return value



def directory(default=None):
    """ Return the directory location where state files (such as persisted
        sequence numbers) are kept. This defaults to ``$HOME/.pubpipe``, but
        can be overridden by calling this method with a valid path, or by
        setting the ``PUBPIPE_HOME`` environment variable. Note that changes
        to the environment variable will be ignored unless it is set prior to
        the first invocation of this method.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        if os.path.exists(default):
            pass
        else:
            os.makedirs(default, mode=0o775)

        os.environ['PUBPIPE_HOME'] = default
        directory.found = default


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['PUBPIPE_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    found = os.path.join(os.path.expanduser('~'), '.pubpipe')
    directory.found = found
    return found


directory.found = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
