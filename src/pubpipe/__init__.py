""" Python implementation of a pub/sub publishing client. This covers the
    client side of a publish: serializing, encrypting, compressing and
    enriching a message with mobile push payloads, then handing the request
    to a transport and reporting the outcome.
"""

# Utility components.

from . import errors
from . import json
from . import compress
from . import crypto
from . import sequence

# Submodules used by multiple other components.

from . import protocol
from . import config
home = config.directory

from . import transport
from . import publish

# Primary public-facing interfaces.

from .client import Client
from .config import Configuration
from .protocol import PublishOptions, Status

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
