"""
pubpipe Protocol Layer
======================

This package defines how a publish request is shaped before it reaches a
transport. It holds pure data structures and pure functions only.

The protocol layer MUST NOT depend on any transport implementation
(e.g. HTTP, ZeroMQ, etc).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Client facade (pubpipe.client)
    - publish()
    - fire()
    - size()
    - *_builder()

    │
    ▼
Call Builder (builder.py)
    Fluent construction of a single call
    - Applies option defaults

    │
    ▼
Publish Pipeline (pubpipe.publish)
    encode -> encrypt -> merge -> assemble -> compress -> dispatch

    │
    ▼
Request Shaping (push.py, parameters.py, options.py)
    - Push payload merge
    - Path/query assembly
    - Publish options

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names for path/query/status values

---------------------------------------------------------------------
"""

from . import fields
from . import options
from . import parameters
from . import push
from . import status
from . import builder

from .options import PublishOptions
from .parameters import RequestParameters
from .status import Status
