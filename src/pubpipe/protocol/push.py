""" Merging of a published message with mobile push payloads. The server
    fans out any ``pn_``-prefixed fields of a message to the corresponding
    vendor push gateway; everything else is delivered to subscribers as
    usual.
"""

from collections.abc import Mapping

from .fields import APNS_KEY, APNS_TOKEN, PUSH_OTHER, PUSH_PREFIX


def merge(base, payloads):
    """ Combine the *base* message with the vendor *payloads*, returning a
        new dictionary; neither argument is modified.

        A *base* that is itself a mapping contributes its fields directly.
        Any other non-None *base* (including an already-encrypted message,
        which is a string) is stored under the ``pn_other`` key.

        Vendor tokens already carrying the ``pn_`` prefix are used verbatim.
        Other tokens are prefixed; the Apple token ``aps`` is special, its
        payload is wrapped as ``{'aps': payload}`` and stored as
        ``pn_apns``. If two tokens map to the same key, the last one wins.

        Callers are expected to skip the merge entirely if there are no
        payloads.
    """

    if isinstance(base, Mapping):
        merged = dict(base)
    else:
        merged = dict()
        if base is not None:
            merged[PUSH_OTHER] = base

    for token, payload in payloads.items():
        if token.startswith(PUSH_PREFIX):
            key = token
        elif token == APNS_TOKEN:
            key = APNS_KEY
            payload = {APNS_TOKEN: payload}
        else:
            key = PUSH_PREFIX + token

        merged[key] = payload

    return merged


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
