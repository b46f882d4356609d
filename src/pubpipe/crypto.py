""" Symmetric encryption of published messages. The cipher is AES-256 in CBC
    mode with PKCS#7 padding; the 32-byte key is the leading 32 characters of
    the hexadecimal SHA-256 digest of the configured cipher key. Ciphertext
    is Base64-encoded and then wrapped as a JSON string literal, so that the
    encrypted message is itself valid JSON from the server's perspective.

    With *random_iv* enabled a fresh 16-byte initialization vector is
    generated per message and prepended to the ciphertext; otherwise the
    fixed legacy vector is used, which makes the output deterministic.
"""

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from . import json
from .errors import CryptoError, EncodeError

legacy_iv = b'0123456789012345'
block_size = 128


def derive_key(cipher_key):
    """ Return the AES key bytes for the provided *cipher_key* string.
    """

    digest = hashlib.sha256(cipher_key.encode('utf-8')).hexdigest()
    return digest[:32].encode('ascii')



def encrypt(text, key, random_iv=False):
    """ Encrypt the JSON *text* under *key*. An empty or absent *key* is an
        identity passthrough: the original *text* is returned unchanged.
        Failures of any kind are raised as :class:`CryptoError`.
    """

    if not key:
        return text

    try:
        if random_iv:
            iv = os.urandom(16)
        else:
            iv = legacy_iv

        padder = padding.PKCS7(block_size).padder()
        padded = padder.update(text.encode('utf-8')) + padder.finalize()

        encryptor = Cipher(algorithms.AES(derive_key(key)), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        if random_iv:
            encrypted = iv + encrypted

        encoded = base64.b64encode(encrypted).decode('ascii')
        return json.encode(encoded)

    except (ValueError, TypeError, AttributeError, EncodeError) as e:
        raise CryptoError('encryption failed: ' + str(e)) from e



def decrypt(text, key, random_iv=False):
    """ The inverse of :func:`encrypt`: accepts the JSON string literal
        produced by :func:`encrypt` and returns the original text.
    """

    if not key:
        return text

    try:
        encoded = json.decode(text)
        encrypted = base64.b64decode(encoded, validate=True)

        if random_iv:
            iv = encrypted[:16]
            encrypted = encrypted[16:]
        else:
            iv = legacy_iv

        decryptor = Cipher(algorithms.AES(derive_key(key)), modes.CBC(iv)).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()

        unpadder = padding.PKCS7(block_size).unpadder()
        decrypted = unpadder.update(padded) + unpadder.finalize()

        return decrypted.decode('utf-8')

    except (ValueError, TypeError, binascii.Error) + json.decode_errors as e:
        raise CryptoError('decryption failed: ' + str(e)) from e


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
