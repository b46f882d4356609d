"""Protocol constants.

Keep these in one place to avoid stringly-typed request handling.
"""

# Operation kinds handed to a transport.
PUBLISH = "PUBLISH"
FIRE = "FIRE"

# Path placeholders.
CHANNEL = "{channel}"
MESSAGE = "{message}"

# Query fields, in the order they are emitted.
STORE = "store"
TTL = "ttl"
NOREP = "norep"
META = "meta"
SEQN = "seqn"

# Push payload merging.
PUSH_PREFIX = "pn_"
PUSH_OTHER = "pn_other"
APNS_TOKEN = "aps"
APNS_KEY = "pn_apns"

# Status categories.
ACKNOWLEDGMENT = "acknowledgment"
ENCODE_ERROR = "encode_error"
CRYPTO_ERROR = "crypto_error"
DISPATCH_ERROR = "dispatch_error"
