"""sonosdeck is an asyncio library to control the group of a Sonos speaker."""

import logging

from .core import SonosController
from .exceptions import (
    EnqueueError,
    GroupCommandError,
    NotConnectedError,
    ProtocolError,
    SonosDeckException,
    TransportError,
    UnsupportedURIError,
    UPnPError,
)

# Please increment the version number and add the suffix "-dev" after
# a release, to make it possible to identify in-development code
__version__ = "0.1.0"
__license__ = "MIT License"

# You really should not `import *` - it is poor practice
# but if you do, here is what you get:
__all__ = [
    "SonosController",
    "SonosDeckException",
    "TransportError",
    "UPnPError",
    "ProtocolError",
    "NotConnectedError",
    "UnsupportedURIError",
    "EnqueueError",
    "GroupCommandError",
]

# http://docs.python.org/2/howto/logging.html#library-config
# Avoids spurious error messages if no logger is configured by the user

logging.getLogger(__name__).addHandler(logging.NullHandler())
