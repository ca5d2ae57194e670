"""This module contains configuration variables.

They may be set by your code as follows::

    from sonosdeck import config
    ...
    config.VARIABLE = value
"""

DEFAULT_PORT = 1400
"""The port on which Sonos devices accept UPnP control requests.

Used when `SonosController.connect` is called without a port. It is also
the port used to build absolute album art URIs from the relative paths
returned by the devices.
"""

REQUEST_TIMEOUT = 5.0
"""The timeout (in seconds) to be used when sending commands to a Sonos device.

It can be a float, an int, or None. If set to 'None', calls can potentially
wait indefinitely. The same timeout is applied to every request issued by a
group command, so a single unreachable group member cannot hold up the
others for longer than this.

REQUEST_TIMEOUT is read each time a transport is created. It can be
overridden for a specific transport by using the 'timeout' kwarg of
`SoapTransport`.
"""

SHARE_LINK_TITLE = "Sonos Deck"
"""The title placed in the metadata generated for music service share links.

Sonos displays this until the music service supplies the real title of the
item being played.
"""
