"""ShareLink Plugin.

Plays the links which music service apps offer for sharing an album, track,
playlist or radio station, such as
``https://open.spotify.com/album/6wiUBliPe76YAVpNEdidpY``::

    >>> plugin = ShareLinkPlugin(controller)
    >>> await plugin.play_share_link(
    ...     "https://tidal.com/browse/album/157273956", start=True)

Links are recognised by the services of `SHARE_SERVICES`, tried in order.
"""

from collections import namedtuple
import logging
import re

from .. import config
from ..didl import to_didl_string
from ..exceptions import UnsupportedURIError
from ..plugins import SonosDeckPlugin
from ..utils import url_escape_path

_LOG = logging.getLogger(__name__)

ItemType = namedtuple("ItemType", "prefix, key, upnp_class")

#: Magic prefix/key/class values for each share type.
ITEM_TYPES = {
    "album": ItemType(
        "x-rincon-cpcontainer:1004206c", "00040000", "object.container.album.musicAlbum"
    ),
    "episode": ItemType("", "00032020", "object.item.audioItem.musicTrack"),
    "track": ItemType("", "00032020", "object.item.audioItem.musicTrack"),
    "song": ItemType("", "10032020", "object.item.audioItem.musicTrack"),
    "show": ItemType(
        "x-rincon-cpcontainer:1006206c", "1006206c", "object.container.playlistContainer"
    ),
    "playlist": ItemType(
        "x-rincon-cpcontainer:1006206c", "1006206c", "object.container.playlistContainer"
    ),
    "radio": ItemType(
        "x-sonosapi-stream:", "F00092020", "object.item.audioItem.audioBroadcast"
    ),
}


class ShareReference(
    namedtuple("ShareReferenceBase", "provider_id, item_type, canonical_id, broadcast_id")
):
    """A music service item, as identified by a share link.

    ``broadcast_id`` is `None` except for radio stations.
    """

    def to_uri_and_metadata(self, title=None):
        """Return the URI and the matching metadata to play the item.

        The two are always generated together, since a device only plays a
        music service URI with the metadata made for it.

        Args:
            title (str, optional): The title shown until the service supplies
                one. Defaults to `config.SHARE_LINK_TITLE`.

        Returns:
            tuple: ``(uri, metadata)``
        """
        item_type = ITEM_TYPES[self.item_type]
        encoded_id = url_escape_path(self.canonical_id)

        uri = item_type.prefix + encoded_id
        if self.broadcast_id:
            uri += "?sid={}".format(self.broadcast_id)

        metadata = to_didl_string(
            provider_id=self.provider_id,
            item_key=item_type.key + encoded_id,
            title=config.SHARE_LINK_TITLE if title is None else title,
            upnp_class=item_type.upnp_class,
        )
        return uri, metadata


class ShareClass:
    """Base class for supported services."""

    #: The pattern of the share links of the service.
    pattern = None

    def service_number(self):
        """Return the service number.

        Returns:
            int: A number identifying the supported music service.
        """
        raise NotImplementedError

    @staticmethod
    def match_groups(match):
        """Return ``(item_type, item_id)`` from a match of `pattern`."""
        return match.group(1), match.group(2)

    def canonical_id(self, item_type, item_id):
        """Return ``(item_type, canonical_id)`` for the service."""
        raise NotImplementedError

    def broadcast_id(self):
        """Return the broadcast id of the service's streams, if any."""
        return None

    def extract(self, uri):
        """Extract the share type and canonical id from a share link.

        Returns:
            tuple: ``(item_type, canonical_id, broadcast_id)``, or `None`
            if the link is not one of this service's.
        """
        match = self.pattern.search(uri)
        if match is None:
            return None
        item_type, canonical_id = self.canonical_id(*self.match_groups(match))
        return (item_type, canonical_id, self.broadcast_id())


class SpotifyShare(ShareClass):
    """Spotify share class."""

    pattern = re.compile(r"spotify.*[:/](album|episode|playlist|show|track)[:/](\w+)")

    def service_number(self):
        return 2311

    def canonical_id(self, item_type, item_id):
        return item_type, "spotify:{}:{}".format(item_type, item_id)


class TIDALShare(ShareClass):
    """TIDAL share class."""

    pattern = re.compile(r"https://tidal.*[:/](album|track|playlist)[:/]([\w-]+)")

    def service_number(self):
        return 44551

    def canonical_id(self, item_type, item_id):
        return item_type, "{}/{}".format(item_type, item_id)


class DeezerShare(ShareClass):
    """Deezer share class."""

    pattern = re.compile(r"https://www.deezer.*[:/](album|track|playlist)[:/]([\w-]+)")

    def service_number(self):
        return 519

    def canonical_id(self, item_type, item_id):
        return item_type, "{}-{}".format(item_type, item_id)


class AppleMusicShare(ShareClass):
    """Apple Music share class.

    A link to an album with an ``?i=`` parameter selects a single song of
    the album.
    """

    pattern = re.compile(
        r"https://music\.apple\.com/\w+/(album|playlist)/[^/]+/(?:pl\.)?"
        r"([-a-zA-Z0-9]+)(?:\?i=(\d+))?"
    )

    def service_number(self):
        return 52231

    @staticmethod
    def match_groups(match):
        if match.group(3):
            return "song", match.group(3)
        return match.group(1), match.group(2)

    def canonical_id(self, item_type, item_id):
        return item_type, "{}:{}".format(item_type, item_id)


class TuneInShare(ShareClass):
    """TuneIn share class, for radio stations."""

    pattern = re.compile(r"https://tunein.com/(radio)/.*(s\d+)")

    def service_number(self):
        return 65031

    def canonical_id(self, item_type, item_id):
        return item_type, item_id

    def broadcast_id(self):
        return 254


#: The supported services, in the order they are tried. The first service
#: which recognises a link wins.
SHARE_SERVICES = (
    SpotifyShare,
    TIDALShare,
    DeezerShare,
    AppleMusicShare,
    TuneInShare,
)


class ShareLinkResolver:
    """Turns share links into `ShareReference` instances."""

    def __init__(self, services=SHARE_SERVICES):
        """
        Args:
            services (Iterable): `ShareClass` subclasses, in priority order.
        """
        self.services = [service() for service in services]

    def resolve(self, uri):
        """Identify the item behind a share link.

        Returns:
            ShareReference: The item, or `None` if no service recognises the
            link.
        """
        for service in self.services:
            extracted = service.extract(uri)
            if extracted is not None:
                item_type, canonical_id, broadcast_id = extracted
                _LOG.debug(
                    "%s recognised %s as %s %s",
                    service.__class__.__name__,
                    uri,
                    item_type,
                    canonical_id,
                )
                return ShareReference(
                    service.service_number(), item_type, canonical_id, broadcast_id
                )
        return None

    def is_share_link(self, uri):
        """bool: Is the URI for a supported music service."""
        return self.resolve(uri) is not None


_DEFAULT_RESOLVER = ShareLinkResolver()


def resolve(uri):
    """Identify the item behind a share link, trying `SHARE_SERVICES` in
    order. Returns `None` if the link is not recognised."""
    return _DEFAULT_RESOLVER.resolve(uri)


class ShareLinkPlugin(SonosDeckPlugin):
    """A sonosdeck plugin for playing Spotify/TIDAL/Deezer/Apple Music/TuneIn
    share links."""

    def __init__(self, controller, services=SHARE_SERVICES):
        """Initialize the plugin."""
        super().__init__(controller)
        self.resolver = ShareLinkResolver(services)

    @property
    def name(self):
        return "ShareLink Plugin"

    def is_share_link(self, uri):
        """bool: Is the URI for a supported music service."""
        return self.resolver.is_share_link(uri)

    async def play_share_link(self, uri, start=False, title=None):
        """Make a share link the source of the group.

        Radio stations become the source directly, other items are added to
        the queue, as for `SonosController.set_service_uri`.

        Args:
            uri (str): A link like
                "https://open.spotify.com/album/6wiUBliPe76YAVpNEdidpY".
            start (bool): Start playback once the source is set.
            title (str, optional): The title to show until the service
                provides one.

        Raises:
            UnsupportedURIError: if the link is not for a supported service.
        """
        reference = self.resolver.resolve(uri)
        if reference is None:
            raise UnsupportedURIError("Unsupported URI: " + uri)

        service_uri, metadata = reference.to_uri_and_metadata(title)
        result = await self.controller.set_service_uri(service_uri, metadata)
        if start:
            await self.controller.play()
        return result
