"""Reading and writing DIDL-Lite metadata.

Sonos describes tracks, favorites and queue items with small DIDL-Lite XML
documents. This module turns those documents into plain records, and builds
the single item documents which accompany music service URIs when they are
sent to a device.
"""

from collections import namedtuple
import logging

from . import config
from .exceptions import ProtocolError
from .utils import element_text, escape_xml
from .xml import XML, local_name, ns_tag, parse_lenient

_LOG = logging.getLogger(__name__)

DIDL_TEMPLATE = (
    '<DIDL-Lite xmlns:dc="http://purl.org/dc/elements/1.1/"'
    ' xmlns:upnp="urn:schemas-upnp-org:metadata-1-0/upnp/"'
    ' xmlns:r="urn:schemas-rinconnetworks-com:metadata-1-0/"'
    ' xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/">'
    '<item id="{item_id}" restricted="true">'
    "<dc:title>{title}</dc:title>"
    "<upnp:class>{item_class}</upnp:class>"
    '<desc id="cdudn" nameSpace="urn:schemas-rinconnetworks-com:metadata-1-0/">'
    "SA_RINCON{provider_id}_</desc>"
    "</item></DIDL-Lite>"
)

# Devices return this as track metadata when playing from line-in
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


class TrackMetadata(
    namedtuple("TrackMetadataBase", "title, artist, stream_content, album_art_uri, album")
):
    """The fields Sonos puts in the metadata of the current item.

    Any field may be `None`.
    """

    @property
    def display_title(self):
        """str: The best title to show for the item.

        Radio streams have no artist, and put the current song in the stream
        content instead of the title.
        """
        if self.artist:
            return self.title
        return self.stream_content or self.title


class BrowseItem(namedtuple("BrowseItemBase", "title, uri, metadata, album_art_uri")):
    """An entry of a ContentDirectory listing.

    ``uri`` and ``metadata`` can be passed back unchanged to
    `SonosController.set_service_uri` to play the entry.
    """


def build_album_art_full_uri(url, host, port=None):
    """Ensure an Album Art URI is an absolute URI.

    Args:
         url (str): the album art URI.
         host (str): the host of the device which returned the URI.
         port (int): the device's control port. Defaults to
            `config.DEFAULT_PORT`.

    Returns:
        str: An absolute URI, or `None` if ``url`` is empty.
    """
    if not url:
        return None
    # Add on the full album art link, as the URI version
    # does not include the ipaddress
    if not url.startswith(("http:", "https:")):
        url = "http://{}:{}{}".format(host, port or config.DEFAULT_PORT, url)
    return url


def _parse(xml_string):
    try:
        return parse_lenient(xml_string)
    except XML.ParseError as error:
        raise ProtocolError("Invalid DIDL-Lite metadata: {}".format(error)) from error


def _first_entry(tree):
    """Return the first item of a DIDL-Lite document, or its first container
    if there are no items."""
    if local_name(tree.tag) != "DIDL-Lite":
        return tree if local_name(tree.tag) in ("item", "container") else None
    for tag in ("item", "container"):
        entry = tree.find(ns_tag("", tag))
        if entry is not None:
            return entry
    return None


def from_didl_string(xml_string, host, port=None):
    """Decode the metadata of a single item.

    Args:
        xml_string (str): A DIDL-Lite document, as returned in the
            ``TrackMetaData`` or ``CurrentURIMetaData`` fields.
        host (str): The host of the device which returned the document, used
            to make the album art URI absolute.
        port (int): The device's control port.

    Returns:
        TrackMetadata: The decoded fields, or `None` if there is no metadata
        (an empty string, ``NOT_IMPLEMENTED`` or a document without items).

    Raises:
        ProtocolError: if the document is not well formed XML.
    """
    if not xml_string or xml_string == NOT_IMPLEMENTED:
        return None

    entry = _first_entry(_parse(xml_string))
    if entry is None:
        _LOG.debug("No item found in metadata %s", xml_string)
        return None

    return TrackMetadata(
        title=element_text(entry, ns_tag("dc", "title")),
        artist=element_text(entry, ns_tag("dc", "creator")),
        stream_content=element_text(entry, ns_tag("r", "streamContent")),
        album_art_uri=build_album_art_full_uri(
            element_text(entry, ns_tag("upnp", "albumArtURI")), host, port
        ),
        album=element_text(entry, ns_tag("upnp", "album")),
    )


def to_didl_string(provider_id, item_key, title, upnp_class):
    """Build the metadata for a music service item.

    Args:
        provider_id (int): The Sonos number of the music service, which ends
            up in the ``SA_RINCON{provider_id}_`` credential token.
        item_key (str): The item id, i.e. the service specific key prefix
            followed by the encoded item id.
        title (str): The title to show until the service provides one.
        upnp_class (str): The UPnP object class of the item.

    Returns:
        str: A DIDL-Lite document with a single item.
    """
    return DIDL_TEMPLATE.format(
        item_id=escape_xml(item_key),
        title=escape_xml(title),
        item_class=escape_xml(upnp_class),
        provider_id=provider_id,
    )


def parse_browse_result(xml_string, host, port=None):
    """Parse the ``Result`` field of a ContentDirectory ``Browse`` response.

    Args:
        xml_string (str): The DIDL-Lite listing.
        host (str): The host of the device which returned the listing.
        port (int): The device's control port.

    Returns:
        list(BrowseItem): One entry per item or container, in document
        order.
    """
    if not xml_string:
        return []

    entries = []
    for element in _parse(xml_string):
        if local_name(element.tag) not in ("item", "container"):
            continue
        entries.append(
            BrowseItem(
                title=element.findtext(ns_tag("dc", "title")) or "",
                uri=element.findtext(ns_tag("", "res")) or "",
                metadata=element.findtext(ns_tag("r", "resMD")) or "",
                album_art_uri=build_album_art_full_uri(
                    element_text(element, ns_tag("upnp", "albumArtURI")), host, port
                ),
            )
        )
    return entries
