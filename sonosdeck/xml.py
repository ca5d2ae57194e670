# pylint: disable=invalid-name,redefined-builtin

"""This module contains XML related utility functions."""


import sys
import re

import xml.etree.ElementTree as XML


# Create regular expression for filtering invalid characters, from:
# http://stackoverflow.com/questions/1707890/
# fast-way-to-filter-illegal-xml-unicode-chars-in-python

illegal_unichrs = [
    (0x00, 0x08),
    (0x0B, 0x0C),
    (0x0E, 0x1F),
    (0x7F, 0x84),
    (0x86, 0x9F),
    (0xD800, 0xDFFF),
    (0xFDD0, 0xFDDF),
    (0xFFFE, 0xFFFF),
    (0x1FFFE, 0x1FFFF),
    (0x10FFFE, 0x10FFFF),
]

illegal_ranges = [
    "{}-{}".format(chr(low), chr(high))
    for (low, high) in illegal_unichrs
    if low < sys.maxunicode
]

illegal_xml_re = re.compile("[%s]" % "".join(illegal_ranges))


#: Commonly used namespaces, and abbreviations, used by `ns_tag`.
NAMESPACES = {
    "dc": "http://purl.org/dc/elements/1.1/",
    "upnp": "urn:schemas-upnp-org:metadata-1-0/upnp/",
    "": "urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/",
    "r": "urn:schemas-rinconnetworks-com:metadata-1-0/",
    "s": "http://schemas.xmlsoap.org/soap/envelope/",
}

# Register common namespaces to assist in serialisation (avoids the ns:0
# prefixes in XML output )
for prefix, uri in NAMESPACES.items():
    XML.register_namespace(prefix, uri)


def ns_tag(ns_id, tag):
    """Return a namespace/tag item.

    Args:
        ns_id (str): A namespace id, eg ``"dc"`` (see `NAMESPACES`)
        tag (str): An XML tag, eg ``"author"``

    Returns:
        str: A fully qualified tag.

    The ns_id is translated to a full name space via the :const:`NAMESPACES`
    constant::

        >>> xml.ns_tag('dc','author')
        '{http://purl.org/dc/elements/1.1/}author'
    """
    return "{{{}}}{}".format(NAMESPACES[ns_id], tag)


def local_name(tag):
    """Strip any namespace from a tag name.

    Handles both the ``{uri}name`` form produced by ElementTree and raw
    ``prefix:name`` forms, keeping whatever follows the last ``}`` or ``:``.

        >>> xml.local_name('{urn:schemas-upnp-org:metadata-1-0/upnp/}class')
        'class'
        >>> xml.local_name('u:PlayResponse')
        'PlayResponse'
    """
    return re.split(r"[}:]", tag)[-1]


def parse_lenient(text):
    """Parse an XML string, filtering illegal characters if needed.

    Some devices return text (typically radio stream titles) containing
    characters which are not legal in XML. If the first parse fails, the
    illegal characters are removed and the text parsed again.

    Args:
        text (str): The XML document.

    Returns:
        `xml.etree.ElementTree.Element`: the root element.

    Raises:
        `xml.etree.ElementTree.ParseError`: if the filtered text is still not
            well formed.
    """
    try:
        return XML.fromstring(text.encode("utf-8"))
    except XML.ParseError:
        filtered = illegal_xml_re.sub("", text)
        return XML.fromstring(filtered.encode("utf-8"))
