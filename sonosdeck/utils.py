"""This module contains utility functions used internally by sonosdeck."""

import re
from urllib.parse import quote as quote_url
from xml.sax.saxutils import escape

# Characters left unescaped by JavaScript's encodeURIComponent, which is how
# the Sonos apps encode music service item ids. quote() already keeps
# letters, digits and "_.-~".
URI_COMPONENT_SAFE = "!*'()"

HOST_FROM_LOCATION_RE = re.compile(r"http://([^:/]+)")


def escape_xml(value):
    """Escape a value for use as XML text or an attribute value.

    The value is converted to a string first. `None` becomes the empty
    string, since devices expect every argument to be present.

        >>> escape_xml('Tom & "Jerry" <3')
        'Tom &amp; &quot;Jerry&quot; &lt;3'
    """
    if value is None:
        return ""
    return escape("%s" % value, {'"': "&quot;", "'": "&apos;"})


def url_escape_path(path):
    """Escape a string value for a URL request path.

    Args:
        str: The path to escape

    Returns:
        str: The escaped path

    >>> url_escape_path("Foo, bar & baz / the hackers")
    'Foo%2C%20bar%20%26%20baz%20%2F%20the%20hackers'
    """
    return quote_url(path, safe=URI_COMPONENT_SAFE)


def host_from_location(location):
    """Extract the host from a device description URL.

    Example Location contents:
      http://192.168.1.100:1400/xml/device_description.xml

    Returns:
        str: The host, or `None` if the location is not an http URL.
    """
    if not location:
        return None
    match = HOST_FROM_LOCATION_RE.match(location)
    return match.group(1) if match else None


def prettify(unicode_text):
    """Return a pretty-printed version of a unicode XML string.

    Useful for debugging.

    Args:
        unicode_text (str): A text representation of XML (unicode,
            *not* utf-8).

    Returns:
        str: A pretty-printed version of the input.

    """
    import xml.dom.minidom  # pylint: disable=import-outside-toplevel

    reparsed = xml.dom.minidom.parseString(unicode_text.encode("utf-8"))
    return reparsed.toprettyxml(indent="  ", newl="\n")


def element_text(element, path):
    """Return the text of the first element matching ``path``, or `None`.

    Empty elements are treated as missing.
    """
    found = element.find(path)
    if found is None or not found.text:
        return None
    return found.text

