"""Tests for the xml module."""

import pytest

from sonosdeck import xml


def test_ns_tag():
    """Test the ns_tag function."""
    namespaces = [
        "http://purl.org/dc/elements/1.1/",
        "urn:schemas-upnp-org:metadata-1-0/upnp/",
        "urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/",
        "urn:schemas-rinconnetworks-com:metadata-1-0/",
    ]
    for ns_in, namespace in zip(["dc", "upnp", "", "r"], namespaces):
        res = xml.ns_tag(ns_in, "testtag")
        correct = "{{{}}}{}".format(namespace, "testtag")
        assert res == correct


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("{urn:schemas-upnp-org:metadata-1-0/upnp/}albumArtURI", "albumArtURI"),
        ("u:GetVolumeResponse", "GetVolumeResponse"),
        ("r:streamContent", "streamContent"),
        ("CurrentVolume", "CurrentVolume"),
    ],
)
def test_local_name(tag, expected):
    assert xml.local_name(tag) == expected


def test_parse_lenient():
    assert xml.parse_lenient("<a>b</a>").text == "b"
    # Control characters are filtered out on the second attempt
    assert xml.parse_lenient("<a>b\x07c</a>").text == "bc"
    with pytest.raises(xml.XML.ParseError):
        xml.parse_lenient("<a>")
