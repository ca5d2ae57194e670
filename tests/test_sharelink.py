"""Tests for the ShareLink plugin."""

from unittest import mock
from xml.etree import ElementTree

import pytest

from sonosdeck import config
from sonosdeck.exceptions import UnsupportedURIError
from sonosdeck.plugins import SonosDeckPlugin
from sonosdeck.plugins.sharelink import (
    ITEM_TYPES,
    SHARE_SERVICES,
    AppleMusicShare,
    DeezerShare,
    ShareLinkPlugin,
    ShareLinkResolver,
    ShareReference,
    SpotifyShare,
    TIDALShare,
    TuneInShare,
    resolve,
)
from sonosdeck.xml import ns_tag


@pytest.mark.parametrize(
    "uri, expected",
    [
        (
            "https://open.spotify.com/album/6wiUBliPe76YAVpNEdidpY?si=abc",
            ShareReference(2311, "album", "spotify:album:6wiUBliPe76YAVpNEdidpY", None),
        ),
        (
            "spotify:track:7lEptt4wbM0yJTvSG5EBof",
            ShareReference(2311, "track", "spotify:track:7lEptt4wbM0yJTvSG5EBof", None),
        ),
        (
            "https://open.spotify.com/episode/2G4Zl3rPtZ9nYSP6PTNBl6",
            ShareReference(
                2311, "episode", "spotify:episode:2G4Zl3rPtZ9nYSP6PTNBl6", None
            ),
        ),
        (
            "https://tidal.com/browse/album/157273956",
            ShareReference(44551, "album", "album/157273956", None),
        ),
        (
            "https://tidal.com/browse/playlist/5e2a2f4c-0c5d-4cd2-a5a4-6b0d3c1e7b3a",
            ShareReference(
                44551, "playlist", "playlist/5e2a2f4c-0c5d-4cd2-a5a4-6b0d3c1e7b3a", None
            ),
        ),
        (
            "https://www.deezer.com/en/playlist/5390258182",
            ShareReference(519, "playlist", "playlist-5390258182", None),
        ),
        (
            "https://music.apple.com/us/playlist/todays-hits/pl.f4d106fed2bd41149aaacabb233eb5eb",
            ShareReference(
                52231, "playlist", "playlist:f4d106fed2bd41149aaacabb233eb5eb", None
            ),
        ),
        (
            "https://tunein.com/radio/Radio-Paradise-s13606/",
            ShareReference(65031, "radio", "s13606", 254),
        ),
    ],
)
def test_resolve(uri, expected):
    assert resolve(uri) == expected


def test_resolve_apple_music_album_and_song():
    album = resolve("https://music.apple.com/us/album/foo/1234567890")
    assert album.item_type == "album"
    assert album.canonical_id == "album:1234567890"

    song = resolve("https://music.apple.com/us/album/foo/1234567890?i=999")
    assert song.item_type == "song"
    assert "999" in song.canonical_id
    assert song.canonical_id == "song:999"


@pytest.mark.parametrize(
    "uri",
    [
        "https://example.com/album/123",
        "https://soundcloud.com/artist/track",
        "x-sonosapi-stream:s13606?sid=254",
        "",
    ],
)
def test_resolve_unsupported(uri):
    assert resolve(uri) is None


def test_service_order():
    assert SHARE_SERVICES == (
        SpotifyShare,
        TIDALShare,
        DeezerShare,
        AppleMusicShare,
        TuneInShare,
    )


def test_first_match_wins():
    """A link matching several services goes to the earliest one."""
    uri = "https://tidal.com/browse/track/77646169?ref=spotify:track:abc"
    assert resolve(uri).provider_id == 2311
    reordered = ShareLinkResolver([TIDALShare, SpotifyShare])
    assert reordered.resolve(uri).provider_id == 44551


def test_resolver_subset():
    resolver = ShareLinkResolver([TuneInShare])
    assert resolver.is_share_link("https://tunein.com/radio/Jazz-s1234/")
    assert not resolver.is_share_link("https://tidal.com/browse/album/157273956")


def test_share_class():
    share = TIDALShare()
    assert share.service_number() == 44551
    assert share.extract("https://example.com") is None
    assert share.extract("https://tidal.com/browse/track/77646169") == (
        "track",
        "track/77646169",
        None,
    )
    assert TuneInShare().extract("https://tunein.com/radio/x-s42/") == (
        "radio",
        "s42",
        254,
    )


def test_item_types():
    assert set(ITEM_TYPES) == {
        "album",
        "episode",
        "track",
        "song",
        "show",
        "playlist",
        "radio",
    }
    assert ITEM_TYPES["song"].key == "10032020"
    assert ITEM_TYPES["radio"].prefix == "x-sonosapi-stream:"


def test_spotify_album_uri_and_metadata():
    reference = resolve("https://open.spotify.com/album/6wiUBliPe76YAVpNEdidpY")
    uri, metadata = reference.to_uri_and_metadata()
    assert uri == "x-rincon-cpcontainer:1004206cspotify%3Aalbum%3A6wiUBliPe76YAVpNEdidpY"

    item = ElementTree.fromstring(metadata).find(ns_tag("", "item"))
    assert item.get("id") == "00040000spotify%3Aalbum%3A6wiUBliPe76YAVpNEdidpY"
    assert item.findtext(ns_tag("upnp", "class")) == "object.container.album.musicAlbum"
    assert item.findtext(ns_tag("dc", "title")) == config.SHARE_LINK_TITLE
    assert item.findtext(ns_tag("", "desc")) == "SA_RINCON2311_"


def test_track_uri_has_no_prefix():
    uri, metadata = resolve(
        "https://tidal.com/browse/track/77646169"
    ).to_uri_and_metadata(title="A & B")
    assert uri == "track%2F77646169"
    item = ElementTree.fromstring(metadata).find(ns_tag("", "item"))
    assert item.get("id") == "00032020track%2F77646169"
    assert item.findtext(ns_tag("dc", "title")) == "A & B"


def test_radio_uri_and_metadata():
    uri, metadata = resolve(
        "https://tunein.com/radio/Radio-Paradise-s13606/"
    ).to_uri_and_metadata()
    assert uri == "x-sonosapi-stream:s13606?sid=254"
    item = ElementTree.fromstring(metadata).find(ns_tag("", "item"))
    assert item.get("id") == "F00092020s13606"
    assert item.findtext(ns_tag("upnp", "class")) == (
        "object.item.audioItem.audioBroadcast"
    )
    assert item.findtext(ns_tag("", "desc")) == "SA_RINCON65031_"


def test_apple_music_song_uri():
    uri, _ = resolve(
        "https://music.apple.com/us/album/foo/1234567890?i=999"
    ).to_uri_and_metadata()
    assert uri == "song%3A999"


# Plugin


@pytest.fixture
def controller():
    controller = mock.MagicMock()
    controller.set_service_uri = mock.AsyncMock(return_value={"Seek": "ok"})
    controller.play = mock.AsyncMock()
    return controller


def test_plugin_name_and_loading(controller):
    plugin = SonosDeckPlugin.from_name(
        "sonosdeck.plugins.sharelink.ShareLinkPlugin", controller
    )
    assert isinstance(plugin, ShareLinkPlugin)
    assert plugin.controller is controller
    assert plugin.name == "ShareLink Plugin"
    assert plugin.is_share_link("https://www.deezer.com/en/album/302127")
    assert not plugin.is_share_link("https://example.com/album/302127")


def test_plugin_base_name(controller):
    with pytest.raises(NotImplementedError):
        SonosDeckPlugin(controller).name  # pylint: disable=expression-not-assigned


@pytest.mark.asyncio
async def test_play_share_link(controller):
    plugin = ShareLinkPlugin(controller)
    result = await plugin.play_share_link("https://www.deezer.com/en/album/302127")

    assert result == {"Seek": "ok"}
    uri, metadata = controller.set_service_uri.call_args[0]
    assert uri == "x-rincon-cpcontainer:1004206calbum-302127"
    assert "SA_RINCON519_" in metadata
    controller.play.assert_not_called()


@pytest.mark.asyncio
async def test_play_share_link_and_start(controller):
    plugin = ShareLinkPlugin(controller)
    await plugin.play_share_link("https://tunein.com/radio/Jazz-s1234/", start=True)
    uri, _ = controller.set_service_uri.call_args[0]
    assert uri == "x-sonosapi-stream:s1234?sid=254"
    controller.play.assert_awaited_once()


@pytest.mark.asyncio
async def test_play_share_link_unsupported(controller):
    plugin = ShareLinkPlugin(controller)
    with pytest.raises(UnsupportedURIError):
        await plugin.play_share_link("https://example.com/album/1")
    controller.set_service_uri.assert_not_called()
