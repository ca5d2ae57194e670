# pylint: disable-msg=too-few-public-methods, redefined-outer-name

"""Integration tests for the SonosController class. They access a real Sonos
system.

PLEASE TAKE NOTE: All of these tests are designed to run on a Sonos system
without interfering with normal service. This means that they must not raise
the volume or must leave the player in the same state as they found it in.

Run them with ``py.test -m integration --ip 192.168.1.101``.
"""

import asyncio

import pytest
import pytest_asyncio

from sonosdeck import SonosController
from sonosdeck.groups import ZoneGroup

# Mark all tests in this module with the pytest custom "integration" marker so
# they can be selected or deselected as a whole
pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@pytest_asyncio.fixture
async def controller(request):
    """A controller connected to the speaker given with --ip."""
    ip = request.config.option.IP
    if ip is None:
        pytest.fail("No ip address specified. Use the --ip option.")
    async with SonosController() as instance:
        await instance.connect(ip)
        yield instance


async def wait(interval=0.1):
    """Convenience function to adjust sleep interval for all tests."""
    await asyncio.sleep(interval)


async def test_topology(controller):
    groups = await controller.get_available_groups()
    assert groups
    assert all(isinstance(group, ZoneGroup) for group in groups)
    coordinator = await controller.get_coordinator()
    members = await controller.get_group_members()
    assert coordinator in members
    assert controller.host in members


async def test_transport_info(controller):
    info = await controller.get_transport_info()
    assert info["CurrentTransportState"] in (
        "PLAYING",
        "PAUSED_PLAYBACK",
        "STOPPED",
        "TRANSITIONING",
        "NO_MEDIA_PRESENT",
    )
    settings = await controller.get_transport_settings()
    assert settings["PlayMode"] in (
        "NORMAL",
        "REPEAT_ALL",
        "SHUFFLE",
        "SHUFFLE_NOREPEAT",
        "REPEAT_ONE",
        "SHUFFLE_REPEAT_ONE",
    )


async def test_volume_get_and_set(controller):
    """Lowers the volume by one step and restores it."""
    old = await controller.get_volume()
    assert 0 <= old <= 100
    new = old + 1 if old == 0 else old - 1
    try:
        await controller.set_volume(new)
        await wait()
        assert await controller.get_volume() == new
    finally:
        await controller.set_volume(old)


async def test_mute_toggle(controller):
    old = await controller.get_mute()
    try:
        assert await controller.toggle_mute() is (not old)
        await wait()
        assert await controller.get_mute() is (not old)
    finally:
        await controller.set_mute(old)


async def test_track_info(controller):
    track = await controller.get_track_info()
    assert "elapsed" in track
    assert "duration" in track


async def test_favorites(controller):
    favorites = await controller.get_favorites(count=5)
    assert len(favorites) <= 5
    for favorite in favorites:
        assert isinstance(favorite.title, str)
