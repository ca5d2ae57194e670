# pylint: disable=too-many-public-methods
"""The core module contains the SonosController class that implements
the main entry to the sonosdeck functionality
"""

from functools import wraps
import logging

from .didl import TrackMetadata, from_didl_string, parse_browse_result
from .exceptions import EnqueueError, NotConnectedError, ProtocolError
from .executor import GroupCommandExecutor
from .soap import SoapTransport
from .utils import url_escape_path
from .zonegroupstate import ZoneGroupState

_LOG = logging.getLogger(__name__)

AV_TRANSPORT = "AVTransport"
RENDERING_CONTROL = "RenderingControl"
CONTENT_DIRECTORY = "ContentDirectory"

# Valid play modes and their meanings as (shuffle, repeat) tuples
PLAY_MODES = {
    "NORMAL": (False, False),
    "SHUFFLE_NOREPEAT": (True, False),
    "SHUFFLE": (True, True),
    "REPEAT_ALL": (False, True),
    "SHUFFLE_REPEAT_ONE": (True, "ONE"),
    "REPEAT_ONE": (False, "ONE"),
}
# Inverse mapping of PLAY_MODES
PLAY_MODE_BY_MEANING = {meaning: mode for mode, meaning in PLAY_MODES.items()}

# ContentDirectory containers, as used for the ObjectID of a Browse
BROWSE_TYPES = {
    "ARTISTS": "A:ARTIST",
    "ARTIST_ALBUMS": "A:ALBUMARTIST",
    "ALBUMS": "A:ALBUM",
    "GENRES": "A:GENRE",
    "COMPOSERS": "A:COMPOSER",
    "TRACKS": "A:TRACKS",
    "PLAYLISTS": "A:PLAYLISTS",
    "SHARES": "S:",
    "SONOS_PLAYLISTS": "SQ:",
    "CATEGORIES": "A:",
    "SONOS_FAVORITES": "FV:2",
    "RADIO_STATIONS": "R:0/0",
    "RADIO_SHOWS": "R:0/1",
}

# URI prefixes of the sources which belong to a speaker itself
URI_PREFIX_QUEUE = "x-rincon-queue"
URI_PREFIX_LINE_IN = "x-rincon-stream"
URI_PREFIX_TV = "x-sonos-htastream"
# Radio streams are played directly, everything else through the queue
URI_PREFIX_RADIO = "x-sonosapi-stream:"


def only_when_connected(function):
    """Decorator that raises NotConnectedError if no speaker is configured."""

    @wraps(function)
    async def inner_function(self, *args, **kwargs):
        """Connection checking inner function."""
        if not self.is_connected:
            message = (
                'The method "{}" can only be called after '
                "connect()".format(function.__name__)
            )
            raise NotConnectedError(message)
        return await function(self, *args, **kwargs)

    return inner_function


def build_object_id(container_type, search_term=None, category_path=None):
    """Compose the ContentDirectory object id of a listing.

    >>> build_object_id("A:ALBUMARTIST", "Abba", ["Rock & Pop"])
    'A:ALBUMARTIST/Rock%20%26%20Pop:Abba'
    """
    object_id = container_type
    if category_path:
        object_id += "/" + "/".join(url_escape_path(c) for c in category_path)
    if search_term:
        object_id += ":" + url_escape_path(search_term)
    return object_id


class SonosController:

    """A client for controlling the group of one Sonos speaker.

    The controller talks to a single configured speaker, and sends each
    command to whichever devices of that speaker's group have to receive it:
    transport commands go to the group coordinator, volume and mute changes
    to every member. Example use::

        async with SonosController() as controller:
            await controller.connect("192.168.1.101")
            await controller.set_volume(25)
            await controller.play()

    .. rubric:: Transport
    .. autosummary::

        play
        pause
        stop
        next
        previous
        seek

    .. rubric:: Volume
    .. autosummary::

        get_volume
        set_volume
        set_relative_volume
        get_mute
        set_mute

    .. rubric:: Sources
    .. autosummary::

        set_service_uri
        switch_to_queue
        switch_to_line_in
        switch_to_tv
        browse

    Commands are not serialised. Callers which share a controller between
    tasks must avoid issuing overlapping commands.
    """

    def __init__(self, session=None, timeout=None):
        """
        Args:
            session (aiohttp.ClientSession, optional): An HTTP session to
                share. If not given, one is created and closed by `close`.
            timeout (float, optional): The request timeout in seconds.
                Defaults to `config.REQUEST_TIMEOUT`.
        """
        self._session = session
        self._timeout = timeout
        self.transport = None
        self.zone_group_state = None
        self.executor = None

    def __repr__(self):
        if not self.is_connected:
            return "<{} (not connected) at {}>".format(
                self.__class__.__name__, hex(id(self))
            )
        return "<{} object at host {}>".format(self.__class__.__name__, self.host)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def connect(self, host, port=None, target_group=""):
        """Configure the speaker to control.

        Reconnecting replaces the previous connection, and discards the
        cached topology.

        Args:
            host (str): The host of the speaker.
            port (int, optional): The control port. Defaults to
                `config.DEFAULT_PORT`.
            target_group (str, optional): The host of the coordinator of the
                group to control. If empty, the group of ``host`` is
                controlled.
        """
        if self.transport is not None:
            await self.transport.close()
        self.transport = SoapTransport(
            port=port, timeout=self._timeout, session=self._session
        )
        self.zone_group_state = ZoneGroupState(self.transport, host, target_group)
        self.executor = GroupCommandExecutor(self.transport, self.zone_group_state)
        _LOG.debug("Connected to %s:%s", host, self.transport.port)

    @property
    def is_connected(self):
        """bool: Whether a speaker has been configured."""
        return self.executor is not None and bool(self.zone_group_state.host)

    @property
    def host(self):
        """str: The host of the configured speaker, or `None`."""
        return self.zone_group_state.host if self.is_connected else None

    @property
    def port(self):
        """int: The control port of the configured speaker, or `None`."""
        return self.transport.port if self.is_connected else None

    @property
    def target_group(self):
        """str: The coordinator host of the controlled group, or ``""``."""
        return self.zone_group_state.target_group if self.is_connected else ""

    async def close(self):
        """Close the HTTP session.

        The controller stays configured, and a new session is created by the
        next command.
        """
        if self.transport is not None:
            await self.transport.close()

    # Topology

    @only_when_connected
    async def get_available_groups(self):
        """Return the groups of the household, freshly read.

        Returns:
            list(ZoneGroup): The groups, e.g. to offer as a target group.
        """
        return await self.zone_group_state.poll()

    @only_when_connected
    async def get_coordinator(self):
        """Return the host of the coordinator of the controlled group."""
        return await self.zone_group_state.resolve_coordinator_host()

    @only_when_connected
    async def get_group_members(self):
        """Return the hosts of the members of the controlled group.

        Returns:
            set(str): The member hosts, empty if the speaker is not part of a
            known group.
        """
        return await self.zone_group_state.resolve_group_members()

    # Transport

    @only_when_connected
    async def play(self):
        """Play the currently selected track on every member of the group."""
        return await self.executor.execute_for_group(
            AV_TRANSPORT, "Play", [("Speed", 1)]
        )

    @only_when_connected
    async def pause(self):
        """Pause the group, or stop it if the source cannot be paused."""
        return await self.executor.pause_with_fallback()

    @only_when_connected
    async def pause_without_fallback(self):
        """Pause the group. Fails for sources which cannot be paused."""
        return await self.executor.execute_for_group(AV_TRANSPORT, "Pause")

    @only_when_connected
    async def stop(self):
        """Stop the group."""
        return await self.executor.execute_for_group(AV_TRANSPORT, "Stop")

    @only_when_connected
    async def next(self):
        """Go to the next track.

        Fails with a UPnP 701 error if the source has no next track.
        """
        return await self.executor.execute_on_coordinator(AV_TRANSPORT, "Next")

    @only_when_connected
    async def previous(self):
        """Go to the previous track.

        If the device refuses, e.g. on a source which cannot go back, the
        previous track of the queue is selected by number instead.
        """
        return await self.executor.previous_with_fallback()

    @only_when_connected
    async def seek(self, unit, target):
        """Seek within the queue or the current track.

        Args:
            unit (str): ``TRACK_NR`` for a 1-based queue position, or
                ``REL_TIME`` for a position in the track.
            target (str or int): The track number, or the time as
                ``HH:MM:SS``.
        """
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT, "Seek", [("Unit", unit), ("Target", target)]
        )

    @only_when_connected
    async def get_transport_info(self):
        """Get the current playback state.

        Returns:
            dict: The ``CurrentTransportState`` (e.g. ``PLAYING``,
            ``PAUSED_PLAYBACK``, ``STOPPED``), ``CurrentTransportStatus`` and
            ``CurrentSpeed`` of the coordinator.
        """
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT, "GetTransportInfo"
        )

    @only_when_connected
    async def get_transport_settings(self):
        """Get the ``PlayMode`` and ``RecQualityMode`` of the group."""
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT, "GetTransportSettings"
        )

    @only_when_connected
    async def get_position_info(self):
        """Get the position of the group in its queue and current track.

        Returns:
            dict: With the fields ``Track``, ``TrackDuration``,
            ``TrackMetaData``, ``TrackURI``, ``RelTime`` and ``AbsTime``,
            among others.
        """
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT, "GetPositionInfo"
        )

    async def can_pause(self):
        """bool: Whether the group is playing, and so can be paused."""
        info = await self.get_transport_info()
        return info.get("CurrentTransportState") == "PLAYING"

    # Play mode

    @staticmethod
    def _check_play_mode(play_mode):
        play_mode = play_mode.upper()
        if play_mode not in PLAY_MODES:
            raise KeyError("'%s' is not a valid play mode" % play_mode)
        return play_mode

    @only_when_connected
    async def set_play_mode(self, play_mode):
        """Set the play mode on the coordinator.

        Case-insensitive options are:

        *   ``'NORMAL'`` -- Turns off shuffle and repeat.
        *   ``'REPEAT_ALL'`` -- Turns on repeat and turns off shuffle.
        *   ``'SHUFFLE'`` -- Turns on shuffle *and* repeat. (It's
            strange, I know.)
        *   ``'SHUFFLE_NOREPEAT'`` -- Turns on shuffle and turns off
            repeat.
        *   ``'REPEAT_ONE'`` -- Turns on repeat one and turns off shuffle.
        *   ``'SHUFFLE_REPEAT_ONE'`` -- Turns on shuffle *and* repeat one.

        Raises:
            KeyError: for an unknown play mode.
        """
        play_mode = self._check_play_mode(play_mode)
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT, "SetPlayMode", [("NewPlayMode", play_mode)]
        )

    @only_when_connected
    async def set_play_mode_for_group(self, play_mode):
        """Set the play mode on every member of the group.

        See `set_play_mode` for the options.
        """
        play_mode = self._check_play_mode(play_mode)
        return await self.executor.execute_for_group(
            AV_TRANSPORT, "SetPlayMode", [("NewPlayMode", play_mode)]
        )

    async def get_play_mode(self):
        """str: The play mode of the group, e.g. ``'SHUFFLE_NOREPEAT'``."""
        settings = await self.get_transport_settings()
        try:
            return settings["PlayMode"]
        except KeyError as error:
            raise ProtocolError(
                "Unexpected GetTransportSettings response: {}".format(settings)
            ) from error

    async def get_play_mode_meaning(self):
        """Get the play mode of the group as a ``(shuffle, repeat)`` tuple.

        ``repeat`` is a bool, or the string ``'ONE'`` when the current track
        is repeated.
        """
        play_mode = await self.get_play_mode()
        try:
            return PLAY_MODES[play_mode]
        except KeyError as error:
            raise ProtocolError("Unknown play mode: {}".format(play_mode)) from error

    async def set_shuffle(self, shuffle):
        """Turn shuffle on or off for the group, keeping the repeat mode."""
        _, repeat = await self.get_play_mode_meaning()
        return await self.set_play_mode_for_group(
            PLAY_MODE_BY_MEANING[(bool(shuffle), repeat)]
        )

    async def set_repeat(self, repeat):
        """Set the repeat mode of the group, keeping the shuffle mode.

        Args:
            repeat: `True`, `False`, or ``'ONE'`` to repeat the current
                track.
        """
        shuffle, _ = await self.get_play_mode_meaning()
        return await self.set_play_mode_for_group(
            PLAY_MODE_BY_MEANING[(shuffle, repeat)]
        )

    # Volume

    @only_when_connected
    async def get_volume(self):
        """int: The volume of the coordinator, between 0 and 100."""
        response = await self.executor.execute_on_coordinator(
            RENDERING_CONTROL, "GetVolume", [("Channel", "Master")]
        )
        try:
            return int(response["CurrentVolume"])
        except (KeyError, ValueError) as error:
            raise ProtocolError(
                "Unexpected GetVolume response: {}".format(response)
            ) from error

    @only_when_connected
    async def set_volume(self, volume):
        """Set the volume of every member of the group.

        Args:
            volume (int): The new volume, coerced into the range 0 to 100.
        """
        volume = int(volume)
        volume = max(0, min(volume, 100))  # Coerce in range
        return await self.executor.execute_for_group(
            RENDERING_CONTROL,
            "SetVolume",
            [("Channel", "Master"), ("DesiredVolume", volume)],
        )

    async def set_relative_volume(self, relative_volume):
        """Adjust the volume of the group up or down by a relative amount.

        The coordinator's volume is read, adjusted and set on every member.
        If the adjustment overshoots the maximum value of 100 or undershoots
        the minimum value of 0, the volume is set to that limit.

        Args:
            relative_volume (int): The relative volume adjustment. Can be
                positive or negative.

        Returns:
            int: The new volume setting.
        """
        volume = await self.get_volume() + int(relative_volume)
        volume = max(0, min(volume, 100))
        await self.set_volume(volume)
        return volume

    @only_when_connected
    async def get_mute(self):
        """bool: The mute state of the coordinator."""
        response = await self.executor.execute_on_coordinator(
            RENDERING_CONTROL, "GetMute", [("Channel", "Master")]
        )
        try:
            mute = response["CurrentMute"]
        except KeyError as error:
            raise ProtocolError(
                "Unexpected GetMute response: {}".format(response)
            ) from error
        return mute == "1"

    @only_when_connected
    async def set_mute(self, mute):
        """Mute (or unmute) every member of the group."""
        mute_value = "1" if mute else "0"
        return await self.executor.execute_for_group(
            RENDERING_CONTROL,
            "SetMute",
            [("Channel", "Master"), ("DesiredMute", mute_value)],
        )

    async def toggle_mute(self):
        """Invert the mute state of the group.

        Returns:
            bool: The new mute state.
        """
        mute = not await self.get_mute()
        await self.set_mute(mute)
        return mute

    # Queue and sources

    @only_when_connected
    async def add_uri_to_queue(self, uri, metadata="", position=0, as_next=False):
        """Add a URI to the queue of the group.

        Args:
            uri (str): The URI to add.
            metadata (str): The DIDL-Lite metadata of the URI.
            position (int): The index (1-based) at which the URI should be
                added. Default is 0 (add URI at the end of the queue).
            as_next (bool): Whether this URI should be played as the next
                track in shuffle mode.

        Returns:
            dict: The response, with ``FirstTrackNumberEnqueued``,
            ``NumTracksAdded`` and ``NewQueueLength``.
        """
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT,
            "AddURIToQueue",
            [
                ("EnqueuedURI", uri),
                ("EnqueuedURIMetaData", metadata or ""),
                ("DesiredFirstTrackNumberEnqueued", position),
                ("EnqueueAsNext", int(as_next)),
            ],
        )

    @only_when_connected
    async def set_av_transport_uri(self, uri, metadata=""):
        """Set the source of the group to a URI."""
        return await self.executor.execute_on_coordinator(
            AV_TRANSPORT,
            "SetAVTransportURI",
            [("CurrentURI", uri), ("CurrentURIMetaData", metadata or "")],
        )

    @only_when_connected
    async def set_local_transport(self, prefix, suffix=""):
        """Switch the group to one of the coordinator's own sources.

        The source URI is built as ``{prefix}:{coordinator uid}{suffix}``.

        Args:
            prefix (str): The URI prefix of the source, e.g.
                ``x-rincon-queue``.
            suffix (str): Appended to the URI, e.g. ``#0`` for the queue.
        """
        coordinator = await self.zone_group_state.resolve_coordinator_host()
        uid = await self.zone_group_state.resolve_uid(coordinator)
        uri = "{}:{}{}".format(prefix, uid, suffix)
        return await self.executor.execute_on_host(
            coordinator,
            AV_TRANSPORT,
            "SetAVTransportURI",
            [("CurrentURI", uri), ("CurrentURIMetaData", "")],
        )

    async def switch_to_queue(self):
        """Play from the queue of the group."""
        return await self.set_local_transport(URI_PREFIX_QUEUE, "#0")

    async def switch_to_line_in(self):
        """Switch the group to the line-in of the coordinator."""
        return await self.set_local_transport(URI_PREFIX_LINE_IN)

    async def switch_to_tv(self):
        """Switch the group to the TV input of the coordinator."""
        return await self.set_local_transport(URI_PREFIX_TV, ":spdif")

    async def set_service_uri(self, uri, metadata=""):
        """Play a music service URI, such as a favorite.

        Radio streams are set as the source directly. Anything else is
        appended to the queue, the group is switched to the queue and the
        first added track is selected.

        Args:
            uri (str): The URI, e.g. as returned by `browse`.
            metadata (str): The DIDL-Lite metadata which came with the URI.

        Raises:
            EnqueueError: if the device did not report where the URI was
                added to the queue.
        """
        if uri.startswith(URI_PREFIX_RADIO):
            return await self.set_av_transport_uri(uri, metadata)

        response = await self.add_uri_to_queue(uri, metadata)
        track_number = response.get("FirstTrackNumberEnqueued", "")
        if track_number in ("", "0"):
            raise EnqueueError('Failed to add URI "{}" to queue'.format(uri))

        await self.switch_to_queue()
        return await self.seek("TRACK_NR", track_number)

    # Now playing

    async def get_track_info(self):
        """Get information about the current track of the group.

        Returns:
            dict: The fields of `TrackMetadata` (`None` where unknown), plus
            ``elapsed`` and ``duration`` as ``H:MM:SS`` strings, the 1-based
            queue position ``track`` and the ``uri`` of the track.
        """
        response = await self.get_position_info()
        try:
            metadata = from_didl_string(
                response.get("TrackMetaData", ""), self.host, self.port
            )
        except ProtocolError as error:
            # Radio stream titles are not always escaped
            _LOG.debug("Ignoring unreadable track metadata: %s", error)
            metadata = None
        if metadata is None:
            metadata = TrackMetadata(*([None] * len(TrackMetadata._fields)))
        track = metadata._asdict()
        track["elapsed"] = response.get("RelTime")
        track["duration"] = response.get("TrackDuration")
        track["track"] = response.get("Track")
        track["uri"] = response.get("TrackURI")
        return track

    # Browsing

    @only_when_connected
    async def browse(
        self, container_type, search_term=None, category_path=None, start=0, count=100
    ):
        """Browse the content of the connected speaker.

        Args:
            container_type (str): One of the values of `BROWSE_TYPES`, e.g.
                ``FV:2`` for the Sonos favorites.
            search_term (str, optional): Restrict the listing to items
                matching this term.
            category_path (list(str), optional): Sub containers, e.g.
                ``['Abba']`` to list an artist's albums.
            start (int): The index of the first item to return.
            count (int): The maximum number of items to return.

        Returns:
            list(BrowseItem): The items, in the order the device returned
            them.
        """
        object_id = build_object_id(container_type, search_term, category_path)
        response = await self.executor.execute_on_host(
            self.host,
            CONTENT_DIRECTORY,
            "Browse",
            [
                ("ObjectID", object_id),
                ("BrowseFlag", "BrowseDirectChildren"),
                ("Filter", "*"),
                ("StartingIndex", start),
                ("RequestedCount", count),
                ("SortCriteria", ""),
            ],
        )
        return parse_browse_result(response.get("Result", ""), self.host, self.port)

    async def get_favorites(self, start=0, count=100):
        """Return the Sonos favorites, ready to pass to `set_service_uri`."""
        return await self.browse(BROWSE_TYPES["SONOS_FAVORITES"], start=start, count=count)
