"""Routing of commands to the coordinator or to every member of a group.

Sonos groups accept transport and queue commands only through their
coordinator, so those are sent to exactly one device: the coordinator found
by a fresh read of the topology. Commands whose state each speaker keeps for
itself, such as volume and mute, are sent to every member of the group at
once. These group commands succeed if any member accepted them.

Which policy each action uses:

==========================  ===============
Action                      Routing
==========================  ===============
Next, Previous, Seek        coordinator
SetAVTransportURI           coordinator
AddURIToQueue               coordinator
GetTransportInfo            coordinator
GetTransportSettings        coordinator
GetPositionInfo             coordinator
GetVolume, GetMute          coordinator
SetPlayMode                 coordinator or group
Play, Pause, Stop           group
SetVolume, SetMute          group
==========================  ===============
"""

import asyncio
import logging

from .exceptions import GroupCommandError, SonosDeckException

_LOG = logging.getLogger(__name__)

AV_TRANSPORT = "AVTransport"

#: Actions sent only to the coordinator of the group.
COORDINATOR_ACTIONS = frozenset(
    [
        "Next",
        "Previous",
        "Seek",
        "SetAVTransportURI",
        "AddURIToQueue",
        "GetTransportInfo",
        "GetTransportSettings",
        "GetPositionInfo",
        "GetVolume",
        "GetMute",
        "SetPlayMode",
    ]
)

#: Actions sent to every member of the group.
GROUP_ACTIONS = frozenset(
    ["Play", "Pause", "Stop", "SetPlayMode", "SetVolume", "SetMute"]
)


class GroupCommandExecutor:

    """Sends commands for one connection, routed by group membership."""

    def __init__(self, transport, zone_group_state):
        """
        Args:
            transport (SoapTransport): Sends the individual actions.
            zone_group_state (ZoneGroupState): The topology of the
                connection.
        """
        self.transport = transport
        self.zone_group_state = zone_group_state

    @property
    def host(self):
        """str: The connected speaker."""
        return self.zone_group_state.host

    async def execute_on_host(self, host, service, action, params=None):
        """Send one action to one device and return its output arguments."""
        return await self.transport.execute(host, service, action, params)

    async def execute_on_coordinator(self, service, action, params=None):
        """Send an action to the coordinator of the group.

        The topology is read afresh to find the coordinator. Errors are
        raised unchanged.

        Returns:
            dict: The output arguments of the action.
        """
        coordinator = await self.zone_group_state.resolve_coordinator_host()
        return await self.execute_on_host(coordinator, service, action, params)

    async def execute_for_group(self, service, action, params=None):
        """Send an action to every member of the group concurrently.

        If the speaker is not part of a known group, the action is sent to
        the coordinator only. Otherwise all requests are allowed to complete,
        whatever happens to the others.

        Returns:
            dict: ``{host: output arguments}`` for each member which
            accepted the action.

        Raises:
            GroupCommandError: if every member failed. Its cause is the
                failure of the member with the lowest host, in string order.
        """
        members = await self.zone_group_state.resolve_group_members()
        if not members:
            coordinator = await self.zone_group_state.resolve_coordinator_host()
            result = await self.execute_on_host(coordinator, service, action, params)
            return {coordinator: result}

        hosts = sorted(members)
        results = await asyncio.gather(
            *(self.execute_on_host(host, service, action, params) for host in hosts),
            return_exceptions=True
        )

        successes = {}
        failures = {}
        for host, result in zip(hosts, results):
            if isinstance(result, SonosDeckException):
                _LOG.warning("%s failed on group member %s: %s", action, host, result)
                failures[host] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                successes[host] = result

        if not successes:
            cause = failures[hosts[0]]
            _LOG.error("%s failed on all %s group members", action, len(hosts))
            raise GroupCommandError(action, failures, cause)
        return successes

    async def pause_with_fallback(self):
        """Pause the group, stopping it instead if pausing fails.

        Some sources, such as radio streams, cannot be paused.

        Returns:
            dict: The result of Pause, or of Stop if Pause failed.
        """
        try:
            return await self.execute_for_group(AV_TRANSPORT, "Pause")
        except SonosDeckException as error:
            _LOG.info("Pause failed (%s), stopping instead", error)
        return await self.execute_for_group(AV_TRANSPORT, "Stop")

    async def previous_with_fallback(self):
        """Go to the previous track, seeking to it if Previous fails.

        If the device rejects Previous, the current track number is read
        and, if it is greater than one, the coordinator is told to seek to
        the track before it. Otherwise the error of Previous is raised.

        Returns:
            dict: The result of Previous, or of the Seek.
        """
        try:
            return await self.execute_on_coordinator(AV_TRANSPORT, "Previous")
        except SonosDeckException as error:
            previous_error = error
        _LOG.info("Previous failed (%s), trying to seek", previous_error)

        coordinator = await self.zone_group_state.resolve_coordinator_host()
        track_number = await self._current_track_number(coordinator)
        if track_number is None or track_number <= 1:
            raise previous_error

        return await self.execute_on_host(
            coordinator,
            AV_TRANSPORT,
            "Seek",
            [("Unit", "TRACK_NR"), ("Target", track_number - 1)],
        )

    async def _current_track_number(self, coordinator):
        """Return the queue position of the current track, or `None`."""
        try:
            position = await self.execute_on_host(
                coordinator, AV_TRANSPORT, "GetPositionInfo"
            )
        except SonosDeckException as error:
            _LOG.debug("Could not read position from %s: %s", coordinator, error)
            return None
        try:
            return int(position.get("Track", ""))
        except ValueError:
            return None
