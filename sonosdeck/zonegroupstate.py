"""Provides handling for ZoneGroupState information.

ZoneGroupState XML payloads are received from
``ZoneGroupTopology.GetZoneGroupState()['ZoneGroupState']``, as an escaped
XML document inside the SOAP response. The payloads are identical between
all speakers in a household, so any speaker can be asked.

Example payload contents:

  <ZoneGroupState>
    <ZoneGroups>
      <ZoneGroup Coordinator="RINCON_000XXX1400" ID="RINCON_000XXX1400:46">
        <ZoneGroupMember
            BootSeq="44"
            Configuration="1"
            Icon="x-rincon-roomicon:living"
            Location="http://192.168.1.101:1400/xml/device_description.xml"
            MinCompatibleVersion="22.0-00000"
            SoftwareVersion="24.1-74200"
            UUID="RINCON_000XXX1400"
            ZoneName="Living Room"/>
        <ZoneGroupMember
            BootSeq="52"
            Configuration="1"
            Icon="x-rincon-roomicon:kitchen"
            Location="http://192.168.1.102:1400/xml/device_description.xml"
            MinCompatibleVersion="22.0-00000"
            SoftwareVersion="24.1-74200"
            UUID="RINCON_000YYY1400"
            ZoneName="Kitchen"/>
      </ZoneGroup>
    </ZoneGroups>
    <VanishedDevices/>
  </ZoneGroupState>

A snapshot of the parsed groups is cached per connection. Coordinator
resolution always discards it first, so that commands routed to the
coordinator are sent to the current one; other topology reads made during the
same operation reuse the snapshot.
"""

import logging

from lxml import etree as LXML

from .exceptions import ProtocolError
from .groups import ZoneGroup
from .utils import host_from_location

_LOG = logging.getLogger(__name__)


def parse_zone_group_member(member_element):
    """Return ``(uid, host, zone_name)`` for a ZoneGroupMember or Satellite
    element, or `None` if it has no usable location."""
    member_attribs = member_element.attrib
    host = host_from_location(member_attribs.get("Location"))
    if host is None:
        return None
    return (member_attribs["UUID"], host, member_attribs.get("ZoneName"))


def parse_zone_group_state(payload, default_host=None):
    """Parse a ZoneGroupState payload into groups.

    Members are the ``ZoneGroupMember`` elements of a group and the
    ``Satellite`` elements of home theater setups nested inside them. A device advertised more than once (e.g. through two network
    interfaces) is only counted once.

    Args:
        payload (str): The ZoneGroupState XML.
        default_host (str): The coordinator to use for a group without any
            usable member.

    Returns:
        list(ZoneGroup): The groups in document order.

    Raises:
        ProtocolError: If the payload is not well formed XML.
    """
    parser = LXML.XMLParser(remove_blank_text=True)  # pylint:disable=I1101
    try:
        tree = LXML.fromstring(payload.encode("utf-8"), parser)  # pylint:disable=I1101
    except LXML.XMLSyntaxError as error:  # pylint:disable=I1101
        raise ProtocolError("Invalid ZoneGroupState: {}".format(error)) from error

    # Compatibility fallback for pre-10.1 firmwares
    # where a "ZoneGroups" element is not used
    zone_groups = tree.find("ZoneGroups")
    if zone_groups is None:
        zone_groups = tree

    groups = []
    for group_element in zone_groups.findall("ZoneGroup"):
        coordinator_uid = group_element.get("Coordinator")
        seen_uids = set()
        members = []
        for member_element in group_element.iter("ZoneGroupMember", "Satellite"):
            if "UUID" not in member_element.attrib:
                continue
            if member_element.get("UUID") in seen_uids:
                continue
            member = parse_zone_group_member(member_element)
            if member is None:
                continue
            seen_uids.add(member[0])
            members.append(member)

        coordinator = next((m for m in members if m[0] == coordinator_uid), None)
        if coordinator is None and members:
            # Inconsistent payload, the first member takes over
            _LOG.debug(
                "Coordinator %s of group %s is not a member, using %s",
                coordinator_uid,
                group_element.get("ID"),
                members[0][1],
            )
            coordinator = members[0]
        coordinator_host = coordinator[1] if coordinator else default_host
        name = (
            group_element.get("ZoneGroupName")
            or (coordinator[2] if coordinator else None)
            or coordinator_host
        )

        member_uids = {}
        member_names = {}
        for uid, host, zone_name in members:
            member_uids.setdefault(host, uid)
            member_names.setdefault(host, zone_name or host)
        groups.append(
            ZoneGroup(
                uid=group_element.get("ID"),
                coordinator=coordinator_host,
                members=member_uids.keys(),
                name=name,
                member_uids=member_uids,
                member_names=member_names,
            )
        )
    return groups


class ZoneGroupState:
    """Reads and caches the group topology for one connection.

    Only one ZoneGroupState instance is created per connection, and a new
    one replaces it when the client reconnects.
    """

    def __init__(self, transport, host, target_group=""):
        """
        Args:
            transport (SoapTransport): Used to query the topology.
            host (str): The connected speaker, which is asked for the
                topology.
            target_group (str): The host of the coordinator of the group to
                control, or ``""`` to control the connected speaker's group.
        """
        self.transport = transport
        self.host = host
        self.target_group = target_group or ""
        self.groups = None

    def clear_cache(self):
        """Discard the topology snapshot."""
        self.groups = None

    async def poll(self):
        """Fetch and parse the topology, bypassing the cache.

        Returns:
            list(ZoneGroup): The current groups.
        """
        response = await self.transport.execute(
            self.host, "ZoneGroupTopology", "GetZoneGroupState"
        )
        payload = response.get("ZoneGroupState")
        if not payload:
            raise ProtocolError(
                "GetZoneGroupState response from {} has no ZoneGroupState".format(
                    self.host
                )
            )
        _LOG.debug("Updating ZGS with payload from %s", self.host)
        return parse_zone_group_state(payload, default_host=self.host)

    async def get_snapshot(self):
        """Return the cached groups, fetching them if there are none.

        Returns:
            list(ZoneGroup): The groups of the household.
        """
        if self.groups is None:
            # Replace, never update, the cached list
            self.groups = await self.poll()
        return self.groups

    def find_group(self, groups):
        """Select the group this connection controls.

        With a target group configured this is the group coordinated by the
        target host; otherwise the group the connected host is a member of.

        Returns:
            ZoneGroup: The group, or `None` if there is no such group.
        """
        if self.target_group:
            return next((g for g in groups if g.coordinator == self.target_group), None)
        return next((g for g in groups if self.host in g), None)

    async def resolve_coordinator_host(self):
        """Return the host of the coordinator of the controlled group.

        The cached snapshot is discarded first, so each call reads the
        topology from the device exactly once. A standalone or unknown
        speaker is its own coordinator.

        Returns:
            str: The coordinator host.
        """
        self.clear_cache()
        group = self.find_group(await self.get_snapshot())
        if group is not None and group.coordinator:
            _LOG.debug(
                "Found coordinator %s for %s, group has %s member(s)",
                group.coordinator,
                self.host,
                len(group),
            )
            return group.coordinator

        _LOG.debug("Using configured speaker as coordinator: %s", self.host)
        return self.host

    async def resolve_group_members(self):
        """Return the hosts of the members of the controlled group.

        Reuses the cached snapshot when there is one.

        Returns:
            set(str): The member hosts, or an empty set if the speaker is not
            part of a known group.
        """
        group = self.find_group(await self.get_snapshot())
        if group is None:
            return set()
        return set(group.members)

    async def resolve_uid(self, host):
        """Return the device unique id of the speaker at ``host``.

        Reuses the cached snapshot when there is one.

        Raises:
            ProtocolError: if no member of any group has that host.
        """
        for group in await self.get_snapshot():
            uid = group.member_uids.get(host)
            if uid:
                return uid
        raise ProtocolError("Could not find the unique id of {}".format(host))
