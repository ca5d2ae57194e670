"""This module contains classes and functionality relating to Sonos Groups."""


class ZoneGroup:

    """
    A class representing a Sonos Group, as seen in one topology snapshot.
    Speakers are referred to by host. It looks like this::

        ZoneGroup(
            uid='RINCON_000FD584236D01400:58',
            coordinator='192.168.1.101',
            members={'192.168.1.101', '192.168.1.102'}
        )

    For convenience, ZoneGroup is also a container::

        >>> '192.168.1.102' in group
        True
        >>> for host in group:
        ...   print(host)
        192.168.1.101
        192.168.1.102

    A consistent readable label for the group members can be returned with
    the `label` and `short_label` properties.
    """

    def __init__(self, uid, coordinator, members=None, name=None, member_uids=None,
                 member_names=None):
        """
        Args:
            uid (str): The unique Sonos ID for this group, eg
                ``RINCON_000FD584236D01400:5``.
            coordinator (str): The host of the coordinator of this group.
            members (Iterable[str]): The hosts of the members of this group.
            name (str): The display name of the group. Defaults to the
                coordinator host.
            member_uids (dict): ``{host: device unique id}`` for the members.
            member_names (dict): ``{host: zone name}`` for the members.
        """
        #: The unique Sonos ID for this group
        self.uid = uid
        #: The host of the speaker which coordinates this group
        self.coordinator = coordinator
        #: A set of hosts which are members of the group
        self.members = set(members) if members is not None else set()
        #: The display name of the group
        self.name = name or coordinator
        self.member_uids = dict(member_uids or {})
        self.member_names = dict(member_names or {})

    def __iter__(self):
        return iter(sorted(self.members))

    def __contains__(self, member):
        return member in self.members

    def __len__(self):
        return len(self.members)

    def __repr__(self):
        return "{}(uid='{}', coordinator={!r}, members={!r})".format(
            self.__class__.__name__, self.uid, self.coordinator, self.members
        )

    @property
    def coordinator_uid(self):
        """str: The device unique id of the coordinator, or `None`."""
        return self.member_uids.get(self.coordinator)

    @property
    def label(self):
        """str: A description of the group.

        >>> group.label
        'Kitchen, Living Room'
        """
        group_names = sorted(self.member_names.get(m, m) for m in self.members)
        return ", ".join(group_names)

    @property
    def short_label(self):
        """str: A short description of the group.

        >>> group.short_label
        'Kitchen + 1'
        """
        group_names = sorted(self.member_names.get(m, m) for m in self.members)
        if not group_names:
            return self.name
        group_label = group_names[0]
        if len(group_names) > 1:
            group_label += " + {}".format(len(group_names) - 1)
        return group_label
