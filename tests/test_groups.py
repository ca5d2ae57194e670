"""Tests for the groups module."""

from sonosdeck.groups import ZoneGroup


def make_group():
    return ZoneGroup(
        uid="RINCON_000E58A1B2C301400:46",
        coordinator="192.168.1.101",
        members=["192.168.1.102", "192.168.1.101"],
        member_uids={
            "192.168.1.101": "RINCON_000E58A1B2C301400",
            "192.168.1.102": "RINCON_000E58A7B8C901400",
        },
        member_names={"192.168.1.101": "Living Room", "192.168.1.102": "Kitchen"},
    )


def test_group_container():
    group = make_group()
    assert "192.168.1.102" in group
    assert "192.168.1.103" not in group
    assert len(group) == 2
    assert list(group) == ["192.168.1.101", "192.168.1.102"]


def test_group_defaults():
    group = ZoneGroup(uid="RINCON_A:1", coordinator="192.168.1.110")
    assert group.members == set()
    assert group.name == "192.168.1.110"
    assert group.coordinator_uid is None
    assert group.label == ""
    assert group.short_label == "192.168.1.110"


def test_group_coordinator_uid():
    assert make_group().coordinator_uid == "RINCON_000E58A1B2C301400"


def test_group_labels():
    group = make_group()
    assert group.label == "Kitchen, Living Room"
    assert group.short_label == "Kitchen + 1"
    group.members.discard("192.168.1.102")
    assert group.label == "Living Room"
    assert group.short_label == "Living Room"


def test_group_repr():
    group = ZoneGroup(uid="RINCON_A:1", coordinator="192.168.1.110", members=["192.168.1.110"])
    assert repr(group) == (
        "ZoneGroup(uid='RINCON_A:1', coordinator='192.168.1.110', "
        "members={'192.168.1.110'})"
    )
