"""py.test hooks and fixtures.

Add the --ip command line option, and skip all tests marked the with
'integration' marker unless the option is included
"""
from collections import namedtuple
from os import path
import codecs
from unittest import mock

import pytest

from sonosdeck.core import SonosController

THISDIR = path.dirname(path.abspath(__file__))

pytest_plugins = ("pytest_asyncio",)


def pytest_addoption(parser):
    """Add the --ip commandline option"""
    parser.addoption(
        "--ip",
        type=str,
        default=None,
        action="store",
        dest="IP",
        help="the IP address for the zone to be used for the integration tests",
    )


def pytest_runtest_setup(item):
    """Skip tests marked 'integration' unless an ip address is given."""
    if "integration" in item.keywords and not item.config.getoption("--ip"):
        pytest.skip("use --ip and an ip address to run integration tests.")


class DataLoader:
    """A class that loads test data"""

    def __init__(self, data_sub_dir):
        self.data_dir = path.join(THISDIR, "data", data_sub_dir)

    def load_xml(self, filename):
        """Return XML string loaded from filename under ``self.data_sub_dir``"""
        xml_string = ""
        with codecs.open(path.join(self.data_dir, filename), encoding="utf-8") as file_:
            for line in file_:
                # Allow for indenting the XML source
                xml_string += line.lstrip(" ")
        return xml_string


class FakeResponse:
    """Stands in for an `aiohttp.ClientResponse`."""

    def __init__(self, status, text):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for an `aiohttp.ClientSession`, recording each POST.

    ``reply`` is a ``(status, text)`` tuple, or an exception to raise.
    """

    def __init__(self, reply=(200, "")):
        self.reply = reply
        self.requests = []
        self.closed = False

    def post(self, url, headers=None, data=None, timeout=None):
        self.requests.append(
            {"url": url, "headers": headers, "data": data, "timeout": timeout}
        )
        if isinstance(self.reply, BaseException):
            raise self.reply
        return FakeResponse(*self.reply)

    async def close(self):
        self.closed = True


Call = namedtuple("Call", "host, service, action, params")


class FakeNetwork:
    """A scripted household of Sonos devices.

    Stands in for a `SoapTransport`. Every action is recorded in `calls`.
    Replies are looked up by ``(host, action)`` first and then by
    ``(None, action)``; a reply which is an exception is raised. Actions
    without a scripted reply return an empty dict, except GetZoneGroupState
    which returns `zone_group_state`.
    """

    def __init__(self, zone_group_state="", port=1400):
        self.zone_group_state = zone_group_state
        self.port = port
        self.calls = []
        self.replies = {}
        self.closed = False

    def reply(self, action, result, host=None):
        self.replies[(host, action)] = result

    async def execute(self, host, service_name, action, params=None):
        if params is None:
            params = {}
        elif not hasattr(params, "items"):
            params = dict(params)
        self.calls.append(Call(host, service_name, action, dict(params)))

        for key in ((host, action), (None, action)):
            if key in self.replies:
                result = self.replies[key]
                if isinstance(result, BaseException):
                    raise result
                return dict(result)
        if action == "GetZoneGroupState":
            return {"ZoneGroupState": self.zone_group_state}
        return {}

    async def close(self):
        self.closed = True

    def actions(self, include_topology=False):
        """Return ``(host, action)`` for each call, in order."""
        return [
            (call.host, call.action)
            for call in self.calls
            if include_topology or call.action != "GetZoneGroupState"
        ]

    def count(self, action):
        return sum(1 for call in self.calls if call.action == action)


@pytest.fixture
def zgs_loader():
    return DataLoader("zonegroupstate")


@pytest.fixture
def didl_loader():
    return DataLoader("didl")


@pytest.fixture
def network(zgs_loader):
    """A household with a Living Room + Kitchen group and a lone Office."""
    return FakeNetwork(zgs_loader.load_xml("two_groups.xml"))


@pytest.fixture
def make_controller(network):
    """Return a coroutine function which connects a controller to the
    fake network."""

    async def _make_controller(host="192.168.1.102", port=None, target_group=""):
        controller = SonosController()
        with mock.patch("sonosdeck.core.SoapTransport", return_value=network):
            await controller.connect(host, port=port, target_group=target_group)
        return controller

    return _make_controller
