"""The HTTP side of sonosdeck's SOAP handling.

`SoapTransport` owns the `aiohttp` session used for every request and maps
UPnP service names onto the classes in :mod:`sonosdeck.services`. It
implements the single entry point used by the rest of the package::

    result = await transport.execute(host, "AVTransport", "Seek",
                                     {"Unit": "TRACK_NR", "Target": 3})

Every call is a fresh request; nothing is cached at this level.
"""

import logging

from aiohttp import ClientSession, ClientTimeout

from . import config
from .services import SERVICES, Service

_LOG = logging.getLogger(__name__)


class SoapTransport:

    """Sends UPnP actions to Sonos devices over HTTP.

    The session is created on first use and must be closed with `close`,
    or by using the transport as an async context manager.
    """

    def __init__(self, port=None, timeout=None, session=None):
        """
        Args:
            port (int): The control port of the devices. Defaults to
                `config.DEFAULT_PORT`.
            timeout (float): The timeout in seconds for each request.
                Defaults to `config.REQUEST_TIMEOUT`.
            session (aiohttp.ClientSession): A session to use instead of
                creating one. A session passed in is not closed by `close`.
        """
        self.port = port or config.DEFAULT_PORT
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    def _get_session(self):
        if self.session is None:
            self.session = ClientSession(timeout=ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self.session

    async def close(self):
        """Close the HTTP session, if it was created by this transport."""
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    async def post(self, url, headers, body):
        """POST a SOAP envelope.

        Args:
            url (str): The full control URL.
            headers (dict): The http headers.
            body (str): The SOAP envelope.

        Returns:
            tuple: ``(status, text)`` of the response.

        Raises:
            `aiohttp.ClientError`, `asyncio.TimeoutError`: on connection
                failures, to be wrapped by the caller.
        """
        session = self._get_session()
        async with session.post(
            url,
            headers=headers,
            data=body.encode("utf-8"),
            timeout=ClientTimeout(total=self.timeout),
        ) as response:
            text = await response.text()
            return response.status, text

    def service(self, host, service_name):
        """Return the service called ``service_name`` on ``host``."""
        cls = SERVICES.get(service_name)
        if cls is None:
            return Service(self, host, service_type=service_name)
        return cls(self, host)

    async def execute(self, host, service_name, action, params=None):
        """Send an action to a device and return its output arguments.

        Args:
            host (str): The device host.
            service_name (str): The UPnP service type, e.g. ``AVTransport``.
            action (str): The action name, e.g. ``Play``.
            params (dict or list, optional): The input arguments in order.
                ``InstanceID`` is added for AVTransport and RenderingControl
                actions if missing.

        Returns:
            dict: ``{argument_name: value}`` of the output arguments.
        """
        return await self.service(host, service_name).send_command(action, params or [])
