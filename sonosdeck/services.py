# pylint: disable=invalid-name

"""Classes representing Sonos UPnP services.

Each call is a fresh HTTP request to the device. A service instance is bound
to one host and sends its actions through a `~sonosdeck.soap.SoapTransport`,
which owns the HTTP session::

    >>> transport = SoapTransport()
    >>> await RenderingControl(transport, '192.168.1.102').GetMute(
    ...     [('Channel', 'Master')])
    {'CurrentMute': '0'}
    >>> r = await ContentDirectory(transport, '192.168.1.102').Browse([
    ...    ('ObjectID', 'FV:2'),
    ...    ('BrowseFlag', 'BrowseDirectChildren'),
    ...    ('Filter', '*'),
    ...    ('StartingIndex', '0'),
    ...    ('RequestedCount', '100'),
    ...    ('SortCriteria', '')
    ...    ])
    >>> print(r['Result'])
    <DIDL-Lite xmlns="urn:schemas-upnp-org:metadata ...
"""

# UPnP Spec at http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.0.pdf

import asyncio
import logging

import aiohttp

from .exceptions import ProtocolError, TransportError, UPnPError
from .utils import escape_xml, prettify
from .xml import XML, local_name, parse_lenient

_LOG = logging.getLogger(__name__)

SOAP_ENVELOPE_NS = "http://schemas.xmlsoap.org/soap/envelope/"
UPNP_CONTROL_NS = "urn:schemas-upnp-org:control-1-0"


class Service:
    """A class representing a UPnP service on a single device.

    This is the base class for all Sonos Service classes. This class has a
    dynamic method dispatcher. Calls to methods which are not explicitly
    defined here are dispatched automatically to the service action with the
    same name, and return a coroutine.
    """

    soap_body_template = (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"'
        ' s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
        "<s:Body>"
        '<u:{action} xmlns:u="urn:schemas-upnp-org:service:'
        '{service_type}:{version}">'
        "{arguments}"
        "</u:{action}>"
        "</s:Body>"
        "</s:Envelope>"
    )  # noqa PEP8

    #: str: The path under which the service's control URL lives.
    base_path = None

    # From table 3.3 in
    # http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
    # Error codes between 700-799 are defined for particular services.
    UPNP_ERRORS = {
        400: "Bad Request",
        401: "Invalid Action",
        402: "Invalid Args",
        404: "Invalid Var",
        412: "Precondition Failed",
        501: "Action Failed",
        600: "Argument Value Invalid",
        601: "Argument Value Out of Range",
        602: "Optional Action Not Implemented",
        603: "Out Of Memory",
        604: "Human Intervention Required",
        605: "String Argument Too Long",
        606: "Action Not Authorized",
        607: "Signature Failure",
        608: "Signature Missing",
        609: "Not Encrypted",
        610: "Invalid Sequence",
        611: "Invalid Control URL",
        612: "No Such Session",
    }

    #: Arguments added, in this order, ahead of the caller's arguments when
    #: the caller does not supply them.
    DEFAULT_ARGS = {}

    def __init__(self, transport, host, service_type=None):
        """
        Args:
            transport (SoapTransport): The transport used to send actions.
            host (str): The host of the device to which actions are sent.
            service_type (str, optional): The UPnP service type. Defaults to
                the class name.
        """
        self.transport = transport
        self.host = host
        #: str: The UPnP service type.
        self.service_type = service_type or self.__class__.__name__
        #: str: The UPnP service version.
        self.version = 1
        #: str: The base URL for sending UPnP Actions.
        self.base_url = "http://{}:{}".format(host, transport.port)
        #: str: The UPnP Control URL.
        self.control_url = "/{}/Control".format(self.base_path or self.service_type)

    def __getattr__(self, action):
        """Called when a method on the instance cannot be found.

        Returns a callable which sends the action of that name.
        """
        if action.startswith("_"):
            raise AttributeError(action)

        def _dispatcher(self, *args, **kwargs):
            """Dispatch to send_command."""
            return self.send_command(action, *args, **kwargs)

        _dispatcher.__name__ = action
        method = _dispatcher.__get__(self, self.__class__)
        setattr(self, action, method)
        _LOG.debug("Dispatching method %s", action)
        return method

    @staticmethod
    def wrap_arguments(args=None):
        """Wrap a list of tuples in xml ready to pass into a SOAP request.

        Args:
            args (list):  a list of (name, value) tuples specifying the
                name of each argument and its value, eg
                ``[('InstanceID', 0), ('Speed', 1)]``. The value
                can be a string or something with a string representation. The
                arguments are escaped and wrapped in <name> and <value> tags.

        Example:

            >>> print(Service.wrap_arguments([('InstanceID', 0), ('Speed', 1)]))
            <InstanceID>0</InstanceID><Speed>1</Speed>
        """
        if args is None:
            args = []

        tags = []
        for name, value in args:
            tag = "<{name}>{value}</{name}>".format(name=name, value=escape_xml(value))
            tags.append(tag)

        return "".join(tags)

    @staticmethod
    def unwrap_arguments(xml_response):
        """Extract arguments and their values from a SOAP response.

        Args:
            xml_response (str):  SOAP/xml response text.

        Returns:
             dict: a dict of ``{argument_name: value}`` items.

        Raises:
            `ProtocolError`: if the response is not well formed or has no
                action response inside its Body.
        """

        # A UPnP SOAP response looks like this:
        #
        # <s:Envelope
        #   xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"
        #   s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
        #   <s:Body>
        #       <u:actionNameResponse
        #           xmlns:u="urn:schemas-upnp-org:service:serviceType:v">
        #           <argumentName>out arg value</argumentName>
        #               ... other out args and their values go here, if any
        #       </u:actionNameResponse>
        #   </s:Body>
        # </s:Envelope>

        try:
            tree = parse_lenient(xml_response)
        except XML.ParseError as error:
            raise ProtocolError("Malformed SOAP response: {}".format(error)) from error

        body = tree.find("{{{}}}Body".format(SOAP_ENVELOPE_NS))
        if body is None or len(body) == 0:
            raise ProtocolError("SOAP response has no action response element")
        # Turn the children of <actionNameResponse> into a {tagname, content}
        # dict. XML unescaping is carried out for us by elementree.
        return {local_name(i.tag): i.text or "" for i in body[0]}

    def compose_args(self, args=None):
        """Compose the argument list, adding default arguments.

        Args:
            args (dict or list): Arguments as an ordered mapping, e.g.
                ``{'Unit': 'TRACK_NR', 'Target': 3}``, or a list of
                ``(name, value)`` tuples.

        Returns:
            list: a list of ``(name, value)`` tuples.
        """
        if args is None:
            args = []
        elif hasattr(args, "items"):
            args = list(args.items())
        else:
            args = list(args)

        given = {name for name, _ in args}
        defaults = [
            (name, value)
            for name, value in self.DEFAULT_ARGS.items()
            if name not in given
        ]
        return defaults + args

    def build_command(self, action, args=None):
        """Build a SOAP request.

        Args:
            action (str): the name of an action (a string as specified in the
                service description XML file) to be sent.
            args (list, optional): Relevant arguments as a list of (name,
                value) tuples.

        Returns:
            tuple: a tuple containing the POST headers (as a dict) and a
            string containing the relevant SOAP body.
        """

        # A complete request should look something like this:

        # POST path of control URL HTTP/1.1
        # HOST: host of control URL:port of control URL
        # CONTENT-LENGTH: bytes in body
        # CONTENT-TYPE: text/xml; charset="utf-8"
        # SOAPACTION: "urn:schemas-upnp-org:service:serviceType:v#actionName"

        arguments = self.wrap_arguments(args)
        body = self.soap_body_template.format(
            arguments=arguments,
            action=action,
            service_type=self.service_type,
            version=self.version,
        )
        soap_action = '"urn:schemas-upnp-org:service:{}:{}#{}"'.format(
            self.service_type, self.version, action
        )
        headers = {
            "Content-Type": 'text/xml; charset="utf-8"',
            "SOAPACTION": soap_action,
        }
        return (headers, body)

    async def send_command(self, action, args=None, **kwargs):
        """Send a command to a Sonos device.

        Args:
            action (str): the name of an action (a string as specified in the
                service description XML file) to be sent.
            args (dict or list, optional): Relevant arguments, as an ordered
                mapping or a list of (name, value) tuples, as an alternative
                to ``kwargs``.
            kwargs: Relevant arguments for the command.

        Returns:
             dict: a dict of ``{argument_name: value}`` items. An empty dict
             is a valid result, for actions with no output arguments.

        Raises:
            `UPnPError`: if the device returns a UPnP fault.
            `TransportError`: if an http or connection error occurs.
            `ProtocolError`: if the response cannot be understood.
        """
        if args is None:
            args = kwargs
        args = self.compose_args(args)
        headers, body = self.build_command(action, args)
        url = self.base_url + self.control_url
        _LOG.debug("Sending %s %s to %s", action, args, self.host)
        # Check log level before logging XML, since prettifying it is
        # expensive
        if _LOG.isEnabledFor(logging.DEBUG):
            _LOG.debug("Sending %s, %s", headers, prettify(body))

        try:
            status, text = await self.transport.post(url, headers, body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as error:
            raise TransportError(
                "{} on {} failed: {!r}".format(action, self.host, error),
                body=repr(error),
            ) from error

        _LOG.debug("Received status %s from %s: %s", status, self.host, text)
        if 200 <= status < 300:
            return self.unwrap_arguments(text)
        if status == 500:
            # Internal server error. UPnP requires this to be returned if the
            # device does not like the action for some reason. The returned
            # content will usually be a SOAP Fault.
            self.handle_upnp_error(text)
        raise TransportError(
            "HTTP {} from {} for {}: {}".format(status, self.host, action, text),
            status=status,
            body=text,
        )

    def handle_upnp_error(self, xml_error):
        """Disect a UPnP error, and raise an appropriate exception.

        Returns without raising if the body is not a UPnP fault, leaving the
        caller to report the plain HTTP error.

        Args:
            xml_error (str):  a unicode string containing the body of the
                UPnP/SOAP Fault response.
        """

        # An error response looks something like this:

        # <s:Envelope
        #   xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"
        #   s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
        #   <s:Body>
        #       <s:Fault>
        #           <faultcode>s:Client</faultcode>
        #           <faultstring>UPnPError</faultstring>
        #           <detail>
        #               <UPnPError xmlns="urn:schemas-upnp-org:control-1-0">
        #                   <errorCode>error code</errorCode>
        #                   <errorDescription>error string</errorDescription>
        #               </UPnPError>
        #           </detail>
        #       </s:Fault>
        #   </s:Body>
        # </s:Envelope>
        #
        # All that matters for our purposes is the errorCode.
        # errorDescription is not required, and Sonos does not seem to use it.

        try:
            error = parse_lenient(xml_error)
        except XML.ParseError:
            return
        error_code = error.findtext(".//{{{}}}errorCode".format(UPNP_CONTROL_NS))
        if error_code is None:
            return
        try:
            description = self.UPNP_ERRORS.get(int(error_code), "")
        except ValueError:
            description = ""
        raise UPnPError(
            message="UPnP Error {} received: {} from {}".format(
                error_code, description, self.host
            ),
            error_code=error_code,
            error_description=description,
            body=xml_error,
        )


class AVTransport(Service):
    """Sonos AV Transport service, for controlling the playback, queue and
    source of a group."""

    base_path = "MediaRenderer/AVTransport"
    DEFAULT_ARGS = {"InstanceID": 0}

    UPNP_ERRORS = dict(Service.UPNP_ERRORS)
    UPNP_ERRORS.update(
        {
            701: "Transition not available",
            702: "No contents",
            703: "Read error",
            704: "Format not supported for playback",
            705: "Transport is locked",
            706: "Write error",
            707: "Media is protected or not writeable",
            708: "Format not supported for recording",
            709: "Media is full",
            710: "Seek mode not supported",
            711: "Illegal seek target",
            712: "Play mode not supported",
            713: "Record quality not supported",
            714: "Illegal MIME-Type",
            715: "Content 'BUSY'",
            716: "Resource Not found",
            717: "Play speed not supported",
            718: "Invalid InstanceID",
            737: "No DNS Server",
            738: "Bad Domain Name",
            739: "Server Error",
        }
    )


class RenderingControl(Service):
    """Sonos Rendering Control service, for volume and mute on a single
    device."""

    base_path = "MediaRenderer/RenderingControl"
    DEFAULT_ARGS = {"InstanceID": 0}


class ZoneGroupTopology(Service):
    """Sonos Zone Group Topology service, for reading the groups of a
    household."""


class ContentDirectory(Service):
    """UPnP standard Content Directory service, for functions relating to
    browsing, searching and listing available music."""

    base_path = "MediaServer/ContentDirectory"

    UPNP_ERRORS = dict(Service.UPNP_ERRORS)
    UPNP_ERRORS.update(
        {
            701: "No such object",
            702: "Invalid CurrentTagValue",
            703: "Invalid NewTagValue",
            704: "Required tag",
            705: "Read only tag",
            706: "Parameter Mismatch",
            708: "Unsupported or invalid search criteria",
            709: "Unsupported or invalid sort criteria",
            710: "No such container",
            711: "Restricted object",
            712: "Bad metadata",
            713: "Restricted parent object",
            714: "No such source resource",
            715: "Source resource access denied",
            716: "Transfer busy",
            717: "No such file transfer",
            718: "No such destination resource",
            719: "Destination resource access denied",
            720: "Cannot process the request",
        }
    )


#: Service classes by UPnP service type.
SERVICES = {
    cls.__name__: cls
    for cls in (AVTransport, RenderingControl, ZoneGroupTopology, ContentDirectory)
}
