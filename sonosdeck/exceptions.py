"""Exceptions that are used by sonosdeck."""


class SonosDeckException(Exception):

    """Base class for all sonosdeck exceptions."""


class NotConnectedError(SonosDeckException):

    """Raised if an operation is attempted before a speaker has been
    configured with `SonosController.connect`."""


class TransportError(SonosDeckException):

    """An HTTP level failure while talking to a device.

    Raised for any response with a status outside 200-299, and for
    connection errors and timeouts, in which case `status` is `None`.
    """

    def __init__(self, message, status=None, body=""):
        """
        Args:
            message (str): A description of the failure.
            status (int): The HTTP status code, or `None` if no response
                was received.
            body (str): The body of the response, or a description of the
                connection error.
        """
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body

    def __str__(self):
        return self.message


class UPnPError(TransportError):

    """A UPnP Fault Code, returned by a device with an HTTP 500 response."""

    def __init__(self, message, error_code, error_description="", body=""):
        """
        Args:
            message (str): The message from the server.
            error_code (str): The UPnP Error Code as a string.
            error_description (str): A description of the error. Default is ""
            body (str): The xml containing the error.
        """
        super().__init__(message, status=500, body=body)
        self.error_code = error_code
        self.error_description = error_description


class ProtocolError(SonosDeckException):

    """Raised if XML with an unknown or unexpected structure is returned."""


class UnsupportedURIError(SonosDeckException):

    """Raised if no music service recognises a share link."""


class EnqueueError(SonosDeckException):

    """Raised if a device accepts an enqueue request but reports that no
    track was added to the queue."""


class GroupCommandError(SonosDeckException):

    """Raised when a command sent to every member of a group failed on all
    of them.

    Attributes:
        action (str): The action which failed.
        failures (dict): ``{host: exception}`` for every member.
        cause (Exception): The failure which is reported. It is also set
            as ``__cause__``.
    """

    def __init__(self, action, failures, cause):
        super().__init__()
        self.action = action
        self.failures = failures
        self.cause = cause
        self.__cause__ = cause

    def __str__(self):
        return "{} failed on all {} group members: {}".format(
            self.action, len(self.failures), self.cause
        )
