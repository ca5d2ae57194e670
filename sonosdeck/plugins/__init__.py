"""This is the __init__ module for the plugins.

It contains the base class for all plugins
"""

import importlib
import logging

_LOG = logging.getLogger(__name__)


class SonosDeckPlugin:

    """The base class for sonosdeck plugins.

    A plugin extends a `SonosController` with commands built on top of the
    controller's own operations.
    """

    def __init__(self, controller):
        cls = self.__class__.__name__
        _LOG.info("Initializing sonosdeck plugin %s", cls)
        self.controller = controller

    @property
    def name(self):
        """Human-readable name of the plugin"""
        raise NotImplementedError("Plugins should overwrite the name property")

    @classmethod
    def from_name(cls, fullname, controller, *args, **kwargs):
        """Instantiate a plugin by its full name, e.g.
        ``sonosdeck.plugins.sharelink.ShareLinkPlugin``."""

        _LOG.info("Loading plugin %s", fullname)

        parts = fullname.split(".")
        modname = ".".join(parts[:-1])
        clsname = parts[-1]

        mod = importlib.import_module(modname)
        class_ = getattr(mod, clsname)

        _LOG.info("Loaded class %s", class_)

        return class_(controller, *args, **kwargs)
