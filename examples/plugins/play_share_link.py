#!/usr/bin/env python

# This illustrates how to use sonosdeck plugins, by playing a music service
# share link on the group of a speaker:
#
#   python play_share_link.py 192.168.1.101 https://tidal.com/browse/album/157273956

import asyncio
import logging
import sys

from sonosdeck import SonosController, UnsupportedURIError
from sonosdeck.plugins import SonosDeckPlugin


async def main(ip_address, link):
    async with SonosController() as controller:
        await controller.connect(ip_address)

        # get a plugin by name (eg from a config file)
        plugin = SonosDeckPlugin.from_name(
            "sonosdeck.plugins.sharelink.ShareLinkPlugin", controller
        )
        print("Using", plugin.name)

        try:
            await plugin.play_share_link(link, start=True)
        except UnsupportedURIError:
            print("Not a supported share link:", link)
            return

        await asyncio.sleep(5)
        track = await controller.get_track_info()
        print("Now playing:", track["title"], "-", track["artist"])


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("usage: play_share_link.py <speaker ip> <share link>")
        sys.exit(1)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
