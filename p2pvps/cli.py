"""
The entry point for the CLI tool
"""

import uvloop
from aiohttp import web

from p2pvps import logger
from p2pvps.app import build_app
from p2pvps.config import database_url
from p2pvps.version import __version__, name


def run():
    """Installs uvloop and runs the app."""
    uvloop.install()
    logger.info(f'Starting {name} %s!', __version__)
    web.run_app(build_app(database_url))


if __name__ == '__main__':
    run()
