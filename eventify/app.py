# module eventify.app
import logging

from eventify.app_setup.factory import create_app
from eventify.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL.upper())

app = create_app()
