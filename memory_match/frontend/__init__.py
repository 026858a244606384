"""Front end layer for Memory Match."""

from .base import FrontEnd
from .console_frontend import ConsoleFrontEnd
from .web_frontend import WebFrontEnd

__all__ = ['FrontEnd', 'ConsoleFrontEnd', 'WebFrontEnd']
