# __init__.py

from .config import ClientConfig, load_config
from .logger import Logger
from .interface import Interface

__all__ = ["Interface", "Logger", "ClientConfig", "load_config"]
