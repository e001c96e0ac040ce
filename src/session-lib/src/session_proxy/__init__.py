"""
session_proxy — Types, configuration and upstream client for the ChatKit session proxy.

The Lambda handler in src/chatkit_session is the only consumer.
"""

from session_proxy.client import ChatKitSessionClient
from session_proxy.config import load_config
from session_proxy.exceptions import ConfigurationError, MethodNotAllowed
from session_proxy.models import ProxyConfig, SessionRequest

__all__ = [
    "ChatKitSessionClient",
    "ConfigurationError",
    "MethodNotAllowed",
    "ProxyConfig",
    "SessionRequest",
    "load_config",
]
