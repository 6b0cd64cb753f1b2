from .base import HostChannel
from .callback_channel import CallbackHostChannel
from .http_channel import HttpHostChannel
from .registry import get_channel

__all__ = [
    "HostChannel",
    "CallbackHostChannel",
    "HttpHostChannel",
    "get_channel",
]
