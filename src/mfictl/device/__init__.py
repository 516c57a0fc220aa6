"""
Device access for mfictl.

Provides the mFi HTTP client and session handling.
"""

from mfictl.device.client import MfiClient
from mfictl.device.session import DeviceSession, Session, generate_session_id

__all__ = [
    "MfiClient",
    "DeviceSession",
    "Session",
    "generate_session_id",
]
