"""Client package public exports."""

from .base import LifecycleCallback, MessagingClient
from .neonize_client import NeonizeClient

__all__ = ["LifecycleCallback", "MessagingClient", "NeonizeClient"]
