"""Notification message composition."""

from __future__ import annotations

from smsdispatch.composer.templates import MessageComposer

__all__ = ["MessageComposer"]
