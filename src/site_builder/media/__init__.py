"""Image rendition planning on top of the task engine."""

from site_builder.media.dependencies import MissingDependencyError
from site_builder.media.manager import MediaManager, ReadyEvent
from site_builder.media.sizer import ImageSizer, RenditionEvent

__all__ = [
    "ImageSizer",
    "MediaManager",
    "MissingDependencyError",
    "ReadyEvent",
    "RenditionEvent",
]
