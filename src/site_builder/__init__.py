"""Static-site build helpers: image renditions and Google Doc data."""

__version__ = "0.1.0"
