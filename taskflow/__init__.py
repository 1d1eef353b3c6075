"""In-memory task store with a pool of background workers, served over HTTP as a WSGI app."""

__version__ = "1.0.0"