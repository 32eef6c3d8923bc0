"""A small HTTP/1.0 server that runs simple commands on worker thread pools."""

__version__ = "0.1.0"