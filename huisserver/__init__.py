"""Home automation server core: clock, web sessions, site request handling, LED strip groups and UDP broadcast."""

__version__ = "0.1.0"