"""lstn: analyze the behavior of your dependencies using listen.dev."""

__version__ = "0.1.0"
