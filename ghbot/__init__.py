__version__ = "v0.1.0"
