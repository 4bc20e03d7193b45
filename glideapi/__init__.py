"""glideapi -- scaffold Express/MongoDB APIs and generate CRUD modules."""

__version__ = "1.0.0"
