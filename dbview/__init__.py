"""dbview: schema graph and optimistic table editing for a database viewer backend."""

__version__ = "0.1.0"
