"""taskline: parse, toggle and aggregate checklist task lines."""

__version__ = "1.0.0"
