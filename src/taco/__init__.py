"""taco — flat-file issue tracker with an editor-driven workflow."""

__version__ = "0.1.0"
