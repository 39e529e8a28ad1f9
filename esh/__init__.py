"""Runtime pieces of an extensible shell: terms, bindings, quoting, globbing, descriptors and input."""

__version__ = "0.1.0"