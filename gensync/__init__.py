"""gensync — synchronize generated files, trace data and source maps onto a file store."""

__version__ = "0.1.0"
