"""Gas metering instrumentation for Arm64 assembly: parsing, control flow graph, back-edge checks."""

__version__ = "0.1.0"
__all__ = ["__version__"]