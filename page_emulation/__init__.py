"""Browser emulation tools: network throttling, CPU slowdown and multi-page device emulation."""

__version__ = "0.1.0"
