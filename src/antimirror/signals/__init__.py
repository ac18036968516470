"""
Signals Module
==============

Derived measurements over the frame stream.
"""

from antimirror.signals.throughput import ThroughputCounter

__all__ = ["ThroughputCounter"]
