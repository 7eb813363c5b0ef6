"""Event-loop primitives shared by the leak engines and the snapshot scheduler."""

from leaklab.core.interval import Interval

__all__ = ["Interval"]
