"""Memory readings and the time-series probe used to chart leak growth."""

from leaklab.instrumentation.memory import process_memory
from leaklab.instrumentation.probe import MemoryProbe, count_column

__all__ = ["MemoryProbe", "count_column", "process_memory"]
