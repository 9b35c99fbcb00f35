"""ganttblock - Gantt charts from a small line-oriented text DSL."""

__version__ = "0.1.0"
