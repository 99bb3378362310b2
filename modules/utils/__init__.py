"""Configuration, logging and performance monitoring."""
from .config import Config, InteractionSettings
from .performance_monitor import PerformanceMonitor

__all__ = ["Config", "InteractionSettings", "PerformanceMonitor"]
