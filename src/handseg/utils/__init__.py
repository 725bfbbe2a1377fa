"""Utility modules for configuration, logging, performance and visualization."""
from .performance import PerformanceMonitor, Timer
from .logger import setup_logging, log_timing
from .config import Config
from .visualization import Visualizer, VisualizerConfig
