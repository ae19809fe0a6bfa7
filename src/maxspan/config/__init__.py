"""
MAXSPAN Configuration Module
"""

from maxspan.config.loader import load_config
from maxspan.config.span_config import SpanConfig

__all__ = ["SpanConfig", "load_config"]
