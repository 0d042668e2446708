"""
Engine wiring and configuration
"""

from .engine import EngineConfig, QuoteEngine

__all__ = ["EngineConfig", "QuoteEngine"]
