"""Processing module wiring acquisition, resolution and decoding together."""

from .pipeline import IntakePipeline, IntakeResult

__all__ = ["IntakePipeline", "IntakeResult"]
