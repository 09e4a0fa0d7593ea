"""Generative AI clients."""

from .stylist_client import ColorAdvice, SkinToneDetection, StylistClient

__all__ = ["ColorAdvice", "SkinToneDetection", "StylistClient"]
