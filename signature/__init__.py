"""
Signature capture module.

Provides free-hand signature capture on a Pillow-backed raster surface,
pointer coordinate mapping for rotated (portrait) presentation, and
cropped PNG export for embedding into draft documents.
"""
