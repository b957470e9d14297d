"""Voice assistant core: segmentation, speaker identification and action plans."""

__version__ = "0.1.0"
