"""KennelTrack: business metrics and AI expert reports for dog-breeding kennels."""

__version__ = "0.1.0"
