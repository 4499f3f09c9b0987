"""Animated OPMon Red main menu and compact PNG, BMP, TGA, HDR and JPEG encoders."""

__version__ = "0.1.0"
__all__ = ["__version__"]