"""Baropodometric asymmetry analysis for the VR postural therapy study."""

__version__ = "0.1.0"
