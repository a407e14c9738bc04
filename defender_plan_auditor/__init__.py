"""Defender for Cloud server plan auditor"""

__version__ = "1.0.0"
