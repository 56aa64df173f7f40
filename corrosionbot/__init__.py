"""CorrosionBot: marine coating defect triage and repair-cycle suggestions."""

__version__ = "1.0.0"
