"""Multi-model AI GitHub issue resolver"""

__version__ = "1.0.0"
