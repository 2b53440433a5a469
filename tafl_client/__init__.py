"""Copenhagen hnefatafl AI client"""

__version__ = "0.1.0"
