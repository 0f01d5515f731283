"""
Content series analysis: merge detected series, score them against the
channel baseline and recommend scale / optimize / maintain / sunset.
"""
__version__ = "0.1.0"
