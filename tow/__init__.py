"""
tow: install binaries from the web and keep track of them.
"""

__version__ = "0.1.0"
