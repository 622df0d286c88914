"""
pinghistory: records the path of every HTTP request into MySQL and echoes it back.
"""

__version__ = "0.1.0"
