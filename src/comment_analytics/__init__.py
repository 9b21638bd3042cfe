"""
YouTube Comment Analytics
Comment sentiment pipeline and creator analytics engine
"""

__version__ = "0.1.0"
__author__ = "YouTube Analysis Team"
