"""
Lakach - browse remote folders over SSH and mirror them locally with rsync.
"""

__version__ = "0.1.0"
