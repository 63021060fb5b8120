"""
Entry point for `python -m lakach.frontends.cli`.
"""

from .main import main

if __name__ == "__main__":
    main()
