"""
Entry point for `python -m lakach`.
"""

from lakach.frontends.cli.main import main

if __name__ == "__main__":
    main()
