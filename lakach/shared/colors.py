"""
ANSI color codes used by the plain (non-curses) CLI output.
"""

COLOR_RESET = "\033[0m"
COLOR_INFO = "\033[36m"
COLOR_SUCCESS = "\033[32m"
COLOR_WARNING = "\033[33m"
COLOR_ERROR = "\033[31m"
COLOR_PROMPT = "\033[1;37m"
