"""AI generated git commit messages through interchangeable chat providers."""

__version__ = "0.3.0"
