"""mieru: page, component and dependency structure of frontend codebases."""

__version__ = "0.1.0"
