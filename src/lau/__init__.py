"""lau - distribute persona templates into AI agent projects."""

__version__ = "0.1.0"
