"""
setup-action: install a GitHub release binary into the runner tool cache.
"""

__version__ = "1.0.0"
