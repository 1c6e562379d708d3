"""
CareWatch - remote patient monitoring clinical rule evaluation service.
"""

__version__ = "1.0.0"
