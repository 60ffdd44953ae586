"""
Routes Module

Contains API route definitions.
"""

from . import games, analysis

__all__ = ['games', 'analysis']
