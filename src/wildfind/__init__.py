"""
wildfind - Core Package

A recursive filename search tool that matches wildcard patterns across a
directory tree, with per-run directory ignore/allow rules and an optional
parallel walk.
"""

__version__ = "0.1.0"
__author__ = "wildfind Team"
