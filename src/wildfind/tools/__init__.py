"""
Search tools for wildfind.

This module contains the wildcard matcher, the directory filter and the
filesystem walker that ties them together.
"""
