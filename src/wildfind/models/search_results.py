"""
Search results data models for wildfind.

This module defines the counters aggregated during a directory walk and the
event emitted for every file whose name matches the search term.
"""

from pydantic import BaseModel, ConfigDict, Field


class DiscoveredFile(BaseModel):
    """
    A file whose name matched the search term.

    Emitted to the output callback as soon as the match is found; the walker
    does not keep these around.

    Attributes:
        name: File name as listed in its directory (empty if undecodable)
        full_path: Printable path to the file
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name as listed in its directory")
    full_path: str = Field(..., min_length=1, description="Printable path to the file")

    def __str__(self) -> str:
        return f"File: {self.name}\nPath: {self.full_path}"


class SearchResult(BaseModel):
    """
    Counters produced by walking part of a directory tree.

    Each traversal call builds a fresh instance and folds its children's
    results into it. Only one task touches an instance until it is handed
    back to the caller.

    Attributes:
        files_examined: Number of non-directory entries looked at
        files_matched: Number of those whose name matched the search term
    """

    files_examined: int = Field(0, ge=0, description="Number of non-directory entries examined")
    files_matched: int = Field(0, ge=0, description="Number of entries whose name matched")

    def merge(self, other: 'SearchResult') -> 'SearchResult':
        """Add another result's counters into this one and return self."""
        self.files_examined += other.files_examined
        self.files_matched += other.files_matched
        return self

    def __str__(self) -> str:
        """Summary line shown after a search."""
        return f"Searched {self.files_examined} files. Found {self.files_matched} files."
