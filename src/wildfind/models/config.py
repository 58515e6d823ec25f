"""
Configuration data models for wildfind.

This module defines the data structures that drive a search run: the
directory ignore/allow rules, the concurrency settings, the settings-file
model and the immutable per-run search configuration shared by every
worker task.
"""

from typing import Dict, FrozenSet, List, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MIN_SPLIT_ENTRIES = 2


class DirectoryRule(BaseModel):
    """
    A set of directory names paired with a root-only flag.

    Used for both the ignore rule and the allow rule. Names are stored
    lowercased so membership checks are case-insensitive.

    Attributes:
        names: Lowercased directory names the rule applies to
        root_only: Whether the rule applies only to the initial search directory
    """

    model_config = ConfigDict(frozen=True)

    names: FrozenSet[str] = Field(default_factory=frozenset, description="Lowercased directory names")
    root_only: bool = Field(False, description="Whether the rule applies at the root directory only")

    @field_validator('names', mode='before')
    @classmethod
    def normalize_names(cls, v: Union[str, List[str], FrozenSet[str], None]) -> FrozenSet[str]:
        """Accept a comma-separated string or a collection and lowercase every name."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.strip()
            if v.startswith('[') and v.endswith(']'):
                v = v[1:-1]
            v = v.split(',')

        normalized = set()
        for name in v:
            if not isinstance(name, str):
                raise ValueError(f"Directory name must be a string, got {type(name).__name__}")
            name = name.strip().lower()
            if name:
                normalized.add(name)
        return frozenset(normalized)

    def is_empty(self) -> bool:
        """Check if the rule names no directories."""
        return not self.names

    def merged_with(self, names: List[str], root_only: bool = False) -> 'DirectoryRule':
        """Return a new rule with extra names added and root_only OR-ed in."""
        return DirectoryRule(
            names=set(self.names) | set(DirectoryRule(names=names).names),
            root_only=self.root_only or root_only,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {'names': sorted(self.names), 'root_only': self.root_only}


class ConcurrencyConfig(BaseModel):
    """
    Configuration for the parallel directory walk.

    Attributes:
        enabled: Whether sibling entries may be split across worker tasks
        min_entries_for_split: Minimum entries in a directory before it is split
        max_workers: Maximum number of worker tasks running at once
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(True, description="Whether the parallel walk is enabled")
    min_entries_for_split: int = Field(
        MIN_SPLIT_ENTRIES, ge=MIN_SPLIT_ENTRIES,
        description="Minimum entries in a directory before it is split",
    )
    max_workers: int = Field(8, gt=0, description="Maximum number of concurrent worker tasks")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class SearchConfig(BaseModel):
    """
    Immutable configuration for one search run.

    A single instance is built at startup and shared by reference with every
    recursive call and worker task. The current depth is passed separately
    by the walker, so nothing here changes during a run.

    Attributes:
        search_term: Lowercased wildcard pattern matched against file names
        ignore: Directories not to descend into
        allow: Directories to descend into exclusively (empty means all)
        concurrency_enabled: Whether entries may be split across worker tasks
        min_entries_for_split: Minimum entries in a directory before it is split
        max_workers: Maximum number of worker tasks running at once
    """

    model_config = ConfigDict(frozen=True)

    search_term: str = Field(..., min_length=1, description="Wildcard pattern to match file names against")
    ignore: DirectoryRule = Field(default_factory=DirectoryRule, description="Ignore rule")
    allow: DirectoryRule = Field(default_factory=DirectoryRule, description="Allow rule")
    concurrency_enabled: bool = Field(True, description="Whether the parallel walk is enabled")
    min_entries_for_split: int = Field(
        MIN_SPLIT_ENTRIES, ge=MIN_SPLIT_ENTRIES,
        description="Minimum entries in a directory before it is split",
    )
    max_workers: int = Field(8, gt=0, description="Maximum number of concurrent worker tasks")

    @field_validator('search_term')
    @classmethod
    def validate_search_term(cls, v: str) -> str:
        """Lowercase the search term; matching is case-insensitive."""
        if not v:
            raise ValueError("Search term cannot be empty")
        return v.lower()

    def __str__(self) -> str:
        """String representation of the search configuration."""
        parts = [f"Search: '{self.search_term}'"]
        if not self.ignore.is_empty():
            parts.append(f"Ignore: {sorted(self.ignore.names)}{' (root only)' if self.ignore.root_only else ''}")
        if not self.allow.is_empty():
            parts.append(f"Allow: {sorted(self.allow.names)}{' (root only)' if self.allow.root_only else ''}")
        if self.concurrency_enabled:
            parts.append(f"Workers: {self.max_workers}, split at {self.min_entries_for_split}")
        else:
            parts.append("Concurrency: disabled")
        return " | ".join(parts)


class FinderConfig(BaseModel):
    """
    Settings loaded from a wildfind settings file.

    Holds everything about a run except the search term, which always comes
    from the command line.

    Attributes:
        ignore: Default ignore rule
        allow: Default allow rule
        concurrency: Parallel walk settings
    """

    ignore: DirectoryRule = Field(default_factory=DirectoryRule, description="Ignore rule")
    allow: DirectoryRule = Field(default_factory=DirectoryRule, description="Allow rule")
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig, description="Parallel walk settings")

    @model_validator(mode='before')
    @classmethod
    def accept_name_lists(cls, data: Any) -> Any:
        """Allow `ignore: [a, b]` as shorthand for `ignore: {names: [a, b]}`."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ('ignore', 'allow'):
            value = data.get(key)
            if isinstance(value, (list, str)):
                data[key] = {'names': value}
            elif value is None and key in data:
                data.pop(key)
        return data

    def get_overlapping_names(self) -> List[str]:
        """Get directory names that are both ignored and allowed."""
        return sorted(self.ignore.names & self.allow.names)

    def to_search_config(self, search_term: str, **overrides: Any) -> SearchConfig:
        """
        Derive the per-run search configuration.

        Args:
            search_term: Wildcard pattern from the command line
            **overrides: SearchConfig fields that replace the settings-file values

        Returns:
            Frozen SearchConfig for the run
        """
        values: Dict[str, Any] = {
            'search_term': search_term,
            'ignore': self.ignore,
            'allow': self.allow,
            'concurrency_enabled': self.concurrency.enabled,
            'min_entries_for_split': self.concurrency.min_entries_for_split,
            'max_workers': self.concurrency.max_workers,
        }
        values.update(overrides)
        return SearchConfig(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return {
            'ignore': self.ignore.to_dict(),
            'allow': self.allow.to_dict(),
            'concurrency': self.concurrency.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinderConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)
