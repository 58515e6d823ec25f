"""
Unit tests for configuration data models.

Tests DirectoryRule, ConcurrencyConfig, SearchConfig and FinderConfig
validation and normalization.
"""

import pytest
from pydantic import ValidationError

from wildfind.models.config import (
    ConcurrencyConfig, DirectoryRule, FinderConfig, SearchConfig
)


class TestDirectoryRule:
    """Test cases for DirectoryRule class."""

    def test_default_rule(self):
        """Test that a default rule names nothing and is not root-only."""
        rule = DirectoryRule()
        assert rule.names == frozenset()
        assert rule.root_only is False
        assert rule.is_empty()

    def test_names_are_lowercased(self):
        """Test that names are normalized to lowercase."""
        rule = DirectoryRule(names=["Target", " .GIT ", ""])
        assert rule.names == frozenset({"target", ".git"})

    def test_comma_separated_string(self):
        """Test that a comma-separated string is accepted."""
        rule = DirectoryRule(names="target,node_modules")
        assert rule.names == frozenset({"target", "node_modules"})

    def test_bracketed_string(self):
        """Test that the bracketed command-line form is accepted."""
        rule = DirectoryRule(names="[target,Build]")
        assert rule.names == frozenset({"target", "build"})

    def test_non_string_name_rejected(self):
        """Test that non-string names are rejected."""
        with pytest.raises(ValidationError):
            DirectoryRule(names=["ok", 3])

    def test_rule_is_frozen(self):
        """Test that rules cannot be modified after creation."""
        rule = DirectoryRule(names=["a"])
        with pytest.raises(ValidationError):
            rule.root_only = True

    def test_merged_with(self):
        """Test adding names and the root-only flag to a rule."""
        rule = DirectoryRule(names=["a"])
        merged = rule.merged_with(["B", "c,d"], root_only=True)

        assert merged.names == frozenset({"a", "b", "c,d"})
        assert merged.root_only is True
        assert rule.names == frozenset({"a"})

    def test_merged_with_keeps_root_only(self):
        """Test that merging never clears root_only."""
        rule = DirectoryRule(names=["a"], root_only=True)
        assert rule.merged_with([], root_only=False).root_only is True

    def test_to_dict(self):
        """Test dictionary conversion sorts names."""
        rule = DirectoryRule(names=["b", "a"], root_only=True)
        assert rule.to_dict() == {'names': ['a', 'b'], 'root_only': True}


class TestConcurrencyConfig:
    """Test cases for ConcurrencyConfig class."""

    def test_defaults(self):
        """Test default concurrency settings."""
        config = ConcurrencyConfig()
        assert config.enabled is True
        assert config.min_entries_for_split == 2
        assert config.max_workers == 8

    def test_min_entries_for_split_lower_bound(self):
        """Test that splitting needs at least two entries."""
        with pytest.raises(ValidationError):
            ConcurrencyConfig(min_entries_for_split=1)

    def test_max_workers_positive(self):
        """Test that at least one worker is required."""
        with pytest.raises(ValidationError):
            ConcurrencyConfig(max_workers=0)


class TestSearchConfig:
    """Test cases for SearchConfig class."""

    def test_search_term_lowercased(self):
        """Test that the search term is stored lowercased."""
        config = SearchConfig(search_term="*.TXT")
        assert config.search_term == "*.txt"

    def test_empty_search_term_rejected(self):
        """Test that an empty search term is invalid."""
        with pytest.raises(ValidationError):
            SearchConfig(search_term="")

    def test_min_entries_for_split_invariant(self):
        """Test that min_entries_for_split must be at least 2."""
        with pytest.raises(ValidationError):
            SearchConfig(search_term="x", min_entries_for_split=1)
        assert SearchConfig(search_term="x", min_entries_for_split=2).min_entries_for_split == 2

    def test_frozen(self):
        """Test that the configuration cannot change during a run."""
        config = SearchConfig(search_term="x")
        with pytest.raises(ValidationError):
            config.search_term = "y"

    def test_rules_from_dicts(self):
        """Test building rules from plain dictionaries."""
        config = SearchConfig(
            search_term="x",
            ignore={'names': ['Target'], 'root_only': True},
            allow={'names': 'src,lib'},
        )
        assert config.ignore.names == frozenset({"target"})
        assert config.ignore.root_only is True
        assert config.allow.names == frozenset({"src", "lib"})

    def test_str(self):
        """Test the string representation."""
        config = SearchConfig(
            search_term="*.rs",
            ignore=DirectoryRule(names=["target"], root_only=True),
            concurrency_enabled=False,
        )
        text = str(config)
        assert "*.rs" in text
        assert "['target'] (root only)" in text
        assert "Concurrency: disabled" in text


class TestFinderConfig:
    """Test cases for FinderConfig class."""

    def test_defaults(self):
        """Test the default settings."""
        config = FinderConfig()
        assert config.ignore.is_empty()
        assert config.allow.is_empty()
        assert config.concurrency.enabled is True

    def test_list_shorthand(self):
        """Test that a plain list of names is accepted for a rule."""
        config = FinderConfig.from_dict({'ignore': ['.git', 'Target'], 'allow': None})
        assert config.ignore.names == frozenset({".git", "target"})
        assert config.allow.is_empty()

    def test_nested_form(self):
        """Test the full nested settings form."""
        config = FinderConfig.from_dict({
            'ignore': {'names': ['target'], 'root_only': True},
            'concurrency': {'enabled': False, 'min_entries_for_split': 4, 'max_workers': 2},
        })
        assert config.ignore.root_only is True
        assert config.concurrency.enabled is False
        assert config.concurrency.min_entries_for_split == 4

    def test_invalid_concurrency(self):
        """Test that invalid concurrency settings are rejected."""
        with pytest.raises(ValidationError):
            FinderConfig.from_dict({'concurrency': {'min_entries_for_split': 0}})

    def test_overlapping_names(self):
        """Test detection of names both ignored and allowed."""
        config = FinderConfig.from_dict({'ignore': ['a', 'b'], 'allow': ['b', 'c']})
        assert config.get_overlapping_names() == ['b']

    def test_to_search_config(self):
        """Test deriving a search configuration from settings."""
        config = FinderConfig.from_dict({
            'ignore': ['target'],
            'concurrency': {'enabled': True, 'min_entries_for_split': 5, 'max_workers': 3},
        })
        search = config.to_search_config("*.RS")

        assert search.search_term == "*.rs"
        assert search.ignore.names == frozenset({"target"})
        assert search.min_entries_for_split == 5
        assert search.max_workers == 3

    def test_to_search_config_overrides(self):
        """Test that overrides replace settings values."""
        config = FinderConfig()
        search = config.to_search_config("x", concurrency_enabled=False, max_workers=2)

        assert search.concurrency_enabled is False
        assert search.max_workers == 2

    def test_to_search_config_invalid_override(self):
        """Test that invalid overrides are still validated."""
        with pytest.raises(ValidationError):
            FinderConfig().to_search_config("x", min_entries_for_split=1)

    def test_round_trip_dict(self):
        """Test that to_dict output loads back to equal settings."""
        config = FinderConfig.from_dict({'ignore': {'names': ['a'], 'root_only': True}})
        assert FinderConfig.from_dict(config.to_dict()) == config
