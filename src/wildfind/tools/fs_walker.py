"""
Filesystem walker for wildfind.

This module walks a directory tree, matches file names against the search
term and applies the directory ignore/allow rules. When concurrency is
enabled, the entries of each large enough directory are split in two and
handed to a bounded pool of worker threads.
"""

import os
import stat
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union
from concurrent.futures import Future, ThreadPoolExecutor
import logging

from ..models.config import SearchConfig
from ..models.search_results import DiscoveredFile, SearchResult
from .dir_filter import should_descend
from .pattern_matcher import matches_pattern


logger = logging.getLogger(__name__)

MatchCallback = Callable[[DiscoveredFile], None]


class SearchError(Exception):
    """Base class for errors that abort a search."""
    pass


class RootDirectoryError(SearchError):
    """Raised when the initial search directory cannot be read."""
    pass


class TraversalError(SearchError):
    """Raised when a worker task fails during a parallel walk."""
    pass


class FSWalker:
    """
    Filesystem walker that traverses directories and matches file names.

    Entries are anything with `name`, `path` and `stat(follow_symlinks=...)`,
    which is what `os.scandir` yields. The walker supports:
    - Wildcard matching of file names
    - Directory ignore/allow rules, optionally scoped to the root directory
    - Splitting a directory's entries across a bounded worker pool

    A walker runs one search at a time.
    """

    def __init__(self, config: SearchConfig, on_match: Optional[MatchCallback] = None):
        """
        Initialize the filesystem walker.

        Args:
            config: Search configuration shared by every recursive call
            on_match: Called with a DiscoveredFile for every match. May be
                called from several threads at once when concurrency is enabled.
        """
        self.config = config
        self.on_match = on_match
        self._pool: Optional[ThreadPoolExecutor] = None
        self._slots = threading.BoundedSemaphore(config.max_workers)

    def search(self, root: Union[str, Path]) -> SearchResult:
        """
        Walk a directory tree and count examined and matching files.

        Args:
            root: Directory to start the search in

        Returns:
            SearchResult with totals for the whole tree

        Raises:
            RootDirectoryError: If the root directory cannot be listed
            TraversalError: If a worker task fails
        """
        root_path = Path(root)
        entries = self._open_root(root_path)

        logger.info(f"Walking directory tree: {root_path}")

        if not self.config.concurrency_enabled:
            result = self.traverse(entries, 0)
        else:
            with ThreadPoolExecutor(max_workers=self.config.max_workers,
                                    thread_name_prefix='wildfind') as pool:
                self._pool = pool
                try:
                    result = self.traverse(entries, 0)
                finally:
                    self._pool = None

        logger.info(f"Finished walking {root_path}: {result.files_examined} examined, "
                    f"{result.files_matched} matched")
        return result

    def _open_root(self, root_path: Path) -> List[os.DirEntry]:
        """
        List the root directory.

        Args:
            root_path: Root directory to list

        Returns:
            Entries of the root directory

        Raises:
            RootDirectoryError: If the path is not a readable directory
        """
        if not root_path.is_dir():
            raise RootDirectoryError(f"Root path is not a directory: {root_path}")

        try:
            return _read_entries(root_path)
        except OSError as e:
            raise RootDirectoryError(f"Cannot read root directory {root_path}: {e}") from e

    def traverse(self, entries: Iterable[os.DirEntry], depth: int = 0) -> SearchResult:
        """
        Process one directory's entries, splitting them across workers if worthwhile.

        Outside of `search()` there is no worker pool and entries are always
        processed on the calling thread.

        Args:
            entries: Entries of the directory
            depth: 0 for the initial directory, increasing by one per level

        Returns:
            SearchResult for the entries and everything below them
        """
        entries = list(entries)

        if (not self.config.concurrency_enabled
                or self._pool is None
                or len(entries) < self.config.min_entries_for_split):
            return self.process_entries(entries, depth)

        partitions = split_entries(entries)
        futures = [self._submit(partition, depth) for partition in partitions]

        result = SearchResult()

        # Partitions that did not get a worker slot run here
        for partition, future in zip(partitions, futures):
            if future is None:
                result.merge(self.process_entries(partition, depth))

        for future in futures:
            if future is not None:
                result.merge(self._join(future))

        return result

    def _submit(self, partition: List[os.DirEntry], depth: int) -> Optional[Future]:
        """
        Hand a partition to the worker pool if a slot is free.

        Args:
            partition: Entries to process
            depth: Depth of the directory the entries belong to

        Returns:
            Future for the partition's SearchResult, or None if no slot was free
        """
        if self._pool is None or not self._slots.acquire(blocking=False):
            return None

        try:
            return self._pool.submit(self._run_partition, partition, depth)
        except Exception:
            self._slots.release()
            raise

    def _run_partition(self, partition: List[os.DirEntry], depth: int) -> SearchResult:
        try:
            return self.process_entries(partition, depth)
        finally:
            self._slots.release()

    def _join(self, future: Future) -> SearchResult:
        """
        Wait for a worker task and return its result.

        Raises:
            TraversalError: If the task raised
        """
        try:
            return future.result()
        except Exception as e:
            if isinstance(e, TraversalError):
                raise
            else:
                raise TraversalError(f"Worker task failed: {e}") from e

    def process_entries(self, entries: Iterable[os.DirEntry], depth: int) -> SearchResult:
        """
        Match files and recurse into subdirectories.

        Entries whose metadata cannot be read (for example because they were
        removed after the listing) are skipped without being counted.

        Args:
            entries: Entries to process
            depth: Depth of the directory the entries belong to

        Returns:
            SearchResult for these entries
        """
        result = SearchResult()

        for entry in entries:
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as e:
                logger.debug(f"Skipping entry {_display_path(entry)}: {e}")
                continue

            if stat.S_ISDIR(st.st_mode):
                child_result = self._process_directory(entry, depth)
                if child_result is not None:
                    result.merge(child_result)
            else:
                result.files_examined += 1
                name = _display_name(entry)
                if matches_pattern(name.lower(), self.config.search_term):
                    result.files_matched += 1
                    self._emit(DiscoveredFile(name=name, full_path=_display_path(entry)))

        return result

    def _process_directory(self, entry: os.DirEntry, depth: int) -> Optional[SearchResult]:
        """
        Walk a subdirectory if the rules allow it.

        Args:
            entry: Directory entry
            depth: Depth of the directory containing the entry

        Returns:
            SearchResult for the subtree, or None if it was skipped
        """
        if not should_descend(entry.name, self.config, at_root=depth == 0):
            return None

        try:
            child_entries = _read_entries(entry.path)
        except OSError as e:
            logger.debug(f"Cannot read directory {_display_path(entry)}: {e}")
            return None

        return self.traverse(child_entries, depth + 1)

    def _emit(self, discovered: DiscoveredFile) -> None:
        if self.on_match is not None:
            self.on_match(discovered)


def split_entries(entries: List[os.DirEntry]) -> Tuple[List[os.DirEntry], List[os.DirEntry]]:
    """
    Split entries into two contiguous partitions around the midpoint.

    The first partition runs through index `len // 2` inclusive, so it is
    never smaller than the second one.

    Args:
        entries: Entries to split

    Returns:
        Tuple of (first partition, second partition)
    """
    mid = len(entries) // 2
    return entries[:mid + 1], entries[mid + 1:]


def _read_entries(path: Union[str, Path]) -> List[os.DirEntry]:
    """
    List a directory.

    An error while reading the listing ends it early and the entries read so
    far are returned.

    Raises:
        OSError: If the directory cannot be opened
    """
    entries = []
    with os.scandir(path) as it:
        while True:
            try:
                entry = next(it)
            except StopIteration:
                break
            except OSError as e:
                logger.debug(f"Listing of {os.fsdecode(path)!r} ended early: {e}")
                break
            entries.append(entry)
    return entries


def _display_name(entry: os.DirEntry) -> str:
    """Get an entry's name, or an empty string if it is not valid UTF-8."""
    name = entry.name
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        return ''
    return name


def _display_path(entry: os.DirEntry) -> str:
    # Undecodable bytes become U+FFFD so the path can be printed
    return os.fsencode(entry.path).decode('utf-8', 'replace')


def find_files(root: Union[str, Path], config: SearchConfig,
               on_match: Optional[MatchCallback] = None) -> SearchResult:
    """
    Search a directory tree for file names matching the configured pattern.

    Args:
        root: Directory to start the search in
        config: Search configuration
        on_match: Optional callback for every matching file

    Returns:
        SearchResult with totals for the whole tree
    """
    walker = FSWalker(config, on_match=on_match)
    return walker.search(root)
