"""Hierarchical folder/file index built from flat filesystem paths."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union


@dataclass(frozen=True)
class PageFile:
    """Leaf of the tree: the absolute path of a registered file."""
    path: str


PageFolder = Dict[str, Union["PageFolder", PageFile]]


class PathTree:
    """Nested folder/file index of every registered page.

    Folders are plain dicts keeping insertion order; leaves are
    :class:`PageFile`. Built once during discovery, read-only afterwards.
    """

    def __init__(self):
        self.root: PageFolder = {}

    def add_path(self, path: Union[str, Path]) -> None:
        """Insert an absolute path. Inserting the same path twice is a no-op."""
        path = str(path)
        *folders, filename = [part for part in path.split(os.sep) if part]

        current = self.root
        for name in folders:
            child = current.setdefault(name, {})
            if isinstance(child, PageFile):
                raise ValueError(f"{path}: '{name}' is already registered as a file")
            current = child

        current.setdefault(filename, PageFile(path))

    def walk_to_dir(self, path: Union[str, Path]) -> PageFolder:
        """Return the folder node for a directory path.

        Raises:
            KeyError: if no registered path lives under that directory
        """
        current = self.root
        for name in (part for part in str(path).split(os.sep) if part):
            child = current[name]
            if isinstance(child, PageFile):
                raise KeyError(f"{path} is a file, not a folder")
            current = child
        return current

    def __contains__(self, path: Union[str, Path]) -> bool:
        *folders, filename = [part for part in str(path).split(os.sep) if part]
        try:
            folder = self.walk_to_dir(os.sep.join(folders))
        except KeyError:
            return False
        return isinstance(folder.get(filename), PageFile)


def split_children(folder: PageFolder) -> Tuple[List[str], List[str]]:
    """Names of sub-folders and files of a folder, each sorted.

    Python string order matches the UTF-8 byte order, and a name that is
    a strict prefix of another sorts first.
    """
    folders = sorted(name for name, node in folder.items() if not isinstance(node, PageFile))
    files = sorted(name for name, node in folder.items() if isinstance(node, PageFile))
    return folders, files
