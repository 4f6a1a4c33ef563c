"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filters.py
Category filtering of duplicate groups. Produces a derived read-only view;
the groups passed in are never modified.
"""
import os
from typing import AbstractSet, Dict, Sequence, Tuple

from dupesweep.core.models import DuplicateGroup, FileCategory


EXTENSION_CATEGORIES: Dict[str, FileCategory] = {
    ".pdf": FileCategory.DOCUMENT,
    ".doc": FileCategory.DOCUMENT,
    ".docx": FileCategory.DOCUMENT,
    ".txt": FileCategory.DOCUMENT,
    ".rtf": FileCategory.DOCUMENT,
    ".jpg": FileCategory.IMAGE,
    ".jpeg": FileCategory.IMAGE,
    ".png": FileCategory.IMAGE,
    ".gif": FileCategory.IMAGE,
    ".webp": FileCategory.IMAGE,
    ".svg": FileCategory.IMAGE,
    ".mp4": FileCategory.VIDEO,
    ".mkv": FileCategory.VIDEO,
    ".avi": FileCategory.VIDEO,
    ".mov": FileCategory.VIDEO,
    ".webm": FileCategory.VIDEO,
}


class FilterEngine:
    """Derives filtered views of duplicate groups by file category."""

    @staticmethod
    def category_for(path: str) -> FileCategory:
        """Category of a file, from its extension (case-insensitive)."""
        _, ext = os.path.splitext(path)
        return EXTENSION_CATEGORIES.get(ext.lower(), FileCategory.OTHER)

    @staticmethod
    def apply_filters(
            groups: Sequence[DuplicateGroup],
            active_categories: AbstractSet[FileCategory]
    ) -> Sequence[DuplicateGroup]:
        """
        Keeps only files whose category is active. Groups left with fewer than
        two files are dropped. With every category active the input is returned as is.
        """
        if set(active_categories) >= FileCategory.get_all():
            return groups

        filtered = []
        for group in groups:
            files = tuple(
                f for f in group.files
                if FilterEngine.category_for(f.path) in active_categories
            )
            if len(files) >= 2:
                if len(files) == len(group.files):
                    filtered.append(group)
                else:
                    filtered.append(DuplicateGroup(fingerprint=group.fingerprint, files=files))
        return tuple(filtered)

    @staticmethod
    def count_by_category(groups: Sequence[DuplicateGroup]) -> Dict[FileCategory, int]:
        """Number of files per category across the groups (for filter toggles)."""
        counts = {category: 0 for category in FileCategory}
        for group in groups:
            for f in group.files:
                counts[FilterEngine.category_for(f.path)] += 1
        return counts

    @staticmethod
    def visible_paths(groups: Sequence[DuplicateGroup]) -> Tuple[str, ...]:
        return tuple(f.path for g in groups for f in g.files)
