"""Map changed file paths to logical components for prompt construction."""

import re

DEFAULT_CATEGORY = "Other"

# Ordered: the first rule with a matching substring wins.
CATEGORY_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("Components", ("components/",)),
    ("Pages/Routes", ("pages/", "app/")),
    ("Libraries/Utilities", ("lib/", "utils/")),
    ("Styles", ("styles/", ".css")),
    ("Assets", ("public/",)),
    ("API", ("api/",)),
    ("Configuration", (".config.", "package.json")),
    ("Tests", ("test", "spec")),
]

# Finer label taken from the segment after a directory marker.
COMPONENT_PATTERNS: list[tuple[str, re.Pattern[str], str]] = [
    ("/components/", re.compile(r"/components/(.+?)/"), "Component"),
    ("/api/", re.compile(r"/api/(.+?)[/.]"), "API"),
    ("/lib/", re.compile(r"/lib/(.+?)\."), "Library"),
    ("/pages/", re.compile(r"/pages/(.+?)[/.]"), "Page"),
]


def categorize_path(path: str) -> str:
    """Coarse category of a single path"""
    for category, markers in CATEGORY_RULES:
        if any(marker in path for marker in markers):
            return category
    return DEFAULT_CATEGORY


def component_label(path: str) -> str | None:
    """Finer "Kind: name" label, None when the path has no recognizable marker"""
    for marker, pattern, kind in COMPONENT_PATTERNS:
        if marker in path:
            match = pattern.search(path)
            return f"{kind}: {match.group(1)}" if match else None
    return None


def categorize(paths: list[str]) -> list[str]:
    """Component labels for a commit's changed files

    Each path contributes its finer label when one can be extracted, otherwise
    its coarse category. Labels are unique and keep first-seen order.
    """
    labels: dict[str, None] = {}
    for path in paths:
        label = component_label(path) or categorize_path(path)
        labels.setdefault(label, None)
    return list(labels)


def categorize_counts(paths: list[str]) -> dict[str, int]:
    """Number of distinct paths per coarse category"""
    grouped: dict[str, set[str]] = {}
    for path in paths:
        grouped.setdefault(categorize_path(path), set()).add(path)
    return {category: len(files) for category, files in grouped.items()}


def describe_counts(paths: list[str]) -> list[str]:
    """Lines like "Components (2 files)" """
    return [
        f"{category} ({count} {'file' if count == 1 else 'files'})"
        for category, count in categorize_counts(paths).items()
    ]
