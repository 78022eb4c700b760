"""Slash-delimited configuration path handling."""

import re

_SEP_RE = re.compile(r"/+")


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments.

    Examples:
        >>> split_path("//a///b/")
        ['a', 'b']
    """
    return [seg for seg in _SEP_RE.split(path) if seg]


def normalize_path(cwd: str, path: str) -> str:
    """Resolve ``path`` against ``cwd`` into a canonical absolute path.

    Relative paths are appended to ``cwd``. ``.`` segments are dropped and
    ``..`` pops the previous segment; a ``..`` at the root is absorbed, like
    ``cd ..`` in a shell. Total over any string input.

    Args:
        cwd: Current absolute position
        path: Absolute or relative path

    Returns:
        Absolute path with no empty, ``.`` or ``..`` segments

    Examples:
        >>> normalize_path("/a/b", "..")
        '/a'
        >>> normalize_path("/a", "../../../x")
        '/x'
        >>> normalize_path("/a", "b/./c")
        '/a/b/c'
    """
    segments = [] if path.startswith("/") else split_path(cwd)
    segments.extend(split_path(path))

    stack: list[str] = []
    for seg in segments:
        if seg == "..":
            if stack:
                stack.pop()
        elif seg != ".":
            stack.append(seg)
    return "/" + "/".join(stack)


def is_ancestor(ancestor: str, path: str) -> bool:
    """Whether normalized ``ancestor`` is ``path`` itself or one of its parents."""
    if ancestor == "/":
        return path.startswith("/")
    return path == ancestor or path.startswith(ancestor + "/")


def relative_segments(ancestor: str, path: str) -> list[str]:
    """Segments of ``path`` below ``ancestor`` (which must be an ancestor)."""
    return split_path(path[len(ancestor) :]) if ancestor != "/" else split_path(path)
