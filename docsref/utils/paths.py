"""
Path helpers shared by the ignore rules, the loader and the query engine
"""

from typing import Iterable


def normalize_path(path: str) -> str:
    """Forward slashes, no leading or trailing separator"""
    return path.replace('\\', '/').strip('/')


def normalize_directory(directory: str) -> str:
    """Normalize a directory prefix so it ends with exactly one '/'"""
    return directory.replace('\\', '/').rstrip('/') + '/'


def file_extension(name: str) -> str:
    """
    Lower-cased extension of a file name, taken from its last '.'.

    Dotfiles keep their whole name as extension ('.gitignore'), which is what
    lets entries such as '.gitignore' or '.env' appear in extension allowlists.
    """
    base = name.replace('\\', '/').rsplit('/', 1)[-1]
    index = base.rfind('.')
    if index == -1 or index == len(base) - 1:
        return ""
    return base[index:].lower()


def has_allowed_extension(name: str, allowed: Iterable[str]) -> bool:
    """
    Case-insensitive allowlist check.

    Multi-part entries such as '.env.example' match as a suffix of the file name.
    """
    base = name.replace('\\', '/').rsplit('/', 1)[-1].lower()
    extension = file_extension(base)
    for entry in allowed:
        if entry == extension:
            return True
        if entry.count('.') > 1 and base.endswith(entry):
            return True
    return False
