from pathlib import Path


def calculate_size(path: Path) -> int:
    """Total byte size of every regular file under ``path``.

    Enumeration errors (permission denied, directory vanished mid-walk) are not
    caught here; callers treat them as fatal for the whole run.
    Symlinks are neither counted nor followed.
    """
    total = 0
    subdirs = []
    for entry in Path(path).iterdir():
        if entry.is_symlink():
            continue
        if entry.is_file():
            total += entry.stat().st_size
        elif entry.is_dir():
            subdirs.append(entry)
    for sub in subdirs:
        total += calculate_size(sub)
    return total
