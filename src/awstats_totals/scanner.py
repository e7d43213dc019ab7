"""
Find the AWStats database files.

AWStats writes one file per site per month, and some installations
nest them in subdirectories (e.g. one directory per server), so we
walk the whole tree below the data directory.
"""

import logging
import os
import pathlib


logger = logging.getLogger(__name__)


def list_files(root_dir: pathlib.Path | str) -> list[pathlib.Path]:
    """
    Return the absolute paths of all the files below ``root_dir``.

    Hidden files and directories (anything whose name starts with a dot)
    are skipped.  If a directory can't be read, it's skipped and we carry
    on with the rest of the tree -- this never raises.

    Entries in each directory are sorted by name, so repeated calls
    return the files in the same order.
    """
    root = pathlib.Path(root_dir).absolute()

    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as err:
        logger.warning("Unable to read directory %s: %s", root, err)
        return []

    result: list[pathlib.Path] = []

    for entry in entries:
        if entry.name.startswith("."):
            continue

        try:
            if entry.is_dir():
                result.extend(list_files(entry.path))
            elif entry.is_file():
                result.append(pathlib.Path(entry.path))
        except OSError as err:  # pragma: no cover
            logger.warning("Unable to stat %s: %s", entry.path, err)

    return result
