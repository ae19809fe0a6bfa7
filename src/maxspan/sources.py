"""
Document Sources

Reads SPAN and Bhav documents from disk. Exchanges publish SPAN files as
.spn/.xml, often zipped, and Bhav copies as HTML-table .xls files; the core
only ever sees the decoded text or bytes returned here.
"""

import zipfile
from pathlib import Path
from typing import Union

from loguru import logger

SPAN_SUFFIXES = (".spn", ".xml")


def read_document(path: Union[str, Path], member_suffixes: tuple[str, ...] = ()) -> bytes:
    """
    Return the raw bytes of a document, unpacking .zip archives.

    Args:
        path: File path (.zip or plain file)
        member_suffixes: Preferred archive member suffixes, in priority order;
            the first member is used when none match

    Raises:
        FileNotFoundError: If the file or a usable archive member is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() != ".zip":
        return path.read_bytes()

    with zipfile.ZipFile(path, "r") as z:
        names = [n for n in z.namelist() if not n.endswith("/")]
        if not names:
            raise FileNotFoundError(f"No files inside ZIP: {path}")
        member = next(
            (n for suffix in member_suffixes for n in names if n.lower().endswith(suffix)),
            names[0],
        )
        logger.debug(f"Reading {member} from {path}")
        return z.read(member)


def read_span(path: Union[str, Path]) -> bytes:
    """SPAN XML bytes from a .spn/.xml file or a zip holding one."""
    return read_document(path, SPAN_SUFFIXES)


def read_bhav(path: Union[str, Path]) -> str:
    """Bhav HTML text; exchange copies are not always valid UTF-8."""
    raw = read_document(path, (".xls", ".htm", ".html"))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")
