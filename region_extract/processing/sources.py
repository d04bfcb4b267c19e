#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input sources and output destinations for extraction.

A source opens into something the decoder accepts (a path or a readable
stream); a destination opens into a writable binary stream. Both are
context managers so that temporary files and output files are released
on every exit path.
"""
import os
import shutil
import sys
import tempfile
from contextlib import contextmanager
from typing import Any, BinaryIO, Iterator, Optional

from region_extract.core.config import COPY_BUFFER_SIZE, STDIN_ALIASES, STDIN_PATH, TEMP_PREFIX, TEMP_SUFFIX
from region_extract.core.exceptions import ExtractionError
from region_extract.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def remove_temporary_file(path: str) -> bool:
    """
    Delete a temporary file, logging instead of raising on failure.

    Returns
    -------
    bool
        True if the file was removed.
    """
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"File not deleted: {path} ({str(e)})")
        return False
    logger.debug(f"Removed temporary file {path}")
    return True


class Source:
    """Something the decoder can read from."""

    def open(self):
        """Context manager yielding a path or a readable stream."""
        raise NotImplementedError


class PathSource(Source):
    def __init__(self, path: str):
        self.path = path

    @contextmanager
    def open(self) -> Iterator[str]:
        yield self.path

    def __str__(self):
        return self.path


class StreamSource(Source):
    """A readable binary stream, passed to the decoder as is."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        yield self.stream

    def __str__(self):
        return str(getattr(self.stream, "name", "<stream>"))


class StdinSource(Source):
    """
    Standard input copied to a temporary file.

    Decoders that need random access cannot read a pipe, so the bytes are
    materialized into a ``.jp2`` temporary file whose path is handed to the
    decoder. The file is removed when the context exits, whether or not the
    extraction succeeded.

    Parameters
    ----------
    stream : file-like, optional
        Stream to read instead of ``sys.stdin.buffer``.
    """

    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream

    @contextmanager
    def open(self) -> Iterator[str]:
        stream = self.stream if self.stream is not None else sys.stdin.buffer
        try:
            fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
        except OSError as e:
            logger.error(f"Unable to create temporary file for {STDIN_PATH}: {str(e)}")
            raise ExtractionError(f"Unable to create temporary file for {STDIN_PATH}: {e}") from e

        try:
            try:
                with os.fdopen(fd, "wb") as tmp:
                    shutil.copyfileobj(stream, tmp, COPY_BUFFER_SIZE)
            except OSError as e:
                logger.error(f"Unable to process image from {STDIN_PATH}: {str(e)}")
                raise ExtractionError(f"Unable to copy {STDIN_PATH} to {path}: {e}") from e

            logger.debug(f"Copied {STDIN_PATH} to {path} ({os.path.getsize(path)} bytes)")
            yield path
        finally:
            remove_temporary_file(path)

    def __str__(self):
        return STDIN_PATH


class Destination:
    """Something the writer can write to."""

    def open(self):
        """Context manager yielding a writable binary stream."""
        raise NotImplementedError


class PathDestination(Destination):
    """
    Output file, opened with buffering only when there is something to write
    and closed right after the write. A failed write leaves no file behind.
    """

    def __init__(self, path: str):
        self.path = path

    def discard(self, stream: BinaryIO) -> None:
        """Close and delete a partially written output file."""
        try:
            stream.close()
        except OSError as e:
            logger.warning(f"Error attempting to close: {self.path} ({str(e)})")
        remove_temporary_file(self.path)

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        try:
            stream = open(self.path, "wb")
        except OSError as e:
            logger.error(f"Requested file could not be opened: {self.path}")
            raise ExtractionError(f"Unable to open {self.path}: {e}") from e

        try:
            yield stream
        except OSError as e:
            self.discard(stream)
            logger.error(f"Error writing to {self.path}: {str(e)}")
            raise ExtractionError(f"Unable to write {self.path}: {e}") from e
        except Exception:
            self.discard(stream)
            raise
        finally:
            if not stream.closed:
                try:
                    stream.close()
                except OSError as e:
                    logger.error(f"Error attempting to close: {self.path}")
                    raise ExtractionError(f"Unable to close {self.path}: {e}") from e

    def __str__(self):
        return self.path


class StreamDestination(Destination):
    """Caller-owned stream; flushed but never closed here."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        try:
            yield self.stream
            flush = getattr(self.stream, "flush", None)
            if flush is not None:
                flush()
        except OSError as e:
            logger.error(f"Error writing to {self}: {str(e)}")
            raise ExtractionError(f"Unable to write {self}: {e}") from e

    def __str__(self):
        return str(getattr(self.stream, "name", "<stream>"))


def as_source(source: Any, stdin: Optional[BinaryIO] = None) -> Source:
    """
    Wrap a path, the stdin sentinel or a readable stream as a Source.

    Parameters
    ----------
    source : str, os.PathLike, file-like or Source
        Input to extract from. ``/dev/stdin`` and ``-`` select standard input.
    stdin : file-like, optional
        Stream standing in for standard input.
    """
    if isinstance(source, Source):
        return source
    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        if path in STDIN_ALIASES:
            return StdinSource(stdin)
        return PathSource(path)
    if hasattr(source, "read"):
        return StreamSource(source)
    raise TypeError(f"Unsupported source type: {type(source).__name__}")


def as_destination(destination: Any) -> Destination:
    """Wrap a path or a writable stream as a Destination."""
    if isinstance(destination, Destination):
        return destination
    if isinstance(destination, (str, os.PathLike)):
        return PathDestination(os.fspath(destination))
    if hasattr(destination, "write"):
        return StreamDestination(destination)
    raise TypeError(f"Unsupported destination type: {type(destination).__name__}")
