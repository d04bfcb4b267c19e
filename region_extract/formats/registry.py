#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Format registry.

Maps format identifiers to writer and reader factories. Identifiers may be
mimetypes ("image/jpeg"), URL-encoded mimetypes ("image%2Fjpeg") or bare
suffixes ("jpeg"); all three resolve to the same entry.

The registry is read-only while extractions run. Registering new formats
while other threads extract through the same registry is not supported.
"""
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Mapping, Optional

from region_extract.core.config import DEFAULT_FORMAT_TABLE
from region_extract.core.logging_config import get_module_logger
from region_extract.formats.base import FormatTag, Reader, Writer
from region_extract.formats.readers import READER_FACTORIES
from region_extract.formats.writers import WRITER_FACTORIES

# Initialize logger
logger = get_module_logger(__name__)

MIMETYPE_PREFIXES = ("image/", "image%2F")

WriterFactory = Callable[[], Writer]
ReaderFactory = Callable[[], Reader]


def get_format_suffix(identifier: str) -> str:
    """
    Strip the mimetype prefix from a format identifier.

    Parameters
    ----------
    identifier : str
        "image/jpeg", "image%2Fjpeg" or "jpeg".

    Returns
    -------
    str
        The bare suffix, e.g. "jpeg".
    """
    for prefix in MIMETYPE_PREFIXES:
        if identifier.lower().startswith(prefix.lower()):
            return identifier[len(prefix):]
    return identifier


def _table_factories(table: Mapping[str, str], factories: Mapping[FormatTag, Callable]) -> Dict[str, Callable]:
    return OrderedDict(
        (identifier, factories[FormatTag.from_name(tag)]) for identifier, tag in table.items()
    )


def default_writers() -> Dict[str, WriterFactory]:
    return _table_factories(DEFAULT_FORMAT_TABLE, WRITER_FACTORIES)


def default_readers() -> Dict[str, ReaderFactory]:
    return _table_factories(DEFAULT_FORMAT_TABLE, READER_FACTORIES)


class FormatRegistry:
    """
    Lookup of writer and reader factories by format identifier.

    Parameters
    ----------
    writers : mapping, optional
        Ordered identifier -> writer factory associations. Defaults to the
        built-in table (jpeg, jpg, jp2, png, tiff, tif).
    readers : mapping, optional
        Ordered identifier -> reader factory associations, same default.
    """

    def __init__(self,
                 writers: Optional[Mapping[str, WriterFactory]] = None,
                 readers: Optional[Mapping[str, ReaderFactory]] = None):
        self._writers: Dict[str, WriterFactory] = OrderedDict()
        self._readers: Dict[str, ReaderFactory] = OrderedDict()

        for identifier, factory in (default_writers() if writers is None else writers).items():
            self.register_writer(identifier, factory)
        for identifier, factory in (default_readers() if readers is None else readers).items():
            self.register_reader(identifier, factory)

    @classmethod
    def from_table(cls, table: Mapping[str, str]) -> "FormatRegistry":
        """
        Build a registry from identifier -> format tag names.

        This is the shape of the ``formats`` section of a YAML configuration,
        e.g. ``{"jpg": "jpeg", "tif": "tiff"}``.
        """
        return cls(writers=_table_factories(table, WRITER_FACTORIES),
                   readers=_table_factories(table, READER_FACTORIES))

    @staticmethod
    def _key(identifier: str) -> str:
        return get_format_suffix(identifier).lower()

    @property
    def formats(self) -> List[str]:
        return list(self._writers)

    def register_writer(self, identifier: str, factory: WriterFactory) -> None:
        self._writers[self._key(identifier)] = factory

    def register_reader(self, identifier: str, factory: ReaderFactory) -> None:
        self._readers[self._key(identifier)] = factory

    def get_writer(self, identifier: str, options: Optional[Mapping[str, Any]] = None) -> Optional[Writer]:
        """
        Create a writer for a format identifier.

        Parameters
        ----------
        identifier : str
            Format identifier.
        options : mapping, optional
            Writer settings applied right after creation.

        Returns
        -------
        Writer or None
            A new writer, or None if the format is unknown or the writer
            could not be created or configured.
        """
        factory = self._writers.get(self._key(identifier))
        if factory is None:
            logger.error(f"No writer registered for format: {identifier}")
            return None

        try:
            writer = factory()
            if options:
                writer.set_configuration(options)
        except Exception as e:
            logger.error(f"Unable to create writer for format {identifier}: {str(e)}")
            return None

        return writer

    def get_reader(self, identifier: str) -> Optional[Reader]:
        """
        Create a reader for a format identifier.

        Returns None if the format is unknown or the reader could not be
        created.
        """
        factory = self._readers.get(self._key(identifier))
        if factory is None:
            logger.error(f"No reader registered for format: {identifier}")
            return None

        try:
            return factory()
        except Exception as e:
            logger.error(f"Unable to create reader for format {identifier}: {str(e)}")
            return None
