#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extraction processor.

Sits between a decoder and the format writers: decodes the requested region,
applies scaling and the caller's pixel transform, and serializes the result
to a file or stream in the requested format.
"""
from typing import Any, BinaryIO, Mapping, Optional, Union

import numpy as np

from region_extract.core.exceptions import ConfigurationError
from region_extract.core.io import Decoder, RasterioDecoder, buffer_size
from region_extract.core.logging_config import get_module_logger
from region_extract.core.params import DecodeParameters
from region_extract.formats.base import Writer
from region_extract.formats.registry import FormatRegistry
from region_extract.processing.scaling import apply_scaling
from region_extract.processing.sources import Destination, Source, as_destination, as_source
from region_extract.utils.utils import timer

# Initialize logger
logger = get_module_logger(__name__)


class ExtractionProcessor:
    """
    Decode, post-process and encode image regions.

    The processor holds no per-call state; concurrent calls are safe as long
    as the decoder and writers are. ``registry`` may be replaced between
    calls.

    Parameters
    ----------
    decoder : Decoder, optional
        Decoder producing pixel buffers, a RasterioDecoder by default.
    registry : FormatRegistry, optional
        Registry resolving format identifiers, the default table if None.
    stdin : file-like, optional
        Stream read when the source is the stdin sentinel, instead of
        ``sys.stdin.buffer``.
    """

    def __init__(self,
                 decoder: Optional[Decoder] = None,
                 registry: Optional[FormatRegistry] = None,
                 stdin: Optional[BinaryIO] = None):
        self.decoder = decoder if decoder is not None else RasterioDecoder()
        self.registry = registry if registry is not None else FormatRegistry()
        self.stdin = stdin

    def resolve_writer(self,
                       fmt: Union[str, Writer],
                       options: Optional[Mapping[str, Any]] = None) -> Writer:
        """
        Return the writer for a format identifier, or ``fmt`` itself if it
        already is a writer.

        Raises
        ------
        ConfigurationError
            If no writer can be created for the identifier, or the writer
            rejects the options.
        """
        if isinstance(fmt, Writer):
            if options:
                try:
                    fmt.set_configuration(options)
                except Exception as e:
                    logger.error(f"Unable to configure {type(fmt).__name__}: {str(e)}")
                    raise ConfigurationError(f"Invalid options for {type(fmt).__name__}: {e}") from e
            return fmt

        writer = self.registry.get_writer(fmt, options)
        if writer is None:
            raise ConfigurationError(f"No writer available for format: {fmt}")
        return writer

    def postprocess(self, pixels: np.ndarray, params: DecodeParameters) -> np.ndarray:
        """Apply scaling, then the pixel transform, to a decoded buffer."""
        if params.needs_scaling:
            pixels = apply_scaling(pixels, params)

        if params.transform is not None:
            pixels = params.transform(pixels)

        return pixels

    @timer
    def extract(self,
                source: Any,
                destination: Any,
                params: DecodeParameters,
                fmt: Union[str, Writer],
                writer_options: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Extract a region and write it in the requested format.

        Parameters
        ----------
        source : str, os.PathLike, file-like or Source
            Image path, ``/dev/stdin`` (or ``-``), or a readable stream.
        destination : str, os.PathLike, file-like or Destination
            Output path or writable stream.
        params : DecodeParameters
            Region, resolution and post-processing settings.
        fmt : str or Writer
            Format identifier such as "image/jpeg", or a writer instance.
        writer_options : mapping, optional
            Writer settings, e.g. ``{"quality": 80}``.

        Returns
        -------
        bool
            True if an image was written, False if the decoder found nothing
            to extract.

        Raises
        ------
        ConfigurationError
            If ``fmt`` does not resolve to a writer.
        DecodeError
            If the source cannot be decoded.
        ExtractionError
            On any other I/O or encoding failure.
        """
        writer = self.resolve_writer(fmt, writer_options)
        return self.run(as_source(source, self.stdin), as_destination(destination), params, writer)

    def run(self, source: Source, destination: Destination, params: DecodeParameters, writer: Writer) -> bool:
        """
        Core extraction for any source/destination pair.

        The write happens while the source is still open, so a temporary
        input file is removed only after the output has been written, or
        after any failure.
        """
        with source.open() as handle:
            pixels = self.decoder.process(handle, params)

            if pixels is None:
                logger.info(f"Nothing to extract from {source}")
                return False

            width, height = buffer_size(pixels)
            logger.debug(f"Decoded {width}x{height} from {source}")

            pixels = self.postprocess(pixels, params)

            with destination.open() as stream:
                writer.write(pixels, stream)

        width, height = buffer_size(pixels)
        logger.info(f"Wrote {width}x{height} {type(writer).__name__} output to {destination}")
        return True


def extract_image(source: Any,
                  destination: Any,
                  params: DecodeParameters,
                  fmt: Union[str, Writer],
                  writer_options: Optional[Mapping[str, Any]] = None,
                  decoder: Optional[Decoder] = None,
                  registry: Optional[FormatRegistry] = None) -> bool:
    """Extract with a one-off processor. See ``ExtractionProcessor.extract``."""
    processor = ExtractionProcessor(decoder=decoder, registry=registry)
    return processor.extract(source, destination, params, fmt, writer_options)
