#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions raised by the region extraction pipeline.
"""


class ExtractionError(Exception):
    """Unrecoverable failure while extracting or encoding a region."""


class ConfigurationError(ExtractionError):
    """No usable writer or reader is registered for a format identifier."""


class DecodeError(ExtractionError):
    """The source could not be parsed as a compressed image."""


class FormatIOError(ExtractionError):
    """An encoder failed while serializing pixels."""
