#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Main entry point for the region extraction pipeline.

This script extracts regions of large images into JPEG, JPEG 2000, PNG or
TIFF files, either one at a time or from a CSV manifest.
"""
import os
import sys
import time
import argparse
from typing import Any, Dict, List, Optional

import pandas as pd
from tqdm import tqdm

from region_extract import __version__
from region_extract.core.config import BATCH_CONFIG, DEFAULT_OUTPUT_DIR, load_config
from region_extract.core.exceptions import ExtractionError
from region_extract.core.logging_config import setup_logging, get_module_logger
from region_extract.core.params import DecodeParameters, Region, parse_size
from region_extract.formats.registry import FormatRegistry, get_format_suffix
from region_extract.formats.writers import available_drivers
from region_extract.processing.extract import ExtractionProcessor
from region_extract.processing.transforms import chain, grayscale, rotate
from region_extract.utils.utils import parse_options

# Initialize logger
logger = get_module_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Parameters
    ----------
    argv : list of str, optional
        Arguments to parse, ``sys.argv[1:]`` if None.

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Extract regions of large tiled images into common image formats."
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Region Extraction Pipeline v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Extract a single region
    extract_parser = subparsers.add_parser("extract", help="Extract a region from an image")

    extract_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Path to input image, '-' reads standard input"
    )

    extract_parser.add_argument(
        "--output", "-o",
        required=True,
        help="Path to output image, '-' writes standard output"
    )

    extract_parser.add_argument(
        "--format", "-f",
        help="Output format identifier, e.g. image/jpeg (default: output file suffix)"
    )

    extract_parser.add_argument(
        "--region", "-r",
        type=Region.parse,
        help="Region to extract as x,y,width,height (default: full image)"
    )

    extract_parser.add_argument(
        "--level", "-L",
        type=int,
        default=0,
        help="Number of 2x resolution reductions (default: 0)"
    )

    scaling = extract_parser.add_mutually_exclusive_group()
    scaling.add_argument(
        "--scale", "-s",
        type=float,
        default=1.0,
        help="Scaling factor, effective between 0 and 3 (default: 1.0)"
    )
    scaling.add_argument(
        "--size",
        type=parse_size,
        help="Explicit output size as width,height"
    )

    extract_parser.add_argument(
        "--rotate",
        type=int,
        default=0,
        help="Clockwise rotation in degrees, a multiple of 90 (default: 0)"
    )

    extract_parser.add_argument(
        "--grayscale",
        action="store_true",
        help="Convert the region to a single luma band"
    )

    extract_parser.add_argument(
        "--option", "-O",
        action="append",
        metavar="KEY=VALUE",
        help="Writer option, e.g. quality=80 (repeatable)"
    )

    # Batch extraction from a manifest
    batch_parser = subparsers.add_parser("batch", help="Extract every region listed in a CSV manifest")

    batch_parser.add_argument(
        "--manifest", "-m",
        required=True,
        help="CSV file with input, output, format and optional region, level, scale, size columns"
    )

    batch_parser.add_argument(
        "--output-dir", "-d",
        default=str(DEFAULT_OUTPUT_DIR),
        help=f"Directory for relative output paths (default: {DEFAULT_OUTPUT_DIR})"
    )

    batch_parser.add_argument(
        "--stop-on-error",
        action="store_true",
        default=BATCH_CONFIG.get("stop_on_error", False),
        help="Stop at the first failed row"
    )

    # List formats
    subparsers.add_parser("formats", help="List registered output formats")

    for sub in (extract_parser, batch_parser, subparsers.choices["formats"]):
        sub.add_argument(
            "--config", "-c",
            help="Path to YAML configuration file"
        )
        sub.add_argument(
            "--log-level", "-l",
            choices=LOG_LEVELS,
            default=None,
            help="Logging level (default: from configuration, INFO)"
        )

    return parser.parse_args(argv)


def format_from_path(path: str) -> Optional[str]:
    """Format identifier implied by a file suffix, None if there is none."""
    suffix = os.path.splitext(path)[1].lstrip(".").lower()
    return suffix or None


def writer_options_for(config: Dict[str, Any], fmt: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Writer options for a format: configured defaults, then overrides.
    """
    tag = config["formats"].get(get_format_suffix(fmt).lower())
    options = dict(config["writers"].get(tag, {})) if tag else {}
    options.update(overrides or {})
    return options


def build_params(region: Optional[Region] = None,
                 level: int = 0,
                 scale: float = 1.0,
                 size: Optional[tuple] = None,
                 degrees: int = 0,
                 to_grayscale: bool = False) -> DecodeParameters:
    """
    Assemble decode parameters, including the pixel transform.
    """
    transforms = []
    if degrees:
        transforms.append(rotate(degrees))
    if to_grayscale:
        transforms.append(grayscale)

    return DecodeParameters(
        region=region,
        level=level,
        scaling_factor=scale,
        scaling_dimensions=size,
        transform=chain(*transforms) if transforms else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the extraction pipeline.
    """
    args = parse_arguments(argv)

    if not args.command:
        logger.error("No command given, use one of: extract, batch, formats")
        return 2

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Unable to load configuration {args.config}: {str(e)}")
        return 2

    setup_logging(log_level=args.log_level or config["logging"].get("level", "INFO"))

    if args.command == "extract":
        return extract_region(args, config)
    elif args.command == "batch":
        return extract_batch(args, config)
    elif args.command == "formats":
        return list_formats(config)

    logger.error(f"Unknown command: {args.command}")
    return 1


def extract_region(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """
    Extract a single region.

    Parameters
    ----------
    args : argparse.Namespace
        Command line arguments.
    config : dict
        Loaded configuration.

    Returns
    -------
    int
        Exit code.
    """
    fmt = args.format or format_from_path(args.output)
    if fmt is None:
        logger.error("No output format given and none implied by the output path")
        return 2

    try:
        options = writer_options_for(config, fmt, parse_options(args.option))
        params = build_params(args.region, args.level, args.scale, args.size, args.rotate, args.grayscale)
        registry = FormatRegistry.from_table(config["formats"])
    except ValueError as e:
        logger.error(str(e))
        return 2

    destination = sys.stdout.buffer if args.output == "-" else args.output
    logger.info(f"Extracting {args.input} to {args.output} as {fmt}")

    start_time = time.time()
    try:
        written = ExtractionProcessor(registry=registry).extract(
            args.input, destination, params, fmt, options
        )
    except ExtractionError as e:
        logger.error(f"Extraction failed: {str(e)}")
        return 1

    if not written:
        logger.warning(f"No image data in the requested region of {args.input}, nothing written")
    else:
        logger.info(f"Extraction completed in {time.time() - start_time:.2f} seconds")
    return 0


def _cell(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column, "")
    value = "" if value is None else str(value).strip()
    return value or None


def extract_batch(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """
    Extract every region listed in a CSV manifest.

    Parameters
    ----------
    args : argparse.Namespace
        Command line arguments.
    config : dict
        Loaded configuration.

    Returns
    -------
    int
        Exit code, 1 if any row failed.
    """
    try:
        manifest = pd.read_csv(args.manifest, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Unable to read manifest {args.manifest}: {str(e)}")
        return 2

    missing = [c for c in BATCH_CONFIG["required_columns"] if c not in manifest.columns]
    if missing:
        logger.error(f"Manifest {args.manifest} is missing columns: {', '.join(missing)}")
        return 2

    try:
        processor = ExtractionProcessor(registry=FormatRegistry.from_table(config["formats"]))
    except ValueError as e:
        logger.error(str(e))
        return 2

    logger.info(f"Extracting {len(manifest)} regions from {args.manifest}")

    written = empty = failed = 0
    for index, row in tqdm(manifest.iterrows(), total=len(manifest), desc="Extracting", unit="region"):
        output = _cell(row, "output")
        if output and not os.path.isabs(output):
            output = os.path.join(args.output_dir, output)

        try:
            region = _cell(row, "region")
            size = _cell(row, "size")
            params = build_params(
                region=Region.parse(region) if region else None,
                level=int(_cell(row, "level") or 0),
                scale=float(_cell(row, "scale") or 1.0),
                size=parse_size(size) if size else None,
            )
            if not output:
                raise ValueError("empty output path")

            os.makedirs(os.path.dirname(output) or ".", exist_ok=True)
            fmt = _cell(row, "format") or format_from_path(output)
            if fmt is None:
                raise ValueError(f"no format for {output}")

            if processor.extract(row["input"], output, params, fmt, writer_options_for(config, fmt)):
                written += 1
            else:
                empty += 1
        except (ExtractionError, OSError, ValueError) as e:
            failed += 1
            logger.error(f"Row {index + 1} ({row['input']}): {str(e)}")
            if args.stop_on_error:
                break

    logger.info(f"Batch finished: {written} written, {empty} empty, {failed} failed")
    return 1 if failed else 0


def list_formats(config: Dict[str, Any]) -> int:
    """
    Print registered format identifiers and the driver behind each.
    """
    try:
        registry = FormatRegistry.from_table(config["formats"])
    except ValueError as e:
        logger.error(str(e))
        return 2

    drivers = available_drivers()
    for identifier in registry.formats:
        writer = registry.get_writer(identifier)
        driver = getattr(writer, "driver", None) or "-"
        status = "available" if driver in drivers else "missing"
        print(f"image/{identifier}\t{driver}\t{status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
