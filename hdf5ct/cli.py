"""Command-line front end: hdf5ct -i <file.h5> [options]"""

from __future__ import annotations

from typing import Sequence
import argparse
import logging
import sys

from hdf5ct.core.config import (
    DEFAULT_BASE_TIME,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_OUTPUT_ROOT,
    ConversionConfig,
    SinkOptions,
)
from hdf5ct.core.exceptions import ConfigError, ResourceError


logger = logging.getLogger("hdf5ct")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hdf5ct",
        description="Read {time, value} compound datasets from an HDF5 file and "
        "write them out in time-then-channel order.",
    )
    p.add_argument("-i", "--infile", metavar="HDF5FILE", help="Full path of the input HDF5 file.")
    p.add_argument("-o", "--outdir", default=DEFAULT_OUTPUT_ROOT, help="Output root folder (default: %(default)s).")
    p.add_argument(
        "-f", "--flush", default=DEFAULT_FLUSH_INTERVAL, metavar="SEC",
        help="Flush interval (sec); amount of data per block (default: %(default)s).",
    )
    p.add_argument(
        "-b", "--basetime", default=DEFAULT_BASE_TIME, metavar="SEC",
        help="Base time (seconds since epoch) added to all timestamps (default: %(default)s).",
    )
    p.add_argument("-e", "--password", default=None, help="Encrypt the output using the given password.")
    p.add_argument("-nz", "--nozip", action="store_true", help="Turn off ZIP output.")
    p.add_argument("-g", "--gzip", action="store_true", help="GZIP output data; data is also ZIP'ed.")
    p.add_argument("-p", "--pack", action="store_true", help="Pack data.")
    p.add_argument("-hrt", "--hirestime", action="store_true", help="Use microsecond time markers.")
    p.add_argument("-af", "--attrtofile", action="store_true", help="Write attributes to plain files.")
    p.add_argument("-v", "--verbose", action="store_true", help="Show per-dataset details.")
    p.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors.")
    return p


def config_from_args(args: argparse.Namespace) -> ConversionConfig:
    sink = SinkOptions(
        flush_interval=args.flush,
        compress=not args.nozip,
        gzip=args.gzip,
        pack=args.pack,
        hi_res_time=args.hirestime,
        password=args.password,
    )
    return ConversionConfig(
        input_path=args.infile,
        output_root=args.outdir,
        base_time=args.basetime,
        attributes_to_file=args.attrtofile,
        sink=sink,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"hdf5ct: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        from hdf5ct.io.convert import convert_file
    except ImportError as e:
        print(f"hdf5ct: HDF5 support is unavailable ({e})", file=sys.stderr)
        return EXIT_FAILURE

    try:
        report = convert_file(config)
    except ConfigError as e:
        print(f"hdf5ct: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except ResourceError as e:
        print(f"hdf5ct: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK if report.ok else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
