"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from wifiqr_builder.constants import (
    DEFAULT_ERROR_CORRECTION,
    DEFAULT_QR_BORDER,
    DEFAULT_QR_SIZE,
    DEFAULT_SVG_SCALE,
)
from wifiqr_builder.errors import WifiQrError
from wifiqr_builder.services.qr_service import encode_credentials, generate_qr_image, save_qr_image
from wifiqr_builder.services.svg_service import render_svg, save_svg
from wifiqr_builder.services.text_service import render_text
from wifiqr_builder.services.wifi_payload import Credentials


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wifiqr-builder",
        description="Generate a QR code that joins a Wi-Fi network",
    )
    parser.add_argument("--ssid", required=True, help="Network name")
    parser.add_argument("--password", default=None, help="Network password")
    parser.add_argument(
        "--security",
        default="WPA",
        help="Security type: WPA (also WPA2/WPA3), WEP or nopass",
    )
    parser.add_argument("--hidden", action="store_true", help="Mark the network as hidden")
    parser.add_argument(
        "--ec",
        choices=["L", "M", "Q", "H"],
        default=DEFAULT_ERROR_CORRECTION,
        type=str.upper,
        help="Error correction level",
    )
    parser.add_argument(
        "--boost-error",
        action="store_true",
        help="Raise the error correction level when the symbol size allows it",
    )
    parser.add_argument("--border", type=int, default=DEFAULT_QR_BORDER, help="Quiet-zone width in modules")
    parser.add_argument("--size", type=int, default=DEFAULT_QR_SIZE, help="PNG width in pixels, 0 keeps the native size")
    parser.add_argument("--scale", type=int, default=DEFAULT_SVG_SCALE, help="SVG pixels per module")
    parser.add_argument("-o", "--output", type=Path, help="Write a .svg file or a Pillow image (.png, ...)")
    parser.add_argument("--print-payload", action="store_true", help="Print the encoded Wi-Fi string")
    parser.add_argument("--terminal", action="store_true", help="Draw the QR code in the terminal")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.border < 0:
        parser.error("--border must be zero or positive")

    try:
        credentials = Credentials(
            ssid=args.ssid,
            password=args.password,
            security=args.security,
            hidden=args.hidden,
        )
        code = encode_credentials(
            credentials,
            ec_level=args.ec,
            border=args.border,
            boost_error=args.boost_error,
        )
    except WifiQrError as exc:
        parser.error(str(exc))

    matrix = code.matrix
    if args.print_payload:
        print(code.payload)
    if args.terminal:
        print(render_text(matrix))

    if args.output is not None:
        try:
            if args.output.suffix.lower() == ".svg":
                save_svg(render_svg(matrix, scale=args.scale), args.output)
            else:
                save_qr_image(generate_qr_image(matrix, size=args.size or None), str(args.output))
        except (OSError, ValueError) as exc:
            print(f"wifiqr-builder: cannot write {args.output}: {exc}", file=sys.stderr)
            return 1
        print(
            f"Saved version {matrix.version}-{matrix.ec_level.name} QR code to {args.output}",
            file=sys.stderr,
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
