import os
import sys
import typing
import logging
import argparse

from . import codec, formats, simple, text
from .errors import CodecError
from .formats import Format
from .tree import Header, Version


logger = logging.getLogger(__name__)

DAT_EXTENSION = ".dat"

MODES = {"decode": "decode", "d": "decode", "encode": "encode", "e": "encode"}
FORMATS = {"json": Format.JSON, "j": Format.JSON, "toml": Format.TOML, "t": Format.TOML}


def parse_version(value: str) -> Version:
    parts = value.split(".")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        numbers = []
    if len(numbers) != 4 or not all(0 <= number <= 0xffff for number in numbers):
        raise argparse.ArgumentTypeError(f"expected four numbers like 1.1.110.0, not {value!r}")
    return Version(*numbers)


def parse_flag(value: str) -> int:
    try:
        flag = int(value, 0)
    except ValueError:
        flag = -1
    if not 0 <= flag <= 0xff:
        raise argparse.ArgumentTypeError(f"expected a byte value, not {value!r}")
    return flag


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="factorio-settings", description="""
    Converts Factorio settings in `mod-settings.dat` to JSON or TOML and back.
    """)
    parser.add_argument("input",
        help="Input file (.dat, .json or .toml). Use '-' for stdin.")
    parser.add_argument("output", nargs='?',
        help="Output file. Based on the input filename if omitted, or stdout when reading stdin.")
    parser.add_argument("-m", "--mode", choices=MODES,
        help="Whether to decode or encode. Inferred from the output, then the input filename if omitted.")
    parser.add_argument("-f", "--format", choices=FORMATS,
        help="Text format. Inferred from the text-side filename if omitted, JSON otherwise.")
    parser.add_argument("--simple", action="store_true",
        help="Use the simplified settings view (lossy: drops the header flag and any-type bytes).")
    parser.add_argument("--set-version", type=parse_version, metavar="A.B.C.D",
        help="Rewrite the header version when encoding.")
    parser.add_argument("--set-flag", type=parse_flag, metavar="N",
        help="Rewrite the header flag byte when encoding.")
    parser.add_argument("-v", "--verbose", action="store_true",
        help="Log debug output.")
    return parser


def infer_mode(input: str, output: typing.Optional[str]) -> typing.Optional[str]:
    if output is not None and output != "-":
        if output.lower().endswith(DAT_EXTENSION):
            return "encode"
        if Format.from_path(output) is not None:
            return "decode"

    if input.lower().endswith(DAT_EXTENSION):
        return "decode"
    if Format.from_path(input) is not None:
        return "encode"

    return None


def infer_format(mode: str, input: str, output: typing.Optional[str]) -> Format:
    text_path = output if mode == "decode" else input
    return (text_path and Format.from_path(text_path)) or Format.JSON


def default_output(mode: str, input: str, format: Format) -> typing.Optional[str]:
    if input == "-":
        return None

    stem, _ = os.path.splitext(input)
    return stem + (format.extension if mode == "decode" else DAT_EXTENSION)


def read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as file:
        return file.read()


def write_output(path: typing.Optional[str], data: bytes):
    if path is None or path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as file:
        file.write(data)


def rewrite_header(header: Header, args: argparse.Namespace) -> typing.Optional[Header]:
    if args.set_version is None and args.set_flag is None:
        return None
    return Header(args.set_version or header.version,
                  header.flag if args.set_flag is None else args.set_flag)


def convert(args: argparse.Namespace, mode: str, format: Format, output: typing.Optional[str]):
    source = args.input if args.input != "-" else "<stdin>"
    target = output if output not in (None, "-") else "<stdout>"

    if mode == "decode":
        logger.info(f"Reading DAT file '{source}'...")
        mod_settings = codec.decode(read_input(args.input))
        value = simple.to_simple(mod_settings) if args.simple else text.to_text(mod_settings)

        logger.info(f"Writing {format.name} file '{target}'...")
        write_output(output, formats.dumps(value, format).encode("utf-8"))

    else:
        logger.info(f"Reading {format.name} file '{source}'...")
        value = formats.loads(read_input(args.input).decode("utf-8"), format)
        mod_settings = simple.from_simple(value) if args.simple else text.from_text(value)

        header = rewrite_header(mod_settings.header, args)
        if header is not None:
            logger.info(f"Rewriting header to version {header.version}, flag {header.flag:#x}")

        logger.info(f"Writing DAT file '{target}'...")
        write_output(output, codec.encode(mod_settings, header))


def main(argv: typing.Optional[typing.List[str]] = None) -> int:
    args = make_parser().parse_args(argv)

    logging.basicConfig(stream=sys.stderr, format="%(message)s",
                        level=logging.DEBUG if args.verbose else logging.INFO)

    mode = MODES[args.mode] if args.mode else infer_mode(args.input, args.output)
    if mode is None:
        logger.error(f"Cannot tell whether to decode or encode '{args.input}'; use --mode.")
        return 1

    format = FORMATS[args.format] if args.format else infer_format(mode, args.input, args.output)
    output = args.output
    if output is None:
        output = default_output(mode, args.input, format)
    if output not in (None, "-") and output == args.input:
        logger.error(f"Output file '{output}' would overwrite the input; name an output file.")
        return 1

    try:
        convert(args, mode, format, output)
    except CodecError as error:
        logger.error(f"{type(error).__name__}: {error}")
        return 1
    except (OSError, ValueError) as error:
        logger.error(f"{error}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
