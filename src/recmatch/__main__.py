"""CLI entry point: run `recmatch file.rec` or `python -m recmatch file.rec`."""

import logging
import sys
from pathlib import Path


def main(argv=None) -> int:
    import argparse
    from .compiler.driver import CompilerDriver
    from .runtime.runtime import RecmatchRuntime
    from .utils.config import DEFAULT_FILE_ENCODING

    parser = argparse.ArgumentParser(prog="recmatch", description="Compile and run a recmatch (.rec) file.")
    parser.add_argument("file", type=Path, help="Path to .rec source file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pass and match details")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = args.file.resolve()
    if not path.exists():
        sys.stderr.write(f"recmatch: error: file not found: {path}\n")
        return 1
    if not path.is_file():
        sys.stderr.write(f"recmatch: error: not a file: {path}\n")
        return 1

    try:
        source = path.read_text(encoding=DEFAULT_FILE_ENCODING)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"recmatch: error: could not read file: {e}\n")
        return 1

    compiler = CompilerDriver()
    result = compiler.compile(source, str(path))

    if not result.success:
        if result.tcx and result.tcx.reporter.has_errors():
            sys.stderr.write(result.tcx.reporter.format_all_errors() + "\n")
        else:
            sys.stderr.write("recmatch: compilation failed\n")
        return 1

    exec_result = RecmatchRuntime().execute(result)
    for line in exec_result.printed:
        sys.stdout.write(line + "\n")

    if exec_result.error is not None:
        sys.stderr.write(f"recmatch: runtime error: {exec_result.error}\n")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
