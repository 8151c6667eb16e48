"""
tex2typst CLI

Command-line front end over the conversion functions. Input comes from an
argument or from stdin; the Typst result goes to stdout, errors and logs go
to stderr.

Usage:
    tex2typst convert '\\frac{1}{2}'
    echo '\\sum_{i=1}^n i' | tex2typst convert
    tex2typst convert '\\R' --macros macros.tex
    tex2typst convert '\\pm' --shorthand plus.minus=+-
    tex2typst mixed notes.txt --macros macros.tex
"""

from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from tex2typst.api import Tex2Typst
from tex2typst.kernel.errors import Tex2TypstError
from tex2typst.kernel.logging import configure_logging
from tex2typst.typst.writer import SymbolShorthand

app = typer.Typer(
    name="tex2typst",
    help="tex2typst - Convert LaTeX math to Typst math",
    add_completion=False,
)

MacrosOption = Annotated[
    Optional[Path],
    typer.Option("--macros", help="File with \\newcommand declarations"),
]
ShorthandOption = Annotated[
    Optional[List[str]],
    typer.Option(
        "--shorthand",
        help="Symbol shorthand as ORIGINAL=SHORT (repeatable)",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log pipeline steps to stderr"),
]


def parse_shorthand(spec: str) -> SymbolShorthand:
    """Parse ORIGINAL=SHORT into a SymbolShorthand"""
    original, sep, shorthand = spec.partition("=")
    if not sep or not original or not shorthand:
        raise typer.BadParameter(
            f"Expected ORIGINAL=SHORT, got {spec!r}", param_hint="--shorthand"
        )
    return SymbolShorthand(original=original, shorthand=shorthand)


def build_converter(
    macros: Optional[Path],
    shorthands: Optional[List[str]],
) -> Tex2Typst:
    """Create the converter for one invocation"""
    macro_text = None
    if macros is not None:
        try:
            macro_text = macros.read_text(encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: Cannot read macro file {macros}: {e}", err=True)
            raise typer.Exit(1)
    return Tex2Typst(
        macros=macro_text,
        shorthands=[parse_shorthand(spec) for spec in shorthands or []],
    )


def read_stdin() -> str:
    return typer.get_text_stream("stdin").read()


def run(verbose: bool, action) -> None:
    """Configure logging, run the conversion, report library errors"""
    configure_logging(json_output=False, log_level="DEBUG" if verbose else "WARNING")
    try:
        result = action()
    except Tex2TypstError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(result, nl=not result.endswith("\n"))


@app.command()
def convert(
    tex: Annotated[
        Optional[str],
        typer.Argument(help="LaTeX math without $ delimiters (stdin if omitted)"),
    ] = None,
    macros: MacrosOption = None,
    shorthand: ShorthandOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Convert a LaTeX math expression to Typst"""

    def action() -> str:
        converter = build_converter(macros, shorthand)
        source = tex if tex is not None else read_stdin()
        return converter.convert(source.strip())

    run(verbose, action)


@app.command()
def mixed(
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Text file with embedded LaTeX math (stdin if omitted)"),
    ] = None,
    macros: MacrosOption = None,
    shorthand: ShorthandOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Convert the math spans of a text document to Typst"""

    def action() -> str:
        converter = build_converter(macros, shorthand)
        if path is None:
            text = read_stdin()
        else:
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                typer.echo(f"Error: Cannot read {path}: {e}", err=True)
                raise typer.Exit(1)
        return converter.convert_mixed(text)

    run(verbose, action)


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
