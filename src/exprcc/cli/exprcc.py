"""
exprcc - Expression Compiler Command-Line Interface
===================================================

This module implements the ``exprcc`` command. It compiles the expression
given as its only argument and writes the assembly to standard output.

Usage Examples
--------------
Basic compilation:
    $ exprcc "2+3*4" > expr.s

Negative leading operand (no "--" needed):
    $ exprcc -7/2

Annotated output with a macOS-style entry label:
    $ exprcc --comments --entry _main "(1+2)*3"

Inspect the front end:
    $ exprcc --tokens "1 + 2"
    $ exprcc --ast "8-3-2"
"""

import logging
import sys

import click

from exprcc import __version__
from exprcc.ast import ASTPrinter
from exprcc.cli.errors import ExitCode, handle_cli_exception
from exprcc.compiler import Compiler, CompilerOptions, is_valid_label

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Utilities
# =============================================================================

# Characters that may follow a leading '-' in an expression argument
EXPRESSION_START = frozenset("0123456789(+")


class ExpressionCommand(click.Command):
    """
    Click command that reports usage errors with exit code 1.

    Click's own default for usage errors is 2, which exprcc reserves for
    errors in the expression itself.

    Unknown options are let through by click so that ``-7/2`` can be the
    expression. Only a single '-' followed by the start of an operand
    passes; every other unknown option before ``--`` is rejected here.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            self._reject_unknown_options(ctx, args)
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.USAGE_ERROR
            raise

    def _reject_unknown_options(self, ctx: click.Context, args: list[str]) -> None:
        known = set()
        for param in self.get_params(ctx):
            if isinstance(param, click.Option):
                known.update(param.opts)
                known.update(param.secondary_opts)

        for arg in args:
            if arg == "--":
                break
            name = arg.split("=", 1)[0]
            if not arg.startswith("-") or len(arg) == 1 or name in known:
                continue
            if arg.startswith("--") or arg[1] not in EXPRESSION_START:
                raise click.NoSuchOption(name, ctx=ctx)


def setup_logging(verbose: bool) -> None:
    """Send debug logging to stderr when running verbosely."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s: %(name)s: %(message)s",
            stream=sys.stderr,
        )


def validate_label(
    ctx: click.Context, param: click.Parameter, value: str
) -> str:
    if not is_valid_label(value):
        raise click.BadParameter(f"'{value}' is not a valid assembler label")
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(
    cls=ExpressionCommand,
    # Lets "-7/2" through as the expression instead of an unknown option
    context_settings={"ignore_unknown_options": True},
)
@click.argument("expression")
@click.option(
    "--entry",
    default="main",
    show_default=True,
    callback=validate_label,
    help="Global label of the generated function",
)
@click.option(
    "--comments",
    is_flag=True,
    help="Annotate each operation with the sub-expression it computes",
)
@click.option(
    "--tokens",
    "show_tokens",
    is_flag=True,
    help="Print the token list and exit (for debugging)",
)
@click.option(
    "--ast",
    "show_ast",
    is_flag=True,
    help="Print the expression tree and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose logging on stderr",
)
@click.version_option(version=__version__, prog_name="exprcc")
def main(
    expression: str,
    entry: str,
    comments: bool,
    show_tokens: bool,
    show_ast: bool,
    verbose: bool,
) -> None:
    """
    Compile an arithmetic expression to x86-64 assembly.

    EXPRESSION may use decimal integers, + - * /, unary + and -, and
    parentheses. The output defines a function that returns the value of
    the expression in RAX.

    \b
    Examples:
        exprcc "2+3*4" > expr.s      # Function 'main' returning 14
        exprcc -- "-(3+4)"           # "--" is optional for expressions
        exprcc --entry _main 7/2     # Label for macOS linkers

    \b
    Exit status:
        0  assembly written to stdout
        1  usage error
        2  error in the expression (reported with a caret)
        3  internal error
    """
    setup_logging(verbose)
    logger.debug("Compiling %r with entry label %s", expression, entry)

    options = CompilerOptions(entry_label=entry, output_comments=comments)
    compiler = Compiler(options)

    try:
        if show_tokens:
            for token in compiler.tokenize(expression):
                click.echo(repr(token))
            return

        if show_ast:
            click.echo(ASTPrinter().print(compiler.parse(expression)))
            return

        result = compiler.compile_source(expression)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)

    # Only reached after the whole pipeline succeeded
    click.echo(result.assembly, nl=False)


if __name__ == "__main__":
    main()
