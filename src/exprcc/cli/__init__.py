"""
exprcc Command-Line Interface
=============================

- **exprcc**: compile one arithmetic expression to x86-64 assembly

The tool is a Click-based CLI application; exit codes are shared through
``exprcc.cli.errors.ExitCode``.
"""

__all__ = ["exprcc"]
