"""Rich table builders used by the CLI.

Kept separate to reduce duplication and keep the command module smaller.
"""

from __future__ import annotations

from rich.table import Table


def build_summary_table(result) -> Table:
    """Build the counts table for `parse`."""
    table = Table(show_header=True, title="Processed Sources")
    table.add_column("Element", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Files", str(result.files_count))
    table.add_row("Classes", str(result.classes_count))
    table.add_row("Functions", str(result.functions_count))
    table.add_row("Constants", str(result.constants_count))
    table.add_row("Conflicts", str(result.conflicts_count))
    return table


def build_failures_table(failures: dict[str, str]) -> Table:
    """Build the per-file failures table."""
    table = Table(show_header=True, title="Failed Files")
    table.add_column("File", style="red")
    table.add_column("Error")
    for file_name, message in failures.items():
        table.add_row(file_name, message)
    return table


def build_class_table(summary) -> Table:
    """Build the overview table for `show`."""
    table = Table(show_header=False, title=f"{summary.kind.value} {summary.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("File", f"{summary.file}:{summary.start_line}-{summary.end_line}")
    table.add_row("Parent", summary.parent or "-")
    table.add_row("Interfaces", ", ".join(summary.interfaces) or "-")
    table.add_row("Traits", ", ".join(summary.traits) or "-")
    flags = [flag for flag, on in (("abstract", summary.is_abstract), ("final", summary.is_final)) if on]
    table.add_row("Modifiers", " ".join(flags) or "-")
    if summary.short_description:
        table.add_row("Description", summary.short_description)
    return table


def build_members_table(summary) -> Table:
    """Build the members table for `show`."""
    table = Table(show_header=True, title="Members")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Visibility")
    table.add_column("Declared In")
    for constant in summary.constants:
        table.add_row("constant", constant.short_name, "public", constant.declaring_class or "-")
    for prop in summary.properties:
        name = f"{'static ' if prop.is_static else ''}${prop.name}"
        table.add_row("property", name, prop.visibility.value, prop.declaring_trait or prop.declaring_class or "-")
    for method in summary.methods:
        parameters = ", ".join(f"${parameter.name}" for parameter in method.parameters)
        name = f"{'static ' if method.is_static else ''}{method.name}({parameters})"
        table.add_row(
            "method", name, method.visibility.value, method.declaring_trait or method.declaring_class or "-"
        )
    return table


def build_validation_table(errors) -> Table:
    """Build the error table for `validate`."""
    table = Table(show_header=True, title="Validation Errors")
    table.add_column("Type", style="red")
    table.add_column("Element")
    table.add_column("Message")
    for error in errors:
        table.add_row(error.error_type.value, error.element_name, error.message)
    return table
