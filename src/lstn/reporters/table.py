"""Terminal rendering of a response: a summary table then per-package details."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models.verdicts import SEVERITY_HIGH, SEVERITY_LOW, SEVERITY_MEDIUM, Package, Response, Verdict
from ..output import FAILURE_ICON, SUCCESS_ICON, WARNING_ICON

SEVERITY_STYLES = {
    SEVERITY_HIGH: "red",
    SEVERITY_MEDIUM: "yellow",
    SEVERITY_LOW: "cyan",
}

HIDDEN_METADATA = frozenset({"npm_package_name", "npm_package_version", "file_content", "lines"})


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _sorted(response: Response) -> list[Package]:
    return sorted(response, key=lambda p: (p.name, p.version or ""))


def summary_table(response: Response) -> Table:
    """One row per package: name, version, verdicts count, problems count."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("name", style="bold")
    table.add_column("version")
    table.add_column("verdicts")
    table.add_column("problems")
    for package in _sorted(response):
        verdicts = len(package.known_verdicts())
        problems = len(package.problems)
        verdicts_cell = (
            f"[red]{FAILURE_ICON} {_plural(verdicts, 'verdict')}[/red]"
            if verdicts
            else f"[green]{SUCCESS_ICON} {_plural(verdicts, 'verdict')}[/green]"
        )
        problems_cell = (
            f"[yellow]{WARNING_ICON} {_plural(problems, 'problem')}[/yellow]"
            if problems
            else f"[green]{SUCCESS_ICON} {_plural(problems, 'problem')}[/green]"
        )
        table.add_row(escape(package.name), escape(package.version or ""), verdicts_cell, problems_cell)
    return table


def metadata_lines(verdict: Verdict) -> list[str]:
    """Sorted ``key: value`` lines of the string and integer metadata."""
    lines = []
    for key in sorted(verdict.metadata):
        value = verdict.metadata[key]
        if key in HIDDEN_METADATA or isinstance(value, bool) or not isinstance(value, (str, int)):
            continue
        if value == "":
            continue
        lines.append(f"{key}: {value}")
    return lines


def verdict_line(package: Package, verdict: Verdict) -> str:
    style = SEVERITY_STYLES.get(verdict.severity, "default")
    line = f"[{style}]\\[{escape(verdict.severity)}][/{style}] {escape(verdict.message)}"
    if verdict.is_transitive(package.name, package.version):
        name, version = verdict.origin()
        line += f" (from transitive dependency {escape(name)}@{escape(version)})"
    return line


def heading(package: Package, verdicts: int, problems: int) -> str:
    verb = "is" if verdicts == 1 else "are"
    return (
        f"There {verb} {_plural(verdicts, 'verdict')} and {_plural(problems, 'problem')} "
        f"for [bold]{escape(package.label)}[/bold]"
    )


def details(package: Package) -> list[str]:
    """Markup lines detailing the verdicts and problems of a package (none when clean)."""
    verdicts = package.known_verdicts()
    if not verdicts and not package.problems:
        return []
    lines = ["", heading(package, len(verdicts), len(package.problems)), ""]
    for verdict in verdicts:
        lines.append(f"  {verdict_line(package, verdict)}")
        lines.extend(f"    {escape(m)}" for m in metadata_lines(verdict))
    for problem in package.problems:
        lines.append(f"  - {escape(problem.title)}: {escape(problem.type)}")
    return lines


def render_table(console: Console, response: Response) -> None:
    """Print the summary table and the details of every package."""
    if not response:
        return
    console.print(summary_table(response))
    for package in _sorted(response):
        for line in details(package):
            console.print(line, highlight=False)
