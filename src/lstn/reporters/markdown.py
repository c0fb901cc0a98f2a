"""Full Markdown report of a response, used for pull request comments.

Verdicts are nested by severity, then detector code group, then package,
then code. Within a code, verdicts coming from transitive dependencies are
listed apart from the ones about the package itself.
"""

from dataclasses import dataclass, field

from ..models.verdicts import (
    SEVERITIES,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    UNKNOWN_CODE,
    Response,
    Verdict,
)

TITLE = "## listen.dev dependency analysis"

CODE_GROUPS = {
    "UNK": ("Unknown", "👽"),
    "FNI": ("Dynamic instrumentation", "📡"),
    "TSN": ("Typosquatting", "🔀"),
    "MDN": ("Metadata", "📑"),
    "STN": ("Static analysis", "🔎"),
    "DDN": ("Advisories", "🛡️"),
}

SEVERITY_LABELS = {
    SEVERITY_HIGH: ("Critical severity", "🚨"),
    SEVERITY_MEDIUM: ("Medium severity", "⚠️"),
    SEVERITY_LOW: ("Low severity", "🔷"),
}


@dataclass
class CodeVerdicts:
    direct: list[Verdict] = field(default_factory=list)
    transitive: list[Verdict] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.direct) + len(self.transitive)


# severity -> code group -> package label -> code -> verdicts
Nested = dict[str, dict[str, dict[str, dict[str, CodeVerdicts]]]]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def nest(response: Response) -> Nested:
    """Group the known verdicts by severity, code group, package and code."""
    nested: Nested = {s: {} for s in SEVERITIES}
    for package in sorted(response, key=lambda p: (p.name, p.version or "")):
        for verdict in package.known_verdicts():
            groups = nested.setdefault(verdict.severity, {})
            packages = groups.setdefault(verdict.code_group, {})
            codes = packages.setdefault(package.label, {})
            bucket = codes.setdefault(verdict.code, CodeVerdicts())
            if verdict.is_transitive(package.name, package.version):
                bucket.transitive.append(verdict)
            else:
                bucket.direct.append(verdict)
    return nested


def _count(groups: dict[str, dict[str, dict[str, CodeVerdicts]]]) -> int:
    return sum(len(b) for packages in groups.values() for codes in packages.values() for b in codes.values())


def _verdict_item(verdict: Verdict, transitive: bool) -> str:
    line = f"- {verdict.message}"
    if transitive:
        name, version = verdict.origin()
        line += f" (from transitive dependency `{name}@{version}`)"
    return line


def _render_code_group(group: str, packages: dict[str, dict[str, CodeVerdicts]]) -> list[str]:
    label, icon = CODE_GROUPS.get(group, CODE_GROUPS[UNKNOWN_CODE])
    total = sum(len(b) for codes in packages.values() for b in codes.values())
    lines = [f"<details><summary>{icon} {label} ({total})</summary>", ""]
    for package in sorted(packages):
        lines.append(f"#### `{package}`")
        lines.append("")
        for code in sorted(packages[package]):
            bucket = packages[package][code]
            lines.append(f"**{code}**")
            lines.append("")
            lines.extend(_verdict_item(v, False) for v in bucket.direct)
            lines.extend(_verdict_item(v, True) for v in bucket.transitive)
            lines.append("")
    lines.append("</details>")
    lines.append("")
    return lines


def _render_problems(response: Response) -> list[str]:
    packages = [p for p in sorted(response, key=lambda p: (p.name, p.version or "")) if p.problems]
    if not packages:
        return []
    total = sum(len(p.problems) for p in packages)
    lines = [f"### ❗ {_plural(total, 'problem')}", ""]
    for package in packages:
        for problem in package.problems:
            lines.append(f"- `{package.label}`: {problem.title} ({problem.type})")
    lines.append("")
    return lines


def full_report(response: Response) -> str:
    """Render the full Markdown report of a response."""
    nested = nest(response)
    verdicts = sum(len(p.known_verdicts()) for p in response)
    problems = sum(len(p.problems) for p in response)

    lines = [TITLE, ""]
    if not verdicts and not problems:
        lines.append(f"✅ No signs of suspicious behavior in {_plural(len(response), 'package')}.")
        return "\n".join(lines) + "\n"

    lines.append(f"Found {_plural(verdicts, 'verdict')} and {_plural(problems, 'problem')}.")
    lines.append("")
    for severity in SEVERITIES:
        groups = nested.get(severity) or {}
        count = _count(groups)
        if not count:
            continue
        label, icon = SEVERITY_LABELS[severity]
        lines.append(f"### {icon} {label} ({count})")
        lines.append("")
        for group in sorted(groups):
            lines.extend(_render_code_group(group, groups[group]))
    lines.extend(_render_problems(response))
    return "\n".join(lines).rstrip("\n") + "\n"
