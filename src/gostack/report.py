from __future__ import annotations

from pathlib import Path

from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from .summary import ProfileSummary


def _pct(count: int, total: int) -> str:
    if total == 0:
        return "NA"
    return f"{count / total * 100:.1f}%"


def _md_cell(text: str) -> str:
    return "`" + text.replace("|", "\\|") + "`"


def render_text(summary: ProfileSummary) -> str:
    """Plain-text summary: one line per state, unknown states, then the top bottom frames."""
    lines: list[str] = []
    for state, count in summary.states.known.items():
        lines.append(f"{state.text:<15} {count}")

    if summary.states.unknown:
        lines.append("")
        lines.append("Unknown states")
        for text, count in summary.states.unknown.items():
            lines.append(f"{text:<15} {count}")

    lines.append("")
    lines.append(f"Top {len(summary.top_stacks)} Goroutines")
    for frame, count in summary.top_stacks:
        lines.append(f"{count:<6} ... {frame}")
    return "\n".join(lines)


def write_markdown_report(summary: ProfileSummary, path: Path) -> Path:
    """Write a Markdown report and return the path written (always ends in `.md`)."""
    # MdUtils appends ".md" to the file name itself.
    stem = path.with_suffix("") if path.suffix == ".md" else path
    out = stem.with_name(stem.name + ".md")
    out.parent.mkdir(parents=True, exist_ok=True)

    total = summary.total_goroutines
    md = MdUtils(file_name=str(stem), title="Goroutine Profile Summary")
    md.new_list(
        [
            f"Created: `{summary.created.isoformat()}`",
            f"Goroutines: `{total}`",
            f"Goroutines with a stack: `{summary.goroutines_with_stack}`",
        ]
    )

    md.new_header(level=1, title="States")
    cells = ["state", "count", "share"]
    for state, count in summary.states.known.items():
        cells.extend([state.text, str(count), _pct(count, total)])
    md.new_table(columns=3, rows=len(summary.states.known) + 1, text=cells, text_align="left")

    if summary.states.unknown:
        md.new_header(level=1, title="Unknown States")
        cells = ["state", "count", "share"]
        for text, count in summary.states.unknown.items():
            cells.extend([_md_cell(text), str(count), _pct(count, total)])
        md.new_table(columns=3, rows=len(summary.states.unknown) + 1, text=cells, text_align="left")

    md.new_header(level=1, title=f"Top {len(summary.top_stacks)} Bottom Frames")
    if summary.top_stacks:
        cells = ["count", "share", "frame"]
        for frame, count in summary.top_stacks:
            cells.extend([str(count), _pct(count, total), _md_cell(frame)])
        md.new_table(columns=3, rows=len(summary.top_stacks) + 1, text=cells, text_align="left")
    else:
        md.new_paragraph("No stack frames recorded.")

    md.create_md_file()
    return out
