"""Parser for the llms.txt documentation manifest.

Line-oriented: ``# `` sets the title, non-empty lines before the first
``## `` form the summary, each ``## `` opens a section, and
``- [title](url): description`` lines inside a section become links.
Anything else is skipped without error.
"""

from __future__ import annotations

import re

from llmsdocs.models.docs import DocIndexLink, DocIndexSection, DocIndexStructure

_LINK_RE = re.compile(r"- \[([^\]]+)\]\(([^)]+)\)(?:\s*:\s*(.+))?")


def parse_index(content: str) -> DocIndexStructure:
    structure = DocIndexStructure()
    summary_parts: list[str] = []
    current: DocIndexSection | None = None
    in_summary = False

    for line in content.split("\n"):
        stripped = line.strip()

        if stripped.startswith("# "):
            structure.title = stripped[2:]
            in_summary = True
        elif stripped.startswith("## "):
            in_summary = False
            current = DocIndexSection(header=stripped[3:])
            structure.sections.append(current)
        elif stripped.startswith("- [") and current is not None:
            match = _LINK_RE.match(stripped)
            if match:
                current.links.append(
                    DocIndexLink(
                        title=match.group(1),
                        url=match.group(2),
                        description=match.group(3) or "",
                    )
                )
        elif in_summary and stripped:
            summary_parts.append(stripped)

    structure.summary = " ".join(summary_parts)
    return structure
