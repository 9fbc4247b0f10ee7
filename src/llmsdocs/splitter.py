"""Section splitter for the full documentation corpus.

Single-pass algorithm that cuts llms-full.txt into heading-delimited
sections. Any H1–H3 line starts a new section regardless of depth; H4+
headings stay inside the current section. Headings inside fenced code blocks
are suppressed. Sections are recomputed on every call, never cached.
"""

from __future__ import annotations

import re

MIN_SECTION_LENGTH = 50

_HEADING_RE = re.compile(r"^#{1,3}\s+\S")
_FENCE_RE = re.compile(r"^(`{3,}|~{3,})(.*)$")


def split_into_sections(content: str, min_length: int = MIN_SECTION_LENGTH) -> list[str]:
    """Split Markdown into an ordered list of trimmed sections.

    Content before the first heading becomes an unheaded leading section.
    Sections whose trimmed length is ``<= min_length`` are dropped as noise.
    """
    sections: list[str] = []
    heading: str | None = None
    body: list[str] = []

    in_code_block = False
    fence: str | None = None

    def flush() -> None:
        text = "\n".join(body).strip()
        if heading is not None:
            text = f"{heading}\n{text}".strip()
        if len(text) > min_length:
            sections.append(text)

    for line in content.splitlines():
        stripped = line.strip()

        fence_match = _FENCE_RE.match(stripped)
        if fence_match:
            marker, rest = fence_match.groups()
            if not in_code_block:
                in_code_block = True
                fence = marker
            elif (
                fence is not None
                and marker[0] == fence[0]
                and len(marker) >= len(fence)
                and not rest.strip()
            ):
                in_code_block = False
                fence = None
            body.append(line)
            continue

        if not in_code_block and _HEADING_RE.match(line):
            flush()
            heading = line.rstrip()
            body = []
            continue

        body.append(line)

    flush()
    return sections


def section_title(section: str) -> str:
    """First line of a section with its heading marker removed."""
    first_line = section.split("\n", 1)[0]
    return re.sub(r"^#+\s+", "", first_line)
