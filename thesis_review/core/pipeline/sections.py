"""
Text statistics and section detection.

Section detection is a best-effort keyword match over heading keywords in
Turkish and English; each section type records its first match and the
list is sorted by position in the text.

Dependencies: re (stdlib), thesis_review.models
System role: Deterministic text processing for the extract stage
"""

import re

from thesis_review.models.results import Section

SECTION_PATTERNS: tuple[tuple[str, tuple[re.Pattern, ...]], ...] = (
    ("abstract", (re.compile(r"özet", re.I), re.compile(r"abstract", re.I))),
    (
        "introduction",
        (
            re.compile(r"giriş", re.I),
            re.compile(r"introduction", re.I),
            re.compile(r"1\.\s*(giriş|introduction)", re.I),
        ),
    ),
    (
        "literature_review",
        (
            re.compile(r"literatür\s*(taraması|inceleme)", re.I),
            re.compile(r"literature\s*review", re.I),
            re.compile(r"2\.\s*(literatür|kavramsal)", re.I),
        ),
    ),
    (
        "methodology",
        (
            re.compile(r"yöntem", re.I),
            re.compile(r"metodoloji", re.I),
            re.compile(r"method(ology)?", re.I),
            re.compile(r"3\.\s*(yöntem|araştırma)", re.I),
        ),
    ),
    (
        "results",
        (
            re.compile(r"bulgular", re.I),
            re.compile(r"results", re.I),
            re.compile(r"findings", re.I),
            re.compile(r"4\.\s*(bulgular|results)", re.I),
        ),
    ),
    (
        "discussion",
        (
            re.compile(r"tartışma", re.I),
            re.compile(r"discussion", re.I),
            re.compile(r"5\.\s*(tartışma|discussion)", re.I),
        ),
    ),
    (
        "conclusion",
        (
            re.compile(r"sonuç", re.I),
            re.compile(r"conclusion", re.I),
            re.compile(r"6\.\s*(sonuç|conclusion)", re.I),
        ),
    ),
    (
        "references",
        (
            re.compile(r"kaynakça", re.I),
            re.compile(r"kaynaklar", re.I),
            re.compile(r"references", re.I),
            re.compile(r"bibliography", re.I),
        ),
    ),
)


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def detect_sections(text: str) -> list[Section]:
    """
    Detect section headings.

    For each section type the patterns are tried in order and the first one
    that matches anywhere wins.

    Args:
        text: Full document text

    Returns:
        list[Section]: At most one entry per type, sorted by start index
    """
    sections: list[Section] = []
    for section_type, patterns in SECTION_PATTERNS:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                sections.append(
                    Section(type=section_type, start_index=match.start(), title=match.group(0))
                )
                break

    sections.sort(key=lambda section: section.start_index)
    return sections
