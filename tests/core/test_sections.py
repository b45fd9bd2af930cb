"""
Test suite for text statistics and section detection.

System role: Verification of deterministic extract-stage text processing
"""

from thesis_review.core.pipeline.sections import count_words, detect_sections


class TestCountWords:
    """Test suite for count_words."""

    def test_counts_whitespace_separated_tokens(self) -> None:
        assert count_words("one  two\nthree\tfour") == 4

    def test_empty_text(self) -> None:
        assert count_words("   ") == 0


class TestDetectSections:
    """Test suite for detect_sections."""

    def test_detects_english_headings_in_text_order(self) -> None:
        """Test sections are sorted by position, not by pattern order."""
        # Arrange
        text = (
            "Abstract\nShort summary.\n"
            "Introduction\nContext.\n"
            "Results\nNumbers.\n"
            "Conclusion\nDone.\n"
            "References\nSmith 2020."
        )

        # Act
        sections = detect_sections(text)

        # Assert
        types = [section.type for section in sections]
        assert types == ["abstract", "introduction", "results", "conclusion", "references"]
        assert [section.start_index for section in sections] == sorted(
            section.start_index for section in sections
        )

    def test_records_first_match_per_type(self) -> None:
        """Test a repeated heading keyword only yields its first occurrence."""
        text = "Introduction\nText.\nMore introduction material.\n"
        sections = detect_sections(text)
        assert len(sections) == 1
        assert sections[0].start_index == 0

    def test_detects_turkish_headings(self) -> None:
        """Test Turkish heading keywords are recognized."""
        text = "özet\nKısa özet.\nbulgular\nSonuçlar.\nkaynakça\nYılmaz 2021."
        types = {section.type for section in detect_sections(text)}
        assert {"abstract", "results", "references"} <= types

    def test_no_headings(self) -> None:
        assert detect_sections("plain prose without any headings at all") == []
