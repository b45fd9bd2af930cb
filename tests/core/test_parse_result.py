"""
Test suite for model-output parsing.

System role: Verification of Ok/Degraded parse results
"""

import pytest

from thesis_review.core.pipeline.parse_result import (
    Degraded,
    Ok,
    extract_json_object,
    parse_model_output,
)
from thesis_review.models.results import AgentAssessment, StructureAssessment


class TestExtractJsonObject:
    """Test suite for extract_json_object."""

    def test_plain_json(self) -> None:
        assert extract_json_object('{"score": 80}') == {"score": 80}

    def test_fenced_json(self) -> None:
        """Test markdown code fences are stripped."""
        text = 'Here you go:\n```json\n{"score": 72, "feedback": "ok"}\n```\nThanks.'
        assert extract_json_object(text) == {"score": 72, "feedback": "ok"}

    def test_json_surrounded_by_prose(self) -> None:
        """Test the outermost braces are used when the answer has prose around it."""
        text = 'Assessment follows. {"score": 65, "issues": []} Hope this helps.'
        assert extract_json_object(text)["score"] == 65

    @pytest.mark.parametrize("text", ["no json here", "{broken: json", "[1, 2, 3]", ""])
    def test_invalid_should_raise_value_error(self, text: str) -> None:
        with pytest.raises(ValueError):
            extract_json_object(text)


class TestParseModelOutput:
    """Test suite for parse_model_output."""

    def test_valid_response_should_be_ok(self) -> None:
        result = parse_model_output('{"score": 91}', AgentAssessment, AgentAssessment)

        assert isinstance(result, Ok)
        assert not result.degraded
        assert result.value.score == 91

    def test_unparseable_response_should_degrade_to_fallback(self) -> None:
        """Test the fallback is built and the error recorded."""
        result = parse_model_output(
            "I cannot evaluate this thesis.",
            StructureAssessment,
            lambda: StructureAssessment(structure_score=70),
        )

        assert isinstance(result, Degraded)
        assert result.degraded
        assert result.value.structure_score == 70
        assert result.error.startswith("ValueError")

    def test_schema_violation_should_degrade(self) -> None:
        """Test a JSON object that fails validation is degraded, not raised."""
        result = parse_model_output('{"issues": "not a list"}', AgentAssessment, AgentAssessment)

        assert isinstance(result, Degraded)
        assert "ValidationError" in result.error

    def test_out_of_range_score_should_be_clamped(self) -> None:
        """Test scores outside 0-100 are clamped rather than rejected."""
        result = parse_model_output('{"score": 140}', AgentAssessment, AgentAssessment)
        assert result.value.score == 100

    def test_unknown_severity_should_become_minor(self) -> None:
        result = parse_model_output(
            '{"score": 60, "issues": [{"severity": "Blocker", "description": "x"}]}',
            AgentAssessment,
            AgentAssessment,
        )
        assert result.value.issues[0].severity == "minor"
