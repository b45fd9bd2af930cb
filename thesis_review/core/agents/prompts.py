"""
Prompt builders for pre-analysis, the scoring agents and cross-validation.

Every builder returns a plain string asking for a single JSON object with
snake_case keys matching the models in ``thesis_review.models.results``.

Dependencies: thesis_review.models
System role: Evaluation rubrics
"""

import json
from dataclasses import dataclass, field

from thesis_review.models.results import Section

_ISSUE_SCHEMA = """    {
      "severity": "critical" | "major" | "minor",
      "description": "what is wrong",
      "location": "chapter/page",
      "suggestion": "how to fix it"
    }"""

_LANGUAGE_NAMES = {"tr": "Turkish", "en": "English"}


@dataclass(frozen=True)
class AnalysisContext:
    """Document facts shared by every agent prompt."""

    sections: list[Section] = field(default_factory=list)
    page_count: int = 0
    word_count: int = 0
    language: str = "tr"
    field_of_study: str = "Unknown"
    academic_level: str = "unknown"
    reference_total: int = 0
    reference_recent: int = 0


def _language_name(code: str) -> str:
    return _LANGUAGE_NAMES.get(code, "Mixed")


def _response_format(sub_scores: dict[str, int], extra: str = "") -> str:
    sub = ",\n".join(f'    "{key}": 0-{maximum}' for key, maximum in sub_scores.items())
    return f"""## Response format (JSON only, no markdown):
{{
  "score": 0-100,
  "sub_scores": {{
{sub}
  }},{extra}
  "issues": [
{_ISSUE_SCHEMA}
  ],
  "strengths": ["strength 1", "strength 2"],
  "feedback": "overall assessment in 2-4 sentences"
}}"""


_STRUCTURE_FORMAT = _response_format(
    {"introduction": 20, "literature": 20, "methodology": 20, "results": 20, "conclusion": 20}
)
_METHODOLOGY_FORMAT = _response_format(
    {
        "research_design": 20,
        "sampling": 15,
        "data_collection": 20,
        "analysis_method": 20,
        "validity_reliability": 15,
        "limitations": 10,
    },
    extra="\n  \"research_type\": \"quantitative\" | \"qualitative\" | \"mixed\",",
)
_WRITING_FORMAT = _response_format(
    {
        "academic_style": 20,
        "argumentation": 20,
        "evidence_use": 20,
        "coherence": 20,
        "grammar": 10,
        "terminology": 10,
    }
)
_REFERENCES_FORMAT = _response_format(
    {
        "source_diversity": 25,
        "recency": 25,
        "format_consistency": 20,
        "in_text_citations": 20,
        "bibliography_match": 10,
    },
    extra="\n  \"detected_style\": \"APA\" | \"IEEE\" | \"Chicago\" | \"MLA\" | \"Mixed\" | \"Unknown\",",
)
_ORIGINALITY_FORMAT = _response_format(
    {"research_question": 30, "contribution": 30, "applicability": 20, "future_research": 20},
    extra="\n  \"contribution_type\": \"theoretical\" | \"practical\" | \"methodological\" | \"mixed\",",
)


def structure_assessment_prompt(text_prefix: str) -> str:
    """Pre-analysis: structural assessment of the document opening."""
    return f"""Analyze the structure of the following thesis text.

## Thesis text (beginning):
{text_prefix}

## Response format (JSON only, no markdown):
{{
  "has_abstract": true | false,
  "has_introduction": true | false,
  "has_literature_review": true | false,
  "has_methodology": true | false,
  "has_results": true | false,
  "has_discussion": true | false,
  "has_conclusion": true | false,
  "has_references": true | false,
  "structure_score": 0-100,
  "structure_issues": ["issue 1", "issue 2"],
  "estimated_citation_count": 0,
  "citation_style": "APA" | "IEEE" | "Chicago" | "MLA" | "Mixed" | "Unknown",
  "language": "tr" | "en" | "mixed",
  "academic_level": "master" | "phd" | "unknown",
  "field_of_study": "field name"
}}"""


def reference_extraction_prompt(text_suffix: str, current_year: int) -> str:
    """Pre-analysis: bibliography extraction from the document ending."""
    return f"""Extract the bibliography of the following thesis text.
A reference is recent if it was published in {current_year - 5} or later.

## Thesis text (end):
{text_suffix}

## Response format (JSON only, no markdown):
{{
  "references": [
    {{"raw": "full reference", "type": "journal" | "book" | "thesis" | "conference" | "web" | "other", "year": 2020, "is_recent": true}}
  ],
  "total_count": 0,
  "recent_count": 0,
  "oldest_year": 1990,
  "newest_year": 2024,
  "type_distribution": {{"journal": 0, "book": 0, "thesis": 0, "conference": 0, "web": 0, "other": 0}}
}}"""


def structure_prompt(context: AnalysisContext, text: str) -> str:
    titles = ", ".join(section.title for section in context.sections) or "none detected"
    return f"""Evaluate the STRUCTURE and ORGANIZATION of the thesis.

## Criteria (100 points total):
1. Introduction quality (problem statement, aim, scope) - max 20
2. Literature review coverage - max 20
3. Clarity of the methodology presentation - max 20
4. Organization of the results - max 20
5. Coherence of discussion and conclusion - max 20

## Known structure:
- Detected sections: {titles}
- Pages: ~{context.page_count}
- Words: {context.word_count}
- Language: {_language_name(context.language)}

## Thesis text:
{text}

{_STRUCTURE_FORMAT}"""


def methodology_prompt(context: AnalysisContext, text: str) -> str:
    return f"""Evaluate the METHODOLOGY of the thesis.

## Criteria (100 points total):
1. Appropriateness of the research design - max 20
2. Sampling and its justification - max 15
3. Data collection methods - max 20
4. Appropriateness of the analysis techniques - max 20
5. Validity and reliability measures - max 15
6. Awareness of limitations - max 10

## Context:
- Field: {context.field_of_study}
- Academic level: {context.academic_level}
- Language: {_language_name(context.language)}

## Thesis text:
{text}

{_METHODOLOGY_FORMAT}"""


def writing_prompt(context: AnalysisContext, text: str) -> str:
    return f"""Evaluate the WRITING QUALITY of the thesis.

## Criteria (100 points total):
1. Academic language and style - max 20
2. Strength of argumentation - max 20
3. Use of evidence - max 20
4. Coherence and logical flow - max 20
5. Grammar and spelling - max 10
6. Accuracy of technical terminology - max 10

## Context:
- Language: {_language_name(context.language)}
- Field: {context.field_of_study}
- Academic level: {context.academic_level}

Include an "example" field with the offending sentence where one exists.

## Thesis text:
{text}

{_WRITING_FORMAT}"""


def references_prompt(context: AnalysisContext, text: str) -> str:
    ratio = (
        round(context.reference_recent / context.reference_total * 100)
        if context.reference_total > 0
        else 0
    )
    return f"""Evaluate the REFERENCES and CITATIONS of the thesis.

## Criteria (100 points total):
1. Source diversity and quality - max 25
2. Use of recent literature (last 5 years) - max 25
3. Citation format consistency - max 20
4. In-text citation use - max 20
5. Bibliography and text agreement - max 10

## Known reference data:
- Total references: {context.reference_total}
- Recent references (last 5 years): {context.reference_recent}
- Recency ratio: {ratio}%

## Thesis text:
{text}

{_REFERENCES_FORMAT}"""


def originality_prompt(context: AnalysisContext, text: str) -> str:
    return f"""Evaluate the ORIGINALITY and ACADEMIC CONTRIBUTION of the thesis.

## Criteria (100 points total):
1. Originality of the research question - max 30
2. Contribution to the literature - max 30
3. Practical applicability - max 20
4. Suggestions for future research - max 20

## Context:
- Field: {context.field_of_study}
- Academic level: {context.academic_level}

## Thesis text:
{text}

{_ORIGINALITY_FORMAT}"""


CROSS_VALIDATION_SYSTEM_PROMPT = (
    "You are an experienced thesis examiner. Another AI system has evaluated a thesis; "
    "verify its findings and point out inconsistencies."
)


def cross_validation_prompt(previous_results: dict, text_prefix: str) -> str:
    """Validator prompt over condensed agent results and a text prefix."""
    return f"""## First-pass results per category:
{json.dumps(previous_results, indent=2, ensure_ascii=False)}

## Thesis text (beginning):
{text_prefix}

## Tasks:
1. Assess the score given for each category
2. Identify important issues the first pass missed
3. Flag wrong or exaggerated findings
4. Give your own independent overall score

## Response format (JSON only, no markdown):
{{
  "validation_results": {{
    "<category>": {{
      "original_score": 0-100,
      "validator_score": 0-100,
      "agreement": "agree" | "partial" | "disagree",
      "adjusted_score": 0-100,
      "reason": "explanation"
    }}
  }},
  "missed_issues": [
    {{"severity": "critical" | "major" | "minor", "category": "<category>", "description": "...", "suggestion": "..."}}
  ],
  "overestimated_issues": [
    {{"original_issue": "...", "reason": "why it is exaggerated"}}
  ],
  "calibrated_overall_score": 0-100,
  "confidence": 0-100,
  "summary": "cross-validation summary in 3-4 sentences"
}}"""
