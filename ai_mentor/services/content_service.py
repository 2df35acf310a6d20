"""Analysis Provider: prompts the model for notes, keywords and code traces."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from ai_mentor.models.analysis import CompilerAnalysis
from ai_mentor.models.notes import KeywordDetail, NoteData
from ai_mentor.tools.schema_validator import (
    validate_compiler_analysis,
    validate_keyword_detail,
    validate_keyword_list,
    validate_note_data,
)
from ai_mentor.utils.config import settings
from ai_mentor.utils.openai_client import get_openai_client

logger = logging.getLogger(__name__)


class AnalysisProviderError(Exception):
    """The model could not be reached or returned unusable JSON."""


NOTES_INSTRUCTION = (
    "You are a programming tutor. Generate comprehensive programming notes for the requested topic. "
    "Use Mermaid flowchart syntax for the flowchart (no code fences, no %%{init}%% blocks). "
    "Include an exam of 3-5 challenging multiple choice questions. "
    "Output ONLY valid JSON and match this exact schema:\n"
    "{\n"
    "  \"concept\": \"string\",\n"
    "  \"types\": [\"string\"],\n"
    "  \"syntax\": \"string\",\n"
    "  \"flowchartMermaid\": \"string\",\n"
    "  \"exampleProgram\": \"string\",\n"
    "  \"errorProneProgram\": \"string\",\n"
    "  \"howToUse\": \"string\",\n"
    "  \"restrictions\": \"string\",\n"
    "  \"useCases\": [\"string\"],\n"
    "  \"quiz\": [\n"
    "    {\"question\": \"string\", \"options\": [\"string\"], \"correctAnswer\": 0, \"explanation\": \"string\"}\n"
    "  ]\n"
    "}\n"
    "correctAnswer is the 0-based index of the correct option."
)

KEYWORDS_INSTRUCTION = (
    "You list programming language vocabulary. "
    "Output ONLY valid JSON of the form {\"keywords\": [\"string\"]} containing the most important "
    "reserved keywords and built-in functions of the requested language."
)

KEYWORD_DETAIL_INSTRUCTION = (
    "You explain programming language keywords to learners. "
    "Output ONLY valid JSON and match this exact schema:\n"
    "{\n"
    "  \"keyword\": \"string\",\n"
    "  \"concept\": \"string\",\n"
    "  \"howToUse\": \"string\",\n"
    "  \"whereToUse\": \"string\",\n"
    "  \"example\": \"string\"\n"
    "}\n"
)

ANALYZE_INSTRUCTION = (
    "Act as a visualizer compiler. Perform a deep execution analysis of the user's code with the given "
    "program input and return a structured JSON response.\n"
    "- stateTable: a step-by-step trace of variable changes; variables is an array of {name, value} with string values.\n"
    "- asciiFlow: a simple text/ASCII visualization of the control path.\n"
    "- mermaidChart: advanced flow of logic as a Mermaid flowchart (no code fences).\n"
    "- narration: array of human-readable steps.\n"
    "- executionLogic: a detailed explanation of the logic, including a relatable real-world analogy.\n"
    "- output: the program's standard output.\n"
    "- animationData: nodes for variables, loops, conditions and io, and the ordered highlightSequence "
    "of node ids visited during execution, each with the value at that moment when there is one.\n"
    "Output ONLY valid JSON and match this exact schema:\n"
    "{\n"
    "  \"asciiFlow\": \"string\",\n"
    "  \"stateTable\": [\n"
    "    {\"step\": 1, \"line\": 1, \"variables\": [{\"name\": \"string\", \"value\": \"string\"}], \"description\": \"string\"}\n"
    "  ],\n"
    "  \"executionLogic\": \"string\",\n"
    "  \"mermaidChart\": \"string\",\n"
    "  \"narration\": [\"string\"],\n"
    "  \"output\": \"string\",\n"
    "  \"summary\": {\"functions\": [\"string\"], \"variables\": [\"string\"], \"inputs\": [\"string\"]},\n"
    "  \"animationData\": {\n"
    "    \"nodes\": [{\"id\": \"string\", \"label\": \"string\", \"type\": \"variable|loop|condition|io\"}],\n"
    "    \"highlightSequence\": [{\"nodeId\": \"string\", \"value\": \"string\"}]\n"
    "  }\n"
    "}\n"
)


def _extract_json(text: str) -> Any:
    match = re.search(r"[\{\[][\s\S]*[\}\]]", text)
    if not match:
        raise ValueError("No JSON found in model output")
    raw = match.group(0)
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        cleaned = raw.replace("“", "\"").replace("”", "\"").replace("’", "'")
        cleaned = re.sub(r",\s*([}\]])", r"\1", cleaned)
        return json.loads(cleaned)


def _complete_json(instruction: str, prompt: str) -> Any:
    """Run one structured-output request and return the decoded JSON."""
    if not settings.openai_api_key:
        raise AnalysisProviderError("OPENAI_API_KEY is not set")
    try:
        client = get_openai_client()
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": instruction},
                {"role": "user", "content": prompt},
            ],
            temperature=settings.llm_temperature,
            response_format={"type": "json_object"},
        )
    except Exception as exc:
        raise AnalysisProviderError(f"Model request failed: {exc}") from exc
    raw = response.choices[0].message.content or ""
    try:
        return _extract_json(raw)
    except (ValueError, json.JSONDecodeError) as exc:
        logger.warning("Model returned non-JSON output", extra={"preview": raw[:200]})
        raise AnalysisProviderError("Model returned malformed JSON") from exc


def generate_notes(topic: str) -> NoteData:
    topic = (topic or "").strip()
    if not topic:
        raise ValueError("Topic is required")
    data = _complete_json(NOTES_INSTRUCTION, f"Topic: {topic}")
    try:
        return validate_note_data(data)
    except (ValidationError, TypeError) as exc:
        raise AnalysisProviderError(f"Notes did not match the schema: {exc}") from exc


def get_language_keywords(language: str) -> List[str]:
    language = (language or "").strip()
    if not language:
        raise ValueError("Language is required")
    data = _complete_json(KEYWORDS_INSTRUCTION, f"Language: {language}")
    try:
        return validate_keyword_list(data)
    except ValueError as exc:
        raise AnalysisProviderError(str(exc)) from exc


def get_keyword_explanation(language: str, keyword: str) -> KeywordDetail:
    language = (language or "").strip()
    keyword = (keyword or "").strip()
    if not language or not keyword:
        raise ValueError("Language and keyword are required")
    data = _complete_json(
        KEYWORD_DETAIL_INSTRUCTION,
        f"Explain the keyword or built-in \"{keyword}\" in the language {language}.",
    )
    try:
        return validate_keyword_detail(data)
    except (ValidationError, TypeError) as exc:
        raise AnalysisProviderError(f"Keyword explanation did not match the schema: {exc}") from exc


def _build_analyze_prompt(code: str, language: str, program_input: str) -> str:
    return f"Language: {language}\nInput: {program_input}\nCode:\n{code}"


def analyze_code(code: str, language: str, program_input: str = "") -> CompilerAnalysis:
    if not (code or "").strip():
        raise ValueError("Code is required")
    language = (language or "").strip()
    if not language:
        raise ValueError("Language is required")
    data: Dict[str, Any] = _complete_json(
        ANALYZE_INSTRUCTION, _build_analyze_prompt(code, language, program_input or "")
    )
    if not isinstance(data, dict):
        raise AnalysisProviderError("Analysis must be a JSON object")
    try:
        analysis = validate_compiler_analysis(data)
    except ValidationError as exc:
        raise AnalysisProviderError(f"Analysis did not match the schema: {exc}") from exc
    logger.info(
        "Code analysis complete",
        extra={
            "language": language,
            "steps": len(analysis.state_table),
            "highlights": len(analysis.animation_data.highlight_sequence),
        },
    )
    return analysis
