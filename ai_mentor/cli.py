"""CLI interface."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer

from ai_mentor.models.analysis import CompilerAnalysis
from ai_mentor.playback.controller import PlaybackController
from ai_mentor.renderers.animation_svg import render_frame_text
from ai_mentor.services import content_service
from ai_mentor.services.content_service import AnalysisProviderError
from ai_mentor.utils.config import settings
from ai_mentor.utils.file_utils import read_source_file

app = typer.Typer(add_completion=False)


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command()
def notes(topic: str = typer.Argument(..., help="Topic to write notes for.")):
    """Generate topic notes with a flowchart and a quiz."""
    try:
        result = content_service.generate_notes(topic)
    except (ValueError, AnalysisProviderError) as exc:
        _fail(exc)
    _echo_json(result.to_wire())


@app.command()
def keywords(language: str = typer.Argument(..., help="Programming language.")):
    """List the reserved keywords and built-ins of a language."""
    try:
        result = content_service.get_language_keywords(language)
    except (ValueError, AnalysisProviderError) as exc:
        _fail(exc)
    for keyword in result:
        typer.echo(keyword)


@app.command()
def explain(
    language: str = typer.Argument(..., help="Programming language."),
    keyword: str = typer.Argument(..., help="Keyword or built-in to explain."),
):
    """Explain one keyword of a language."""
    try:
        result = content_service.get_keyword_explanation(language, keyword)
    except (ValueError, AnalysisProviderError) as exc:
        _fail(exc)
    _echo_json(result.to_wire())


async def play_analysis(analysis: CompilerAnalysis, speed_ms: int) -> int:
    """Auto-play the highlight sequence, printing every frame; returns frames shown."""
    nodes = analysis.animation_data.nodes
    controller = PlaybackController(analysis.animation_data.highlight_sequence, speed_ms=speed_ms)
    finished = asyncio.Event()
    shown = [controller.current_index]

    def _on_change(state) -> None:
        if state.current_index != shown[-1]:
            shown.append(state.current_index)
            typer.echo(render_frame_text(nodes, state))
        if not state.is_playing:
            finished.set()

    typer.echo(render_frame_text(nodes, controller.snapshot()))
    controller.subscribe(_on_change)
    try:
        controller.play()
        if controller.is_playing:
            await finished.wait()
    finally:
        controller.close()
    return len(shown)


@app.command()
def analyze(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Path to a source file.", show_default=False),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="Paste code."),
    language: str = typer.Option("JavaScript", "--language", "-l"),
    program_input: str = typer.Option("", "--input", "-i", help="Program input."),
    play: bool = typer.Option(False, "--play", help="Play the execution animation in the terminal."),
    speed_ms: int = typer.Option(settings.playback_default_speed_ms, "--speed-ms"),
):
    """Trace code execution: state table, flow, narration and animation."""
    if not file and not code:
        raise typer.BadParameter("Provide --file or --code")
    try:
        source = read_source_file(file) if file else code
        result = content_service.analyze_code(source, language, program_input)
    except (OSError, ValueError, AnalysisProviderError) as exc:
        _fail(exc)
    if not play:
        _echo_json(result.to_wire())
        return
    for line in result.narration:
        typer.echo(f"- {line}")
    asyncio.run(play_analysis(result, speed_ms))
    if result.output:
        typer.echo(f"Output:\n{result.output}")


if __name__ == "__main__":
    app()
