"""CLI interface for cvtailor using Typer."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.agents.variants import (
    VariantAnswerAgent,
    VariantAnswerInput,
    VariantQuestionsAgent,
    VariantQuestionsInput,
)
from ..core.config.loader import load_config
from ..core.config.personal_notes import load_personal_notes
from ..core.config.providers import ProviderConfigStore
from ..core.errors import CVTailorError, InvalidOutputDocument, UnknownProvider
from ..core.models.base import AgentContext
from ..core.models.enums import EditingMode, InterviewMode
from ..core.models.interview import Question
from ..core.orchestrator.letter import CoverLetterPipeline
from ..core.orchestrator.pipeline import TailoringPipeline
from ..core.storage.object_store import ArtifactStore
from ..core.tailoring.latex import scan_document
from ..integrations.llm_client import GenerationClient, build_generation_client
from ..interview.heuristics import HeuristicEngine
from ..interview.session import InterviewService, SessionStore
from ..observability.logger import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="cvtailor",
    help="Tailor a LaTeX CV to a job description, draft a cover letter and run mock interviews",
    add_completion=False,
)

JobOption = Annotated[
    Path,
    typer.Option(
        "--job",
        "-j",
        help="Path to job description file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
]
TemplateOption = Annotated[
    Path | None,
    typer.Option("--template", "-t", help="LaTeX CV template (defaults to paths.template)"),
]
ProviderOption = Annotated[
    str | None,
    typer.Option("--provider", "-p", help="Preferred provider for the first attempt"),
]
OfflineOption = Annotated[
    bool,
    typer.Option("--offline", help="Never call the generation service; use local fallbacks"),
]


def _setup(config: dict) -> None:
    log_cfg = config.get("logging", {})
    setup_logging(
        log_level=log_cfg.get("level", "INFO"),
        log_format=log_cfg.get("format", "json"),
        log_file=log_cfg.get("file"),
    )


def _get_context(config: dict, provider: str | None) -> AgentContext:
    metadata = {"provider": provider} if provider else {}
    return AgentContext(config=config, metadata=metadata)


def _get_client(config: dict, offline: bool) -> GenerationClient | None:
    if offline:
        return None
    return build_generation_client(config)


def _read_text(path: Path, label: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (IOError, UnicodeDecodeError) as e:
        console.print(f"[red]! Error reading {label}:[/red] {e}")
        raise typer.Exit(code=1)


def _read_template(config: dict, template: Path | None) -> str:
    path = template or Path(config.get("paths", {}).get("template", "config/templates/sample_cv.tex"))
    if not path.exists():
        console.print(f"[red]! Error:[/red] template not found at {path}")
        raise typer.Exit(code=1)
    return _read_text(path, "template")


@app.command()
def tailor(
    job: JobOption,
    template: TemplateOption = None,
    mode: Annotated[
        EditingMode,
        typer.Option("--mode", "-m", help="Editing mode"),
    ] = EditingMode.CONSERVATIVE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the tailored .tex here"),
    ] = None,
    provider: ProviderOption = None,
    offline: OfflineOption = False,
):
    """Tailor the CV template to a job description.

    Runs job parse, document parse, gap analysis, edit proposal, edit
    application and change summary; prints the summary and stores the result.
    """
    config = load_config()
    _setup(config)

    jd_text = _read_text(job, "job description")
    document_text = _read_template(config, template)

    console.print(f"\n[bold blue]Tailoring CV for:[/bold blue] {job}")
    console.print(f"[dim]Editing mode:[/dim] {mode.value}")

    pipeline = TailoringPipeline(
        _get_context(config, provider),
        client=_get_client(config, offline),
        store=ArtifactStore.from_config(config),
    )

    try:
        result = asyncio.run(pipeline.run(jd_text, document_text, editing_mode=mode))
    except InvalidOutputDocument as e:
        console.print(f"\n[red]! Tailoring failed:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("\n[green]> Tailoring completed[/green]")
    console.print(f"[dim]Run id:[/dim] {result.run_id}")
    console.print(f"[dim]Relevance:[/dim] {result.gap_analysis.relevance_score or 'N/A'}")

    summary = result.summary
    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Edits applied", str(summary.edits_applied))
    table.add_row("Keywords added", ", ".join(summary.keywords_added) or "-")
    table.add_row("Keywords missing", ", ".join(summary.keywords_missing) or "-")
    table.add_row("Fallback stages", ", ".join(result.fallback_stages) or "-")
    console.print(table)

    if summary.questions_for_user:
        console.print("\n[bold]Questions for you:[/bold]")
        for question in summary.questions_for_user:
            console.print(f"  - {question}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.tailored_document, encoding="utf-8")
        console.print(f"\n[green]Tailored CV saved to:[/green] {output}")


@app.command()
def show(
    run_id: Annotated[str, typer.Argument(help="Tailoring run identifier")],
):
    """Show the change log of a stored tailoring run."""
    config = load_config()
    store = ArtifactStore.from_config(config)
    result = store.load_tailoring_result(run_id)

    if not result:
        console.print(f"[yellow]No tailoring run found:[/yellow] {run_id}")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Original")
    table.add_column("New")
    table.add_column("Confidence", width=10)
    table.add_column("Justification")
    for change in result.change_log.changes:
        table.add_row(change.original_text[:60], change.new_text[:60], change.confidence, change.justification)

    console.print(f"\n[bold blue]Changes for run:[/bold blue] {run_id}")
    console.print(table)
    console.print(f"\n{result.change_log.summary.relevance_improvement}")


@app.command()
def letter(
    job: JobOption,
    template: TemplateOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the letter text here"),
    ] = None,
    provider: ProviderOption = None,
    offline: OfflineOption = False,
):
    """Draft a cover letter from the job description and the CV."""
    config = load_config()
    _setup(config)

    pipeline = CoverLetterPipeline(
        _get_context(config, provider),
        client=_get_client(config, offline),
        store=ArtifactStore.from_config(config),
    )
    result = asyncio.run(pipeline.run(_read_text(job, "job description"), _read_template(config, template)))

    text = result.cover_letter.to_text()
    console.print(Panel(text, title="Cover letter", expand=False))

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        console.print(f"\n[green]Cover letter saved to:[/green] {output}")


def _print_question(view) -> None:
    console.print(
        f"\n[bold]Question {view.question_number}/{view.total_questions}[/bold] "
        f"[dim]({view.difficulty}, {view.type}, {view.time_limit}s)[/dim]"
    )
    console.print(view.question)
    for letter_code, option in zip("ABCD", view.options or []):
        console.print(f"  {letter_code}) {option}")


@app.command()
def interview(
    job: JobOption,
    template: TemplateOption = None,
    mode: Annotated[
        InterviewMode | None,
        typer.Option("--mode", "-m", help="ai scores with the generation service, heuristic never calls it (defaults to interview.mode)"),
    ] = None,
    provider: ProviderOption = None,
):
    """Run an interactive 20-question mock interview."""
    config = load_config()
    _setup(config)

    interview_cfg = config.get("interview", {})
    mode = mode or InterviewMode(interview_cfg.get("mode", InterviewMode.AI.value))
    personal_notes = load_personal_notes(config.get("paths", {}).get("personal_notes"))
    service = InterviewService(
        client=_get_client(config, mode == InterviewMode.HEURISTIC),
        context=_get_context(config, provider),
        store=SessionStore(single_session=interview_cfg.get("single_session", True)),
        personal_notes=personal_notes,
        questions_per_tier=interview_cfg.get("questions_per_tier", 5),
    )

    async def run_session():
        start = await service.start(_read_text(job, "job description"), _read_template(config, template), mode)
        console.print(
            f"\n[bold blue]Mock interview for:[/bold blue] {start.job_title or 'the role'} "
            f"[dim]({start.total_questions} questions, about {start.estimated_duration} minutes)[/dim]"
        )

        view = start.current_question
        while view is not None:
            _print_question(view)
            answer = ""
            while not answer.strip():
                answer = typer.prompt("Your answer")
            outcome = await service.submit_answer(start.id, view.id, answer)
            console.print(
                f"[green]Score:[/green] {outcome.evaluation.score} "
                f"[dim](running average {outcome.progress.current_score})[/dim]"
            )
            view = service.next_question(start.id)

        results = service.results(start.id)
        ArtifactStore.from_config(config).save_assessment_results(results)
        return results

    results = asyncio.run(run_session())

    console.print(f"\n[bold]Overall score:[/bold] {results.overall_score}")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Difficulty")
    table.add_column("Questions", justify="right")
    table.add_column("Average", justify="right")
    for difficulty, stats in results.difficulty_stats.items():
        table.add_row(difficulty, str(stats.count), str(stats.average_score))
    console.print(table)

    console.print("\n[bold]Recommendations:[/bold]")
    for recommendation in results.recommendations:
        console.print(f"  - {recommendation}")


@app.command("variant-questions")
def variant_questions(
    topic: Annotated[str, typer.Argument(help="Topic of the questions")],
    count: Annotated[int, typer.Option("--count", "-n", help="Number of questions (1-20)")] = 5,
    difficulty: Annotated[
        str, typer.Option("--difficulty", "-d", help="mixed, easy, medium, hard or extreme")
    ] = "mixed",
    mode: Annotated[InterviewMode, typer.Option("--mode", "-m")] = InterviewMode.HEURISTIC,
    template: TemplateOption = None,
    provider: ProviderOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print questions as JSON")] = False,
):
    """Generate standalone questions about one topic."""
    config = load_config()
    _setup(config)

    try:
        request = VariantQuestionsInput(topic=topic, count=count, difficulty=difficulty)
    except ValueError as e:
        console.print(f"[red]! Error:[/red] {e}")
        raise typer.Exit(code=1)

    if mode == InterviewMode.HEURISTIC:
        questions = HeuristicEngine().variant_questions(request.topic, request.count, request.difficulty)
    else:
        document = scan_document(_read_template(config, template))
        agent = VariantQuestionsAgent(
            build_generation_client(config),
            personal_notes=load_personal_notes(config.get("paths", {}).get("personal_notes")),
        )
        result = asyncio.run(
            agent.execute(request.model_copy(update={"document": document}), _get_context(config, provider))
        )
        questions = result.data.questions

    if as_json:
        console.print_json(json.dumps([q.model_dump(mode="json") for q in questions]))
        return
    _print_questions(questions)


def _print_questions(questions: list[Question]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Id", style="dim")
    table.add_column("Difficulty")
    table.add_column("Type")
    table.add_column("Question")
    for question in questions:
        text = question.question
        if question.options:
            text += "\n" + "\n".join(f"{code}) {opt}" for code, opt in zip("ABCD", question.options))
        table.add_row(question.id, question.difficulty, question.type, text)
    console.print(table)


@app.command("variant-answer")
def variant_answer(
    question: Annotated[str, typer.Argument(help="Interview question to answer")],
    template: TemplateOption = None,
    tone: Annotated[str, typer.Option("--tone", help="Tone of the answer")] = "sincere",
    detailed: Annotated[bool, typer.Option("--detailed", help="Longer answer")] = False,
    provider: ProviderOption = None,
    offline: OfflineOption = False,
):
    """Craft a first-person answer grounded in the CV and personal notes."""
    config = load_config()
    _setup(config)

    document = scan_document(_read_template(config, template))
    try:
        request = VariantAnswerInput(question=question, document=document, tone=tone, concise=not detailed)
    except ValueError as e:
        console.print(f"[red]! Error:[/red] {e}")
        raise typer.Exit(code=1)

    agent = VariantAnswerAgent(
        _get_client(config, offline),
        personal_notes=load_personal_notes(config.get("paths", {}).get("personal_notes")),
    )
    result = asyncio.run(agent.execute(request, _get_context(config, provider)))
    if result.used_fallback:
        console.print("[dim]Generated locally (generation service unavailable)[/dim]")
    console.print(Panel(result.data.answer, expand=False))


@app.command("configure-provider")
def configure_provider(
    provider: Annotated[str, typer.Argument(help="Provider name, e.g. openrouter or groq")],
    api_key: Annotated[str, typer.Option("--api-key", prompt=True, hide_input=True)],
    env_file: Annotated[
        Path,
        typer.Option("--env-file", help="dotenv file the key is saved to"),
    ] = Path(".env"),
    save: Annotated[
        bool,
        typer.Option("--save/--no-save", help="Save the key for later runs"),
    ] = True,
):
    """Set a provider credential, save it to the dotenv file and show the provider table."""
    config = load_config()
    store = ProviderConfigStore.from_config(config)

    try:
        store.configure(provider, api_key)
        saved_to = store.persist(provider, env_file) if save else None
    except (UnknownProvider, ValueError) as e:
        console.print(f"[red]! Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Base URL")
    table.add_column("Credential")
    for cfg in store.snapshot().providers:
        table.add_row(cfg.name, cfg.model, cfg.base_url, "[green]set[/green]" if cfg.has_credential else "[red]missing[/red]")
    console.print(table)
    if saved_to:
        console.print(f"[green]Credential saved to:[/green] {saved_to}")
    else:
        console.print("[dim]Credential not saved; it lasts for this process only.[/dim]")


@app.callback()
def main():
    """cvtailor command line."""


def run() -> None:
    try:
        app()
    except CVTailorError as e:
        console.print(f"[red]! Error:[/red] {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    run()
