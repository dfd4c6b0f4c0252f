"""
Simulado CLI - practice exams from the terminal.

Every command loads the persisted state, acts through the SessionController
and exits, so a simulado can be built in one invocation, answered over
several and finished in another.

Usage:
    simulado build -n 25 -t 60          # Generate a simulado
    simulado take                       # Answer interactively with a countdown
    simulado answer 3 B                 # Answer question 3
    simulado finish                     # Finalize and show results
    simulado continue                   # Return to an unfinished simulado
    simulado history                    # Past exams and totals
    simulado resume <exam-id>           # Continue or review a past exam
"""

from __future__ import annotations

import asyncio
import sys
from typing import Annotated, Any, Awaitable, Callable, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from simulado.config import Settings, get_settings
from simulado.core.answer_pipeline import format_time
from simulado.core.app_state import ANSWERS_KEY, AppState, AppStateStore
from simulado.core.errors import SimuladoApiError, SimuladoError, SimuladoValidationError
from simulado.core.models import (
    ExamDetails,
    ExamStatus,
    Question,
    SimuladoConfig,
    index_for_letter,
    letter_for_index,
    score_message,
)
from simulado.core.persisted_store import PersistedStore
from simulado.core.session_controller import SessionController
from simulado.core.simulado_service import SimuladoService
from simulado.core.topic_filter import TopicFilterAggregator
from simulado.integrations import AuthClient, ConversationClient, ExamClient, TopicsClient

T = TypeVar("T")

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="simulado",
    help="📝 Simulado CLI - practice exams from the terminal",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


class Runtime:
    """Everything one command needs, wired from Settings."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.store = PersistedStore(settings.state_path)
        self.app_state = AppStateStore(self.store)

        client_options: dict[str, Any] = {
            "timeout": settings.request_timeout_seconds,
            "retry_attempts": settings.retry_attempts,
        }
        self.auth = AuthClient(settings.users_url, self.store, **client_options)
        client_options["token_provider"] = self.auth.get_token

        self.exams = ExamClient(settings.exams_url, user_id=settings.user_id, **client_options)
        self.topics = TopicsClient(settings.topics_url, **client_options)
        self.conversation = ConversationClient(
            settings.conversation_url, user_id=settings.user_id, store=self.store, **client_options
        )
        self.controller = SessionController(
            self.app_state,
            SimuladoService(self.exams, use_mock_data=settings.use_mock_data),
            self.exams,
        )

    async def __aenter__(self) -> Runtime:
        return self

    async def __aexit__(self, *args: Any) -> None:
        for client in (self.auth, self.exams, self.topics, self.conversation):
            await client.close()


def _run(action: Callable[[Runtime], Awaitable[T]]) -> T:
    """Run an async command body, turning simulado errors into exit code 1."""

    async def runner() -> T:
        async with Runtime(get_settings()) as runtime:
            return await action(runtime)

    try:
        return asyncio.run(runner())
    except SimuladoApiError as e:
        detail = f" ({e.detail})" if e.detail else ""
        console.print(f"[red]✗ {e}{detail}[/]")
        raise typer.Exit(1)
    except SimuladoError as e:
        console.print(f"[red]✗ {e}[/]")
        raise typer.Exit(1)


# =============================================================================
# Rendering
# =============================================================================


def _render_question(
    question: Question,
    number: int,
    total: int,
    selected: int | None = None,
    correct_letter: str | None = None,
) -> None:
    lines = [f"[dim]{question.discipline} · {question.year or '-'}[/]", ""]
    if question.context:
        lines += [question.context, ""]
    if question.alternatives_introduction:
        lines += [f"[bold]{question.alternatives_introduction}[/]", ""]

    for i, alt in enumerate(question.alternatives):
        letter = alt.letter or letter_for_index(i)
        marker = "●" if selected == i else "○"
        style = ""
        if correct_letter and letter == correct_letter:
            style = "green"
        elif correct_letter and selected == i:
            style = "red"
        text = f"{marker} {letter}) {question.alternative_text(i)}"
        lines.append(f"[{style}]{text}[/]" if style else text)

    console.print(
        Panel("\n".join(lines), title=f"{question.title} ({number}/{total})", border_style="cyan")
    )


def _render_results(details: ExamDetails, questions: list[Question]) -> None:
    score = details.score_percent
    color = "green" if score >= 70 else "yellow" if score >= 50 else "red"
    console.print(
        Panel(
            f"[bold {color}]{score}%[/]\n{score_message(score)}\n\n"
            f"Acertos: {details.total_correct_answers}  "
            f"Erros: {details.total_wrong_answers}  "
            f"Em branco: {details.unanswered}",
            title="Resultado",
            border_style=color,
        )
    )

    table = Table(title="Gabarito")
    table.add_column("#", justify="right")
    table.add_column("Questão")
    table.add_column("Sua resposta", justify="center")
    table.add_column("Correta", justify="center")
    table.add_column("", justify="center")

    titles = {q.id: q.title for q in questions}
    for number, result in enumerate(details.questions, start=1):
        mark = "[green]✓[/]" if result.is_correct else "[red]✗[/]" if result.user_answer else "[dim]-[/]"
        table.add_row(
            str(number),
            titles.get(result.question_id, result.question_id),
            result.user_answer or "-",
            result.correct_answer or "?",
            mark,
        )
    console.print(table)


def _question_at(app_state: AppStateStore, number: int) -> Question:
    questions = app_state.current_simulado
    if not 1 <= number <= len(questions):
        raise SimuladoValidationError(f"Question number must be between 1 and {len(questions)}")
    return questions[number - 1]


# =============================================================================
# Builder Commands
# =============================================================================


@app.command()
def build(
    questions: Annotated[
        int | None, typer.Option("--questions", "-n", help="Number of questions (1-100)")
    ] = None,
    time_limit: Annotated[
        int | None, typer.Option("--time", "-t", help="Time limit in minutes (15-300)")
    ] = None,
    description: Annotated[
        str, typer.Option("--description", "-d", help="Free-text description")
    ] = "",
    topic: Annotated[
        list[str] | None, typer.Option("--topic", help="Topic id (repeatable)")
    ] = None,
    area: Annotated[
        list[str] | None, typer.Option("--area", help="FIELD:AREA, every topic in the area")
    ] = None,
    general: Annotated[
        list[str] | None,
        typer.Option("--general", help="FIELD:AREA:GENERAL, every topic in the general topic"),
    ] = None,
    specific: Annotated[
        list[str] | None,
        typer.Option("--specific", help="FIELD:AREA:GENERAL:SPECIFIC, one specific topic"),
    ] = None,
) -> None:
    """
    Generate a new simulado and start it.

    Examples:
        simulado build                       # Defaults (25 questions, 60 min)
        simulado build -n 10 -t 30
        simulado build --area MAT:ALG        # Every topic of an area
    """
    settings = get_settings()
    values = {
        "description": description,
        "total_questions": settings.default_question_count if questions is None else questions,
        "time_limit": settings.default_time_limit if time_limit is None else time_limit,
    }
    try:
        # Validate before any topic lookup or exam request
        config = SimuladoConfig.build(**values, topic_ids=list(topic or []))
    except SimuladoValidationError as e:
        console.print(f"[red]✗ {e}[/]")
        raise typer.Exit(1)

    async def body(rt: Runtime) -> None:
        topic_ids = list(config.topic_ids)
        if area or general or specific:
            topic_ids += await _resolve_topic_options(rt, area or [], general or [], specific or [])
            if not topic_ids:
                raise SimuladoValidationError("The selected topics matched nothing")
        final = config.model_copy(update={"topic_ids": list(dict.fromkeys(topic_ids))})

        with console.status("[cyan]Generating simulado...[/]"):
            result = await rt.controller.generate(final)

        if result.offline:
            console.print("[yellow]⚠ Exam service unavailable: using offline practice questions[/]")
        console.print(
            Panel(
                f"[bold cyan]SIMULADO READY[/]\n"
                f"Exam: {result.exam_id}\n"
                f"Questions: {len(result.questions)}\n"
                f"Time limit: {final.time_limit} min\n"
                f"Topics: {len(final.topic_ids) or 'all'}",
                title="📝",
                border_style="cyan",
            )
        )
        console.print("[dim]Run 'simulado take' to start answering.[/]")

    _run(body)


async def _resolve_topic_options(
    rt: Runtime, areas: list[str], generals: list[str], specifics: list[str]
) -> list[str]:
    aggregator = TopicFilterAggregator(rt.topics)
    for value in areas:
        parts = _split_codes(value, 2, "--area")
        await aggregator.toggle_area(*parts, checked=True)
    for value in generals:
        parts = _split_codes(value, 3, "--general")
        await aggregator.toggle_general_topic(*parts, checked=True)
    for value in specifics:
        parts = _split_codes(value, 4, "--specific")
        await aggregator.toggle_specific_topic(*parts, checked=True)
    console.print(f"[dim]{aggregator.selected_count()} topic selections → {len(aggregator.topic_ids)} topics[/]")
    return aggregator.topic_ids


def _split_codes(value: str, count: int, option: str) -> list[str]:
    parts = value.split(":", count - 1)
    if len(parts) != count or not all(parts):
        raise SimuladoValidationError(f"{option} expects {count} ':'-separated parts, got {value!r}")
    return parts


@app.command()
def topics(
    field_code: Annotated[str | None, typer.Argument(help="Field code")] = None,
    area_code: Annotated[str | None, typer.Argument(help="Area code")] = None,
    general_topic_code: Annotated[str | None, typer.Argument(help="General topic code")] = None,
    distinct: Annotated[
        bool, typer.Option("--distinct", help="List the service's distinct names and codes instead")
    ] = False,
) -> None:
    """
    Browse the topic taxonomy one level at a time.

    Examples:
        simulado topics                  # Fields
        simulado topics MAT              # Areas of a field
        simulado topics MAT ALG          # General topics of an area
        simulado topics MAT ALG EQ       # Specific topics
        simulado topics MAT --distinct   # Distinct area names and codes
    """

    async def body(rt: Runtime) -> None:
        if distinct:
            names, codes = await rt.topics.distinct_level(field_code, area_code, general_topic_code)
            table = Table(title="Distinct values")
            table.add_column("Name", style="cyan")
            for name in names:
                table.add_row(name)
            console.print(table)
            if codes:
                console.print(f"[dim]Codes: {', '.join(codes)}[/]")
            return

        aggregator = TopicFilterAggregator(rt.topics)
        if general_topic_code and area_code and field_code:
            specifics = await aggregator.load_specific_topics(field_code, area_code, general_topic_code)
            table = Table(title=f"Specific topics: {field_code}:{area_code}:{general_topic_code}")
            table.add_column("Specific topic", style="cyan")
            for name in specifics:
                table.add_row(name)
            console.print(table)
            return

        if area_code and field_code:
            options = await aggregator.load_general_topics(field_code, area_code)
            title = f"General topics: {field_code}:{area_code}"
        elif field_code:
            options = await aggregator.load_areas(field_code)
            title = f"Areas: {field_code}"
        else:
            options = await aggregator.load_fields()
            title = "Fields"

        table = Table(title=title)
        table.add_column("Code", style="cyan")
        table.add_column("Name")
        for option in options:
            table.add_row(option.code, option.name)
        console.print(table)
        if not options:
            console.print("[yellow]Nothing found.[/]")

    _run(body)


# =============================================================================
# Simulado Commands
# =============================================================================


@app.command()
def status() -> None:
    """Show where the current session stands."""

    async def body(rt: Runtime) -> None:
        state = rt.app_state
        config = state.config
        questions = state.current_simulado
        table = Table(title="Simulado")
        table.add_column("Item", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Screen", state.current_state.value)
        table.add_row("Exam", state.exam_id or "-")
        table.add_row("Answered", f"{len(state.answers)}/{len(questions)}")
        if config:
            table.add_row("Description", config.description or "-")
            table.add_row("Time limit", f"{config.time_limit} min")
            table.add_row("Topics", str(len(config.topic_ids) or "all"))
        if state.exam_details:
            table.add_row("Score", f"{state.exam_details.score_percent}%")
        console.print(table)

    _run(body)


@app.command()
def show(
    number: Annotated[int | None, typer.Argument(help="Question number (1-based)")] = None,
) -> None:
    """Show one question, or list every question with its answer."""

    async def body(rt: Runtime) -> None:
        state = rt.app_state
        questions = state.current_simulado
        if not questions:
            raise SimuladoValidationError("No simulado loaded. Run 'simulado build' first.")
        answers = state.answers
        details = state.exam_details

        if number is None:
            table = Table(title=f"Simulado ({len(answers)}/{len(questions)} answered)")
            table.add_column("#", justify="right")
            table.add_column("Questão")
            table.add_column("Disciplina")
            table.add_column("Resposta", justify="center")
            for i, question in enumerate(questions, start=1):
                index = answers.get(question.id)
                table.add_row(
                    str(i),
                    question.title,
                    question.discipline,
                    letter_for_index(index) if index is not None else "-",
                )
            console.print(table)
            return

        question = _question_at(state, number)
        result = details.result_for(question.id) if details else None
        _render_question(
            question,
            number,
            len(questions),
            selected=answers.get(question.id),
            correct_letter=result.correct_answer if result else None,
        )

    _run(body)


@app.command()
def answer(
    number: Annotated[int, typer.Argument(help="Question number (1-based)")],
    letter: Annotated[str, typer.Argument(help="Alternative letter, e.g. B")],
) -> None:
    """Answer one question of the current simulado."""

    async def body(rt: Runtime) -> None:
        question = _question_at(rt.app_state, number)
        try:
            index = index_for_letter(letter)
        except ValueError as e:
            raise SimuladoValidationError(str(e)) from e

        rt.controller.select_answer(question.id, index)
        pipeline = rt.controller.pipeline
        await pipeline.drain()
        console.print(f"[green]✓ Question {number}: {letter.upper()}[/]")
        if pipeline.unsynced:
            console.print("[yellow]⚠ Saved locally; it will be sent again before finishing.[/]")

    _run(body)


@app.command()
def take(
    start: Annotated[
        int, typer.Option("--start", "-s", help="Question number to start from")
    ] = 1,
) -> None:
    """
    Answer the current simulado interactively, with a countdown.

    Type a letter to answer, Enter to skip, 'p' for previous, 'f' to finish.
    When time runs out the simulado is finished automatically.
    """

    async def body(rt: Runtime) -> None:
        controller = rt.controller
        state = rt.app_state
        if state.current_state != AppState.SIMULADO:
            raise SimuladoValidationError(
                "No simulado in progress. Run 'simulado build' or 'simulado continue' first."
            )

        questions = state.current_simulado
        timer = controller.start_timer()
        current = max(1, min(start, len(questions)))

        try:
            while controller.state == AppState.SIMULADO:
                # Answers given from another terminal show up between questions
                if ANSWERS_KEY in rt.store.refresh():
                    console.print("[dim]Answers updated elsewhere.[/]")
                question = questions[current - 1]
                _render_question(question, current, len(questions), selected=state.answers.get(question.id))
                console.print(
                    f"[dim]⏱ {format_time(timer.remaining)} · "
                    f"{len(state.answers)}/{len(questions)} answered[/]"
                )
                choice = await asyncio.to_thread(
                    Prompt.ask, "Answer (A-E), Enter=next, p=previous, f=finish", default=""
                )
                if controller.state != AppState.SIMULADO:
                    break

                choice = choice.strip().lower()
                if choice == "f":
                    await controller.finish()
                    break
                if choice == "p":
                    current = max(1, current - 1)
                    continue
                if choice:
                    try:
                        controller.select_answer(question.id, index_for_letter(choice))
                    except (ValueError, SimuladoValidationError) as e:
                        console.print(f"[red]{e}[/]")
                        continue
                if current < len(questions):
                    current += 1
                elif Confirm.ask("Last question. Finish now?", default=False):
                    await controller.finish()
        finally:
            await controller.close_timer()

        if timer.expired:
            console.print("[yellow]⏰ Time is up![/]")
        if timer.error:
            raise timer.error
        details = state.exam_details
        if details and controller.state == AppState.RESULTS:
            _render_results(details, questions)

    _run(body)


@app.command()
def finish() -> None:
    """Finish the current simulado and show the results."""

    async def body(rt: Runtime) -> None:
        with console.status("[cyan]Finishing simulado...[/]"):
            details = await rt.controller.finish()
        if details:
            _render_results(details, rt.app_state.current_simulado)

    _run(body)


@app.command()
def restart() -> None:
    """Retake the same questions with a clean answer sheet."""

    async def body(rt: Runtime) -> None:
        rt.controller.restart()
        console.print("[green]✓ Simulado restarted.[/]")

    _run(body)


@app.command()
def new() -> None:
    """Discard the current simulado and return to the builder."""

    async def body(rt: Runtime) -> None:
        rt.controller.new_simulado()
        console.print("[green]✓ Ready for a new simulado.[/]")

    _run(body)


@app.command()
def back() -> None:
    """Go back one screen without discarding anything."""

    async def body(rt: Runtime) -> None:
        controller = rt.controller
        current = controller.state
        if current == AppState.VIEW_HISTORY_EXAM:
            controller.back_from_history_exam()
        elif current == AppState.HISTORY:
            controller.back_from_history()
        elif current == AppState.PROFILE:
            controller.back_from_profile()
        else:
            controller.back_to_builder()
        console.print(f"[dim]Now at: {controller.state.value}[/]")

    _run(body)


@app.command("continue")
def continue_() -> None:
    """Return to the unfinished simulado after going back or browsing history."""

    async def body(rt: Runtime) -> None:
        rt.controller.continue_simulado()
        state = rt.app_state
        console.print(
            f"[green]✓ Back to the simulado: {len(state.answers)}/{len(state.current_simulado)} answered.[/]"
        )

    _run(body)


@app.command()
def replicate(
    exam_id: Annotated[
        str | None, typer.Option("--exam-id", "-e", help="Exam to replicate (default: current)")
    ] = None,
) -> None:
    """Start a new exam with the same questions as an existing one."""

    async def body(rt: Runtime) -> None:
        with console.status("[cyan]Replicating exam...[/]"):
            result = await rt.controller.replicate(exam_id)
        console.print(
            f"[green]✓ New exam {result.exam_id} with {len(result.questions)} questions.[/]"
        )

    _run(body)


# =============================================================================
# History Commands
# =============================================================================


@app.command()
def history(
    status_filter: Annotated[
        ExamStatus | None, typer.Option("--status", help="Only exams with this status")
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-l", help="Page size")] = 10,
    skip: Annotated[int, typer.Option("--skip", help="Exams to skip")] = 0,
) -> None:
    """List past exams with aggregate totals."""

    async def body(rt: Runtime) -> None:
        controller = rt.controller
        controller.view_history()
        page = await controller.list_history(skip=skip, limit=limit, status=status_filter)
        totals = await controller.totalizers()

        table = Table(title=f"Exams ({page.pagination.returned} of {page.pagination.total})")
        table.add_column("Exam", style="cyan")
        table.add_column("Created")
        table.add_column("Status")
        table.add_column("Answered", justify="right")
        table.add_column("Score", justify="right")
        for exam in page.exams:
            score = f"{exam.score_percent}%" if exam.status == ExamStatus.FINISHED else "-"
            table.add_row(
                exam.id,
                exam.created_at[:16].replace("T", " "),
                exam.status.value,
                f"{exam.answered_questions}/{exam.total_questions}",
                score,
            )
        console.print(table)
        console.print(
            f"[dim]Total: {totals.total_exams} · finished: {totals.finished_exams} · "
            f"average score: {totals.average_score:.1f}%[/]"
        )

    _run(body)


@app.command()
def resume(
    exam_id: Annotated[str, typer.Argument(help="Exam id from 'simulado history'")],
) -> None:
    """Continue an unfinished exam, or review a finished one."""

    async def body(rt: Runtime) -> None:
        with console.status("[cyan]Loading exam...[/]"):
            state = await rt.controller.resume(exam_id)
        if state == AppState.VIEW_HISTORY_EXAM and rt.app_state.exam_details:
            _render_results(rt.app_state.exam_details, rt.app_state.current_simulado)
        else:
            console.print(
                f"[green]✓ Continuing exam {exam_id} "
                f"({len(rt.app_state.answers)}/{len(rt.app_state.current_simulado)} answered).[/]"
            )

    _run(body)


@app.command()
def delete(
    exam_id: Annotated[str, typer.Argument(help="Exam id to delete")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete an exam from history."""
    if not yes and not Confirm.ask(f"Delete exam {exam_id}?", default=False):
        raise typer.Exit(0)

    async def body(rt: Runtime) -> None:
        await rt.controller.delete_exam(exam_id)
        console.print(f"[green]✓ Deleted exam {exam_id}[/]")

    _run(body)


# =============================================================================
# Account Commands
# =============================================================================


@app.command()
def register(
    email: Annotated[str, typer.Option("--email", prompt=True)],
    name: Annotated[str, typer.Option("--name", prompt=True)],
    password: Annotated[
        str, typer.Option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    ],
) -> None:
    """Create an account."""

    async def body(rt: Runtime) -> None:
        user = await rt.auth.register(email, name, password)
        console.print(f"[green]✓ Account created for {user.email}. Run 'simulado login'.[/]")

    _run(body)


@app.command()
def login(
    email: Annotated[str, typer.Option("--email", prompt=True)],
    password: Annotated[str, typer.Option("--password", prompt=True, hide_input=True)],
) -> None:
    """Log in and keep the access token for later commands."""

    async def body(rt: Runtime) -> None:
        await rt.auth.login(email, password)
        console.print(f"[green]✓ Logged in as {email}[/]")

    _run(body)


@app.command()
def logout() -> None:
    """Forget the access token."""

    async def body(rt: Runtime) -> None:
        rt.auth.logout()
        console.print("[green]✓ Logged out[/]")

    _run(body)


@app.command()
def me() -> None:
    """Show the logged-in user."""

    async def body(rt: Runtime) -> None:
        user = await rt.auth.get_current_user()
        table = Table(title="Profile")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Name", user.name)
        table.add_row("Email", user.email)
        table.add_row("Active", "yes" if user.is_active else "no")
        console.print(table)

    _run(body)


@app.command()
def profile(
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    email: Annotated[str | None, typer.Option("--email", help="New email")] = None,
    password: Annotated[str | None, typer.Option("--password", help="New password")] = None,
    confirm_password: Annotated[
        str | None, typer.Option("--confirm-password", help="Repeat the new password")
    ] = None,
) -> None:
    """Update name, email or password."""

    async def body(rt: Runtime) -> None:
        rt.controller.open_profile()
        user = await rt.auth.update_current_user(
            email=email, name=name, password=password, confirm_password=confirm_password
        )
        console.print(f"[green]✓ Profile updated for {user.email}[/]")

    _run(body)


# =============================================================================
# Help Chat
# =============================================================================


@app.command()
def chat(
    number: Annotated[int, typer.Argument(help="Question number (1-based)")],
    message: Annotated[str | None, typer.Argument(help="Message for the assistant")] = None,
    close: Annotated[bool, typer.Option("--close", help="Close this question's chat")] = False,
) -> None:
    """
    Ask the assistant about a question.

    Without a message, opens (or shows) the question's conversation.
    """

    async def body(rt: Runtime) -> None:
        question = _question_at(rt.app_state, number)
        conversation = rt.conversation

        if close:
            conversation.close_session(question.id)
            console.print("[dim]Chat closed.[/]")
            return

        if message:
            with console.status("[cyan]Thinking...[/]"):
                await conversation.send_message(question.id, message)
            session = conversation.session_for(question.id)
        else:
            session = await conversation.get_or_open(question.id)

        for msg in session.messages if session else []:
            who = "[bold cyan]Você[/]" if msg.role == "user" else "[bold magenta]Assistente[/]"
            console.print(f"{who}: {msg.content}")

    _run(body)


# =============================================================================
# Entry Point
# =============================================================================


@app.callback()
def callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Verbose output")
    ] = False,
) -> None:
    """
    📝 Simulado CLI - practice exams from the terminal

    \b
    Quick Start:
      simulado build -n 25       # Generate a simulado
      simulado take              # Answer it
      simulado history           # Review past exams
    """
    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG", format="<level>{level: <8}</level> | {message}")


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
