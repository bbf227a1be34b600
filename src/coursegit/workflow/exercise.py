"""Exercise workflow - run a lesson's entry file, then move on."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from coursegit.core.errors import LessonEntrypointNotFound, LessonNotFound
from coursegit.core.log import logger
from coursegit.core.prompt import Choice
from coursegit.core.result import WorkflowResult
from coursegit.core.runner import Runner
from coursegit.lessons.tree import Lesson, scan_lessons
from coursegit.workflow.context import WorkflowContext

RUN_AGAIN = "run-again"
NEXT = "next-exercise"
PREVIOUS = "previous-exercise"
CHOOSE = "choose-exercise"
FINISH = "finish"


@dataclass(frozen=True)
class Position:
    """An exercise: a lesson (by index) and one of its subfolders."""

    lesson: int
    subfolder: int


def lesson_choice_filter(query: str, choice: Choice) -> bool:
    return query.strip() in choice.title


@dataclass
class Exercise:
    """Run exercises one after another.

    Each run prints the subfolder's readme, runs its entry file with
    the configured command and env file, then offers to run it again,
    go to the next or previous exercise, pick another one or finish.
    Next and previous cross lesson boundaries.
    """

    root: Path
    env_file: Path
    cwd: Path
    lesson: str | None = None
    runner: Runner = field(
        default_factory=Runner, compare=False, repr=False
    )

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        lessons = scan_lessons(self.root)
        if self.lesson is None:
            index = self._choose_lesson(ctx, lessons)
        else:
            index = self._find_lesson(lessons, self.lesson)

        position = None
        while True:
            lesson = lessons[index]
            subfolders = lesson.subfolders()
            if not subfolders:
                raise LessonEntrypointNotFound(
                    lesson.number,
                    f"No subfolders found for lesson {lesson.number}",
                )

            if position is None or position.lesson != index:
                position = Position(
                    index, self._choose_subfolder(ctx, subfolders)
                )
            subfolder = subfolders[position.subfolder]

            succeeded = self._run_entry(ctx, lesson, subfolder)

            following = self._next(lessons, position)
            preceding = self._previous(lessons, position)
            choices = self._choices(
                lessons, lesson, succeeded, following, preceding
            )
            choice = ctx.prompts.select(
                self._outcome_message(lesson, succeeded), choices
            )

            if choice == NEXT:
                position = following
            elif choice == PREVIOUS:
                position = preceding
            elif choice == CHOOSE:
                position = None
                index = self._choose_lesson(ctx, lessons)
                continue
            elif choice == FINISH:
                return WorkflowResult.completed("Finished exercises")
            index = position.lesson

    def _find_lesson(self, lessons: list[Lesson], number: str) -> int:
        """Index of the first lesson numbered ``number``."""
        try:
            wanted = float(number)
        except ValueError:
            raise LessonNotFound(number, str(self.root)) from None
        for index, lesson in enumerate(lessons):
            if lesson.num == wanted:
                return index
        raise LessonNotFound(number, str(self.root))

    def _choose_lesson(self, ctx: WorkflowContext, lessons) -> int:
        if not lessons:
            raise LessonNotFound("any", str(self.root))
        choices = [
            Choice(
                value=str(index),
                title=f"{lesson.number}-{lesson.name}",
            )
            for index, lesson in enumerate(lessons)
        ]
        answer = ctx.prompts.autocomplete(
            "Which exercise do you want to run? (type to search)",
            choices,
            lesson_choice_filter,
        )
        return int(answer)

    def _choose_subfolder(self, ctx: WorkflowContext, subfolders) -> int:
        if len(subfolders) == 1:
            return 0
        choices = [
            Choice(value=str(index), title=name)
            for index, name in enumerate(subfolders)
        ]
        return int(ctx.prompts.select("Select a subfolder", choices))

    def _next(self, lessons, position: Position) -> Position | None:
        count = len(lessons[position.lesson].subfolders())
        if position.subfolder + 1 < count:
            return Position(position.lesson, position.subfolder + 1)
        if position.lesson + 1 < len(lessons):
            return Position(position.lesson + 1, 0)
        return None

    def _previous(self, lessons, position: Position) -> Position | None:
        if position.subfolder > 0:
            return Position(position.lesson, position.subfolder - 1)
        if position.lesson > 0:
            earlier = lessons[position.lesson - 1].subfolders()
            return Position(position.lesson - 1, max(len(earlier) - 1, 0))
        return None

    def _run_entry(
        self, ctx: WorkflowContext, lesson: Lesson, subfolder: str
    ) -> bool:
        """Run the entry file; True when it exits 0."""
        settings = ctx.config.exercise
        runtime = ctx.state.runtime.exercise

        entry = lesson.file_in(subfolder, settings.entry_file)
        if entry is None:
            raise LessonEntrypointNotFound(
                lesson.number,
                f"{settings.entry_file} file for exercise {subfolder} "
                "not found",
            )
        readme = lesson.file_in(subfolder, settings.readme_file)

        ctx.say(f"Running {lesson.number} {subfolder}...", style="bold")
        if readme:
            self._show_readme(ctx, readme)

        runtime.lesson = lesson.number
        runtime.subfolder = subfolder
        runtime.runs += 1
        with logger.span(
            "Exercise {lesson} {subfolder}",
            lesson=lesson.number,
            subfolder=subfolder,
        ):
            result = self.runner.execute(
                [
                    *settings.command,
                    "--env-file", str(self.env_file),
                    str(entry),
                ],
                cwd=self.cwd,
                echo=True,
            )
        ctx.say()

        succeeded = result.exited == 0
        if not succeeded:
            runtime.failures += 1
        if readme and lesson.is_explainer():
            self._show_readme(ctx, readme)
        return succeeded

    def _show_readme(self, ctx: WorkflowContext, readme: Path):
        ctx.say("Instructions:")
        ctx.say(f"  {readme}\n", style="dim")

    def _outcome_message(self, lesson: Lesson, succeeded: bool) -> str:
        if lesson.is_explainer():
            if succeeded:
                return (
                    "Explainer executed! Once you've read the readme and "
                    "understand the code, you can go to the next exercise."
                )
            return "Looks like the explainer errored! Want to try again?"
        if succeeded:
            return "Exercise complete! What's next?"
        return "Looks like the exercise errored! Want to try again?"

    def _choices(
        self, lessons, lesson, succeeded, following, preceding
    ) -> list[Choice]:
        noun = "explainer" if lesson.is_explainer() else "exercise"
        verb = "Try" if succeeded else "Run"
        choices = [Choice(value=RUN_AGAIN, title=f"{verb} the {noun} again")]
        if following:
            choices.append(Choice(
                value=NEXT,
                title="Run the next exercise: "
                + self._label(lessons, following),
            ))
        if preceding:
            choices.append(Choice(
                value=PREVIOUS,
                title="Run the previous exercise: "
                + self._label(lessons, preceding),
            ))
        choices.append(Choice(value=CHOOSE, title="Choose a new exercise"))
        choices.append(Choice(value=FINISH, title="Finish"))
        return choices

    def _label(self, lessons, position: Position) -> str:
        lesson = lessons[position.lesson]
        subfolders = lesson.subfolders()
        subfolder = (
            subfolders[position.subfolder]
            if position.subfolder < len(subfolders) else ""
        )
        return f"{lesson.number}-{lesson.name} {subfolder}".rstrip()
