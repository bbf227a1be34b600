"""Lessons command - print the section/lesson folder tree."""

from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from coursegit.command.base import dispatch
from coursegit.core.result import WorkflowResult
from coursegit.lessons.tree import renumber_lessons, scan_lessons


class LessonsCommand(BaseModel):
    """List the numbered sections and lessons under a course folder."""

    root: Path | None = Field(
        default=None,
        description=(
            "Folder holding the sections (default: config.exercise.root)"
        ),
    )

    def run_workflow(self, state, console: Console | None = None) -> int:
        console = console or Console()
        root = (self.root or state.config.exercise.root).resolve()
        return dispatch(lambda: self.show(root, console), console=console)

    def show(self, root: Path, console: Console) -> WorkflowResult:
        lessons = scan_lessons(root)

        tree = Tree(escape(str(root)))
        sections = {}
        for lesson in lessons:
            section = sections.get(lesson.section_path)
            if section is None:
                section = tree.add(
                    f"[bold]{escape(lesson.section_number)}[/bold] "
                    f"{escape(lesson.section_name)}"
                )
                sections[lesson.section_path] = section

            label = f"{escape(lesson.number)} {escape(lesson.name)}"
            subfolders = lesson.subfolders()
            if subfolders:
                label += f" [dim]({escape(', '.join(subfolders))})[/dim]"
            if lesson.is_explainer():
                label += " [cyan]explainer[/cyan]"
            section.add(label)

        console.print(tree)
        return WorkflowResult.completed(
            f"{len(lessons)} lessons in {len(sections)} sections"
        )


class RenameCommand(BaseModel):
    """Renumber lesson folders as <section>.<NN>-<name>, counting from
    01 within each section."""

    root: Path | None = Field(
        default=None,
        description=(
            "Folder holding the sections (default: config.exercise.root)"
        ),
    )

    def run_workflow(self, state, console: Console | None = None) -> int:
        console = console or Console()
        root = (self.root or state.config.exercise.root).resolve()

        def run() -> WorkflowResult:
            renamed = renumber_lessons(root)
            console.print(f"Renamed {renamed} lessons", markup=False)
            return WorkflowResult.completed(f"Renamed {renamed} lessons")

        return dispatch(run, console=console)
