"""Lesson folder tree: ``root/NN-section/NN-lesson/<subfolder>``."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

from coursegit.core.errors import InvalidLessonPath, LessonNumberInvalid
from coursegit.core.log import logger

_NUMBER = re.compile(r"^\d+(\.\d+)?$")


class Lesson(BaseModel):
    """A numbered lesson folder inside a numbered section folder.

    Numbers may be fractional (``01.03-intro`` is lesson 1.03), which is
    how ``renumber_lessons`` names lessons.
    """

    num: float
    name: str
    path: str
    section_num: float
    section_name: str
    section_path: str
    root: Path

    @property
    def number(self) -> str:
        """The number as written in the folder name."""
        return self.path.partition("-")[0]

    @property
    def section_number(self) -> str:
        return self.section_path.partition("-")[0]

    def absolute_path(self) -> Path:
        return (self.root / self.section_path / self.path).resolve()

    def subfolders(self) -> list[str]:
        """Names of the immediate child directories, sorted."""
        return sorted(
            child.name
            for child in self.absolute_path().iterdir()
            if child.is_dir()
        )

    def is_explainer(self) -> bool:
        return any("explainer" in folder for folder in self.subfolders())

    def file_in(self, subfolder: str, name: str) -> Path | None:
        """``<lesson>/<subfolder>/<name>`` if that file exists."""
        candidate = self.absolute_path() / subfolder / name
        return candidate if candidate.is_file() else None


def parse_folder_name(folder: str) -> tuple[float, str]:
    """Split ``<number>-<name>`` into its number and name.

    Raises:
        LessonNumberInvalid: The part before the first dash is not a number
        InvalidLessonPath: There is no name after the dash
    """
    num_section, _, name = folder.partition("-")
    if not _NUMBER.match(num_section):
        raise LessonNumberInvalid(folder, num_section)

    if not name:
        raise InvalidLessonPath(
            folder, f"Could not retrieve name from path: {folder}"
        )
    return float(num_section), name


def _directories(path: Path) -> list[Path]:
    return [
        child for child in path.iterdir()
        if child.is_dir() and not child.name.startswith(".")
    ]


def scan_lessons(root: Path) -> list[Lesson]:
    """Collect every lesson under ``root``.

    Returns:
        Lessons ordered by section number, then lesson number
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise InvalidLessonPath(
            str(root), f"Lesson folder does not exist: {root}"
        )
    lessons = []

    for section_dir in _directories(root):
        section_num, section_name = parse_folder_name(section_dir.name)

        for lesson_dir in _directories(section_dir):
            num, name = parse_folder_name(lesson_dir.name)
            lessons.append(Lesson(
                num=num,
                name=name,
                path=lesson_dir.name,
                section_num=section_num,
                section_name=section_name,
                section_path=section_dir.name,
                root=root,
            ))

    lessons.sort(key=lambda lesson: (lesson.section_num, lesson.num))
    logger.debug(
        "Found {count} lessons under {root}",
        count=len(lessons),
        root=str(root),
    )
    return lessons


def renumber_lessons(root: Path) -> int:
    """Rename lesson folders to ``<section>.<NN>-<name>``, counting from
    01 within each section in lesson order.

    Returns:
        Number of folders renamed
    """
    renamed = 0
    sections: dict[str, list[Lesson]] = {}
    for lesson in scan_lessons(root):
        sections.setdefault(lesson.section_path, []).append(lesson)

    for section_path in sorted(sections):
        for index, lesson in enumerate(sections[section_path], start=1):
            section = f"{int(lesson.section_num):02d}"
            new_name = f"{section}.{index:02d}-{lesson.name}"
            if new_name == lesson.path:
                continue

            source = lesson.absolute_path()
            target = source.with_name(new_name)
            if target.exists():
                raise InvalidLessonPath(
                    str(target), f"Cannot rename {source.name}: {new_name} "
                    "already exists"
                )
            source.rename(target)
            logger.info(
                "Renamed {source} to {target}",
                source=lesson.path,
                target=new_name,
            )
            renamed += 1
    return renamed
