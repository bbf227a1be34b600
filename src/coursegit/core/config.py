"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    CliSuppress,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from coursegit.core.base import BaseConfig, BaseState
from coursegit.core.log import Logger
from coursegit.core.yaml_settings import YamlWithIncludesSettingsSource

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class GitConfig(BaseConfig):
    """Branch names and remotes of the course repository."""

    main_branch: str = Field(
        default="main",
        description=(
            "Protected base branch; never reset or cherry-picked onto"
        ),
    )
    target_branch: str = Field(
        default="live-run-through",
        description=(
            "Branch holding the lesson commits (default for --branch)"
        ),
    )
    origin_remote: str = Field(
        default="origin",
        description="Remote used by edit-commit and rebase-to-main pushes",
    )
    upstream_remote: str = Field(
        default="upstream",
        description=(
            "Preferred remote name when several remotes match "
            "upstream_orgs"
        ),
    )
    upstream_orgs: list[str] = Field(
        default_factory=lambda: [
            "mattpocock", "ai-hero-dev", "total-typescript"
        ],
        description=(
            "Organizations whose repositories count as the course "
            "upstream"
        ),
    )


class ExerciseConfig(BaseConfig):
    """Where exercises live and how their entry files are run."""

    root: Path = Field(
        default=Path("exercises"),
        description="Folder holding the numbered section folders",
    )
    env_file: Path = Field(
        default=Path(".env"),
        description="Environment file passed to every exercise run",
    )
    entry_file: str = Field(
        default="main.ts",
        description="Entry file run inside an exercise subfolder",
    )
    readme_file: str = Field(
        default="readme.md",
        description="Instructions file shown before an exercise runs",
    )
    command: list[str] = Field(
        default_factory=lambda: ["pnpm", "tsx"],
        description=(
            "Command that runs an entry file; --env-file ENV and the "
            "entry file are appended"
        ),
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Course repository branch and remote settings"
    )
    exercise: ExerciseConfig = Field(
        default_factory=ExerciseConfig,
        description="Exercise runner settings",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("coursegit"))
        ),
        description="Directory for log files",
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger singleton after config loads."""
        from coursegit.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )

        from coursegit.core.yaml_settings import close_bootstrap_logger
        close_bootstrap_logger()

        return self

    def close(self):
        """Close config and the global logger singleton."""
        from coursegit.core.log import logger
        if logger is not None:
            logger.close()

        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================

class ResetState(BaseState):
    """Reset workflow progress."""

    lesson_id: str | None = Field(
        default=None, description="Resolved canonical lesson id"
    )
    commit: str | None = Field(
        default=None, description="Commit the branch was moved to"
    )
    action: str | None = Field(
        default=None,
        description="reset-current or create-branch",
    )
    status: str = Field(
        default="pending",
        description="Reset status: pending, running, complete",
    )


class EditCommitState(BaseState):
    """Edit-commit workflow progress."""

    working_branch: str | None = Field(
        default=None, description="Branch the edit session runs on"
    )
    target_sha: str | None = Field(
        default=None, description="Short hash of the edited commit"
    )
    following_commits: int = Field(
        default=0, description="Commits replayed after the edited one"
    )
    conflict_rounds: int = Field(
        default=0,
        description="Number of times the conflict prompt was shown",
    )
    status: str = Field(
        default="pending",
        description=(
            "pending, editing, committed, replayed, saved, pushed, "
            "aborted"
        ),
    )


class WalkThroughState(BaseState):
    """Walk-through workflow progress."""

    commits_total: int = Field(default=0)
    commits_applied: int = Field(default=0)
    status: str = Field(
        default="pending",
        description="pending, running, completed, cancelled",
    )


class ExerciseState(BaseState):
    """Exercise runner progress."""

    lesson: str | None = Field(
        default=None, description="Number of the lesson last run"
    )
    subfolder: str | None = Field(
        default=None, description="Subfolder of the exercise last run"
    )
    runs: int = Field(default=0, description="Entry files run so far")
    failures: int = Field(
        default=0, description="Runs that exited with a nonzero status"
    )


class Runtime(BaseModel):
    """All runtime state organized by workflow."""

    reset: ResetState = Field(default_factory=ResetState)
    edit_commit: EditCommitState = Field(default_factory=EditCommitState)
    walk_through: WalkThroughState = Field(
        default_factory=WalkThroughState
    )
    exercise: ExerciseState = Field(default_factory=ExerciseState)


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Complete application state - configuration and runtime.

    This is the object that flows through every workflow:
    - config: loaded from YAML/env/CLI
    - runtime: progress records updated as a workflow advances
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: CliSuppress[Runtime] = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="coursegit.yaml",
        env_file=".env",
        env_prefix="COURSEGIT_",
        env_nested_delimiter="__",
        cli_prog_name="coursegit",
        cli_implicit_flags=True,
        cli_kebab_case=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        # Disregard .env variables that don't match config
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority.

        Priority order (highest to lowest):
        1. init_settings (direct instantiation arguments)
        2. YAML files with include support
        3. .env file
        4. Environment variables
        5. File secrets
        """
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )
