"""Command execution using the invoke library."""

import shlex
from pathlib import Path

from invoke import Context, Result

from coursegit.core.log import logger


class Runner(Context):
    """Wrapper around invoke.Context with a single execute() entry.

    Commands are passed as argv lists and quoted with shlex before
    invoke runs them, so branch names and commit messages are never
    interpreted by the shell.
    """

    def execute(
        self,
        argv: list[str],
        cwd: Path | None = None,
        echo: bool = False,
        check: bool = False,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Execute a command and return its result.

        Args:
            argv: Command and arguments
            cwd: Working directory for the command
            echo: Stream stdout/stderr to the terminal while capturing
            check: If True, raise invoke.UnexpectedExit on nonzero exit
            env: Extra environment variables (merged into os.environ)

        Returns:
            invoke.Result with stdout, stderr and exited (return code)
        """
        command = ' '.join(shlex.quote(str(part)) for part in argv)

        kwargs = {
            "hide": not echo,
            "warn": not check,
            "in_stream": False,
        }
        if env:
            kwargs["env"] = env

        logger.debug(
            "Running {command}",
            command=command,
            cwd=str(cwd) if cwd else None,
        )

        if cwd:
            with self.cd(str(cwd)):
                result = self.run(command, **kwargs)
        else:
            result = self.run(command, **kwargs)

        logger.debug(
            "{command} exited with {exit_code}",
            command=command,
            exit_code=result.exited,
        )
        if result.exited != 0 and result.stderr:
            logger.debug("stderr: {stderr}", stderr=result.stderr.strip())

        return result
