"""Exceptions raised by the document build."""


class ScstgError(Exception):
    """Base class for all build failures."""


class SourceError(ScstgError):
    """The source folder or its metadata cannot be used."""


class PandocError(ScstgError):
    """A Pandoc invocation failed.

    Attributes:
        command: The full command line that was run.
        returncode: Exit status of the tool (127 when it could not be started).
        stderr: The tool's diagnostic output.
    """

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"{command[0] if command else 'pandoc'} exited with status {returncode}"
        )
