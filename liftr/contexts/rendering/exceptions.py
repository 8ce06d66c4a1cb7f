"""Custom exceptions for the rendering context."""

from pathlib import Path
from typing import Iterable, Optional


class LiftrError(Exception):
    """Base class for every error raised while rendering in a container."""

    pass


# Precondition failures: raised before any command is built or process spawned


class PreconditionError(LiftrError):
    """A render request cannot be run as given."""

    pass


class InputMissingError(PreconditionError):
    """Exception raised when no input document was supplied."""

    def __init__(self, message: str = "Missing input file"):
        self.message = message
        super().__init__(message)


class InputNotFoundError(PreconditionError):
    """
    Exception raised when the input document does not exist.

    Attributes:
        path: The path that was looked up
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Input file does not exist: {self.path}")


class MissingBuildDescriptorError(PreconditionError):
    """
    Exception raised when no Dockerfile sits next to the input document.

    Attributes:
        descriptor_path: Where the Dockerfile was expected
    """

    def __init__(self, descriptor_path: Path):
        self.descriptor_path = Path(descriptor_path)
        super().__init__(
            f"Cannot find Dockerfile in the same directory as the input file: "
            f"{self.descriptor_path}\n"
            "Please dockerize the R Markdown document first."
        )


class EngineNotFoundError(PreconditionError):
    """
    Exception raised when the container engine is not on the search path.

    Attributes:
        engine: Executable name that could not be resolved
    """

    def __init__(self, engine: str):
        self.engine = engine
        super().__init__(
            f"Cannot find `{engine}` on system search path, "
            f"please ensure `{engine}` can be used from the shell"
        )


# Argument contract violations


class RenderArgumentError(LiftrError, ValueError):
    """Pass-through render options violate the calling contract."""

    pass


class DuplicateInputError(RenderArgumentError):
    """Exception raised when `input` is passed as a render option."""

    def __init__(self):
        super().__init__("`input` can only be specified once")


class UnsupportedOptionError(RenderArgumentError):
    """
    Exception raised when a reserved render option is supplied.

    Attributes:
        options: The offending option names, in the order they were given
    """

    def __init__(self, options: Iterable[str]):
        self.options = list(options)
        names = ", ".join(f"`{name}`" for name in self.options)
        super().__init__(f"Render options not supported in containerized rendering: {names}")


class UnsupportedValueError(RenderArgumentError):
    """
    Exception raised when a render option value cannot be written as an R literal.

    Attributes:
        value: The value that could not be serialized
        reason: Why it was rejected
    """

    def __init__(self, value: object, reason: Optional[str] = None):
        self.value = value
        self.reason = reason

        parts = [f"Cannot serialize value of type {type(value).__name__}: {value!r}"]
        if reason:
            parts.append(f"Reason: {reason}")

        super().__init__("\n".join(parts))


# Post-spawn failures


class InvocationError(LiftrError):
    """
    A container engine command exited with a nonzero status.

    Attributes:
        command: The shell command that was run
        exit_code: Its exit status
    """

    stage = "command"

    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.exit_code = exit_code
        super().__init__(
            f"Container {self.stage} failed with exit code {exit_code}\nCommand: {command}"
        )


class BuildFailedError(InvocationError):
    """Exception raised when the image build command fails."""

    stage = "build"


class RunFailedError(InvocationError):
    """Exception raised when the render run command fails."""

    stage = "run"
