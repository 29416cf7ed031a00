"""Error taxonomy shared by the generation client, formatter, store and pipeline."""

from __future__ import annotations

from enum import Enum


class DraftwireError(Exception):
    """Base class for every error a pipeline stage can fail with."""

    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(DraftwireError):
    """Invalid credential or out-of-range generation parameter."""

    kind = "configuration"

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid generation configuration: " + "; ".join(self.problems))


class GenerationErrorKind(str, Enum):
    TRANSPORT = "transport"
    SERVICE = "service"
    UNEXPECTED_RESPONSE_SHAPE = "unexpected_response_shape"
    EMPTY_CONTENT = "empty_content"


class GenerationError(DraftwireError):
    """Transport, service or response-parsing failure from the generation service."""

    def __init__(
        self,
        kind: GenerationErrorKind,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_kind = kind
        self.status_code = status_code

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.error_kind.value


class FormattingError(DraftwireError):
    """Malformed generated document or markup conversion failure."""

    kind = "formatting"


class NoTitleFound(FormattingError):
    """Generated document has no level-1 heading to use as a title."""

    kind = "no_title_found"


class StoreError(DraftwireError):
    """Document store rejected a read or write."""

    kind = "store"
