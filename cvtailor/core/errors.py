"""Exception hierarchy for generation, sessions and document validation."""


class CVTailorError(Exception):
    """Base class for all cvtailor errors."""


# =============================================================================
# Generation service failures
# =============================================================================


class GenerationError(CVTailorError):
    """Base class for failures on the generation-service side.

    Stages that own a static fallback catch this class and degrade instead
    of propagating.
    """


class MissingCredential(GenerationError):
    """Raised when the selected provider has no usable API key configured.

    This is a configuration problem and is never retried.
    """

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Missing API key for provider '{provider}'. "
            "Configure it at runtime or set the provider's environment variable."
        )


class GenerationUnavailable(GenerationError):
    """Raised when every attempt across every provider has failed.

    Attributes:
        attempts: Number of attempts made
        providers: Providers tried, in order
        last_error: The last recorded failure
    """

    def __init__(
        self,
        attempts: int,
        providers: list[str] | None = None,
        last_error: BaseException | None = None,
    ):
        self.attempts = attempts
        self.providers = providers or []
        self.last_error = last_error
        detail = str(last_error) if last_error else "Unknown error"
        super().__init__(f"Generation call failed after {attempts} attempts: {detail}")


class MalformedGenerationOutput(GenerationError):
    """Raised when generated text holds no valid structured payload.

    Attributes:
        message: Error description
        raw_text: The offending generated text, kept for diagnostics
    """

    def __init__(self, message: str, raw_text: str | None = None):
        self.message = message
        self.raw_text = raw_text

        parts = [message]
        if raw_text:
            snippet = raw_text[:200] + "..." if len(raw_text) > 200 else raw_text
            parts.append(f"\nRaw output:\n{snippet}")

        super().__init__("\n".join(parts))


# =============================================================================
# Assessment session protocol violations
# =============================================================================


class SessionError(CVTailorError):
    """Base class for session protocol violations. Never retried."""


class NoActiveSession(SessionError):
    """Raised when no session exists for the id, or it has already finished."""


class QuestionMismatch(SessionError):
    """Raised when an answer targets a question other than the current one."""

    def __init__(self, expected_id: str, received_id: str):
        self.expected_id = expected_id
        self.received_id = received_id
        super().__init__(
            f"Question ID mismatch: expected '{expected_id}', received '{received_id}'"
        )


class SessionNotFinished(SessionError):
    """Raised when results are requested before the last answer is in."""


# =============================================================================
# Output and configuration
# =============================================================================


class InvalidOutputDocument(CVTailorError):
    """Raised when a tailored document lost its required envelope markers."""

    def __init__(self, missing_markers: list[str]):
        self.missing_markers = missing_markers
        super().__init__(
            "Generated CV is not valid LaTeX; missing: " + ", ".join(missing_markers)
        )


class UnknownProvider(CVTailorError, ValueError):
    """Raised when configuring or selecting a provider that is not supported."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider '{provider}' not supported")
