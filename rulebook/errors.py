class RulebookError(Exception):
    """Base class for everything the runtime raises on purpose."""


class ConfigurationError(RulebookError):
    """
    A game definition is internally inconsistent.
    Every problem found during validation is collected in `problems`
    so an author can fix them in one pass.
    """

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class SaveFileError(RulebookError):
    """Raised by the host when a save file cannot be written or restored."""
