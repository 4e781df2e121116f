"""Custom exception hierarchy for crossword filling."""


class CrosswordError(Exception):
    """Base exception for filler failures."""


class MalformedInputError(CrosswordError, ValueError):
    """Raised when a grid, slot or constraint breaks a precondition."""


class PatternParseError(MalformedInputError):
    """Raised when a grid pattern text cannot be turned into a grid."""


class WordListError(MalformedInputError):
    """Raised when a word-list file cannot be read."""


class SolverUnavailableError(CrosswordError):
    """Raised when the declarative evaluator cannot be used for a solve."""


class SearchBudgetExceeded(CrosswordError):
    """Raised when the native search runs out of nodes or wall-clock time.

    This is an inconclusive outcome and must never be reported as
    "no solution".
    """

    def __init__(self, message: str, nodes: int = 0) -> None:
        super().__init__(message)
        self.nodes = nodes


class ValidationError(CrosswordError):
    """Raised when a produced assignment violates a crossword invariant."""


class ProjectionError(CrosswordError):
    """Raised when an assignment cannot be written back onto the grid."""
