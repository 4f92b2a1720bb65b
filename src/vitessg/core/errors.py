"""Error taxonomy for pipeline runs.

Every failure a run can hit is an SsgError. InputValidationError is the only
one caused by the caller; everything else is fatal for the run.
"""


class SsgError(Exception):
    """Base class for pipeline errors."""


class InputValidationError(SsgError):
    """Request is missing a required field or carries an invalid value."""


class CheckoutError(SsgError):
    """Repository could not be cloned."""


class BuildError(SsgError):
    """Dependency install or build step failed."""


class ServerStartError(SsgError):
    """Preview server could not be started or never became ready."""


class RenderFailure(SsgError):
    """Headless browser could not render a route."""

    def __init__(self, route: str, cause: BaseException | str) -> None:
        self.route = route
        self.cause = cause
        super().__init__(f"Failed to render route {route}: {cause}")


class MaterializationError(SsgError):
    """Build output could not be copied into the bundle."""


class FormattingError(SsgError):
    """Rendered document could not be formatted."""
