"""Route validation and route-to-document mapping."""

from vitessg.core.errors import InputValidationError

INDEX_DOCUMENT = "index.html"
DOCUMENT_SUFFIX = ".html"
DEFAULT_ROUTES = ("/",)


def validate_route(route: object) -> str:
    """Check that a route is an absolute application path.

    Args:
        route: Raw route value

    Returns:
        The route unchanged

    Raises:
        InputValidationError: If the route is not a string starting with "/",
            or carries "." or ".." segments, a query string or a fragment
    """
    if not isinstance(route, str) or not route.startswith("/"):
        raise InputValidationError(f"Route must be a string starting with '/': {route!r}")
    if "?" in route or "#" in route:
        raise InputValidationError(f"Route must not contain a query or fragment: {route}")
    if {".", ".."} & set(route.split("/")):
        raise InputValidationError(f"Route must not contain '.' or '..' segments: {route}")
    return route


def normalize_routes(routes: object) -> list[str]:
    """Validate a list of routes, defaulting to the root route.

    Raises:
        InputValidationError: If routes is not a list of valid routes
    """
    if routes is None:
        return list(DEFAULT_ROUTES)
    if not isinstance(routes, list):
        raise InputValidationError("routes must be a list of strings")
    if not routes:
        return list(DEFAULT_ROUTES)
    return [validate_route(route) for route in routes]


def document_name_for_route(route: str) -> str:
    """Map a route to the relative path of its output document.

    "/" maps to index.html. Other routes drop the leading and trailing
    slashes and gain an .html suffix; nested routes keep their directories
    ("/blog/post-1" -> "blog/post-1.html").
    """
    stripped = route.strip("/")
    if not stripped:
        return INDEX_DOCUMENT
    return f"{stripped}{DOCUMENT_SUFFIX}"
