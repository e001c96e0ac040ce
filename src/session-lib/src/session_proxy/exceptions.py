"""
session_proxy.exceptions — Failure types raised before the upstream call.

Upstream and transport failures are not exceptions: they come back from
ChatKitSessionClient as UpstreamError / TransportError results.
"""


class MethodNotAllowed(Exception):
    """Raised when the inbound request is not a POST.

    Attributes:
        method: The HTTP method the caller used (upper-cased, may be empty).
    """

    def __init__(self, *, method: str) -> None:
        self.method = method
        super().__init__(f"Method {method or '<none>'!r} not allowed; use POST")


class ConfigurationError(Exception):
    """
    Raised when required proxy configuration is missing or unusable.

    Never carries secret values — only the names of the variables at fault,
    so the message is safe to log.

    Attributes:
        variables: Environment variable names that are missing or invalid.
        secret_id: Secrets Manager id that failed to resolve, if any.
    """

    def __init__(self, *, variables: tuple[str, ...], secret_id: str | None = None) -> None:
        self.variables = variables
        self.secret_id = secret_id
        detail = ", ".join(variables)
        if secret_id:
            detail = f"{detail} (secret {secret_id!r} could not be resolved)"
        super().__init__(f"Missing or invalid configuration: {detail}")
