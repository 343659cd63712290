"""Registry proxy exceptions."""


class RegistryProxyError(Exception):
    """Base exception for registry proxy failures."""


class MalformedChallenge(RegistryProxyError):
    """WWW-Authenticate header did not carry a realm and a service.

    The original header text is kept on ``header`` so callers can report it.
    """

    def __init__(self, header: str):
        self.header = header
        super().__init__(f"invalid Www-Authenticate Header: {header}")
