class IPNError(Exception):
    pass


class TransportError(IPNError):
    """The verification endpoint could not be reached or answered with an error status."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"IPN verification request to {uri} failed: {reason}")


class InvalidResponseException(IPNError):
    """PayPal answered INVALID: the notification did not originate from PayPal."""

    def __init__(self, response: str):
        self.response = response
        super().__init__(f"IPN verification returned {response!r}")


class UnexpectedResponseError(IPNError):
    def __init__(self, response: str):
        self.response = response
        super().__init__(f"IPN verification returned unexpected body {response!r}")
