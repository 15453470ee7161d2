"""
Connector Errors

Failures raised by the SSH session engine. Each error derives from the
builtin exception callers already handle (ConnectionError / TimeoutError),
so code that is unaware of the connector can still catch them.
"""


class ConnectorError(Exception):
    """Base class for all session engine failures"""


class TransportError(ConnectorError, ConnectionError):
    """Dial, authentication, negotiation or write failure"""


class PromptTimeoutError(ConnectorError, TimeoutError):
    """Shell produced no output within the timeout after it was opened"""


class CommandTimeoutError(ConnectorError, TimeoutError):
    """Completion marker was not seen before the transaction deadline"""


class StreamClosedError(ConnectorError, ConnectionError):
    """Shell output stream has ended; the session is dead"""
