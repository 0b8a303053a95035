"""
Error taxonomy for the chat flow.

Every error carries the HTTP status it maps to and a client-safe message.
Upstream detail stays in the exception (and the server log), never in the
response body.
"""


class ChatError(Exception):
    status_code = 500
    public_message = "Failed to process chat request"


class MissingInputError(ChatError):
    status_code = 400
    public_message = "Message is required"


class UnconfiguredError(ChatError):
    public_message = "Language model API key not configured"


class UpstreamError(ChatError):
    """The search engine or the language model call failed."""

    def __init__(self, source: str, detail: str):
        super().__init__(f"{source}: {detail}")
        self.source = source
        self.detail = detail


class UpstreamTimeoutError(UpstreamError):
    pass
