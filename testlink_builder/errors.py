class TestLinkBuilderError(Exception):
    """Base class for every error raised by the TestLink build step."""


class AbortBuildError(TestLinkBuilderError):
    """Stops the build step. The message is short and shown to the user."""


class InvalidInstallationError(TestLinkBuilderError):
    pass


class InvalidURLError(TestLinkBuilderError):
    def __init__(self, url):
        super().__init__(f"Invalid TestLink URL: {url}")
        self.url = url


class ResultSeekerError(TestLinkBuilderError):
    pass
