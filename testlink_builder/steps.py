"""Build steps run around the test case iteration."""

import logging
from abc import ABC, abstractmethod

import requests

from .helper import expand_variable

logger = logging.getLogger(__name__)


class BuildStep(ABC):

    @abstractmethod
    def perform(self, build, launcher, listener):
        """Runs the step. Returns True on success."""


class ShellBuildStep(BuildStep):
    """Runs a shell command in the build workspace."""

    def __init__(self, command):
        self.command = command

    def perform(self, build, launcher, listener):
        build.workspace.mkdir(parents=True, exist_ok=True)
        exit_code = launcher.launch(self.command, build.get_environment(), build.workspace, listener)
        if exit_code != 0:
            listener.warning(f"Command exited with code {exit_code}: {self.command}")
        return exit_code == 0

    def __repr__(self):
        return f"ShellBuildStep({self.command!r})"


class HttpBuildStep(BuildStep):
    """Calls an HTTP endpoint, e.g. to trigger a remote test runner."""

    def __init__(self, url, method="GET", expected_status=200, timeout=30, body=None):
        self.url = url
        self.method = method.upper()
        self.expected_status = expected_status
        self.timeout = timeout
        self.body = body

    def perform(self, build, launcher, listener):
        env = build.get_environment()
        url = expand_variable(self.url, env)
        data = expand_variable(self.body, env) if self.body else None
        listener.info(f"{self.method} {url}")
        try:
            response = requests.request(self.method, url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            listener.error(f"HTTP step failed: {e}")
            return False
        if response.status_code != self.expected_status:
            listener.warning(
                f"Unexpected status {response.status_code} from {url} "
                f"(expected {self.expected_status})"
            )
            return False
        return True

    def __repr__(self):
        return f"HttpBuildStep({self.method} {self.url!r})"


def build_step_from_dict(data):
    step_type = data.get("type", "shell")
    if step_type == "shell":
        return ShellBuildStep(data["command"])
    if step_type == "http":
        return HttpBuildStep(
            data["url"],
            method=data.get("method", "GET"),
            expected_status=data.get("expected_status", 200),
            timeout=data.get("timeout", 30),
            body=data.get("body"),
        )
    raise ValueError(f"Unknown build step type: {step_type}")
