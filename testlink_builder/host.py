"""
Minimal build host: the build context, the process launcher and the build log.
"""

import logging
import os
import subprocess
import sys
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

# one logger shared by every build, each build log handler filters its own records
build_logger = logging.getLogger(f"{__name__}.build")
build_logger.setLevel(logging.INFO)

BUILD_LOG_NAME = "testlink-build.log"


class Result(Enum):
    """Build results, from best to worst."""
    SUCCESS = 0
    UNSTABLE = 1
    FAILURE = 2
    ABORTED = 3

    def is_worse_than(self, other):
        return self.value > other.value


class Build:
    """A single execution of a job."""

    def __init__(self, job_name, number, workspace, environment=None):
        self.job_name = job_name
        self.number = number
        self.workspace = Path(workspace)
        self.environment = dict(environment if environment is not None else os.environ)
        self.result = Result.SUCCESS
        self.env_contributors = []
        self.actions = []

    def set_result(self, result):
        # A result can only get worse during a build
        if result.is_worse_than(self.result):
            self.result = result

    def add_environment_contributor(self, variables):
        self.env_contributors.append(dict(variables))

    def add_action(self, action):
        self.actions.append(action)

    def get_environment(self):
        env = dict(self.environment)
        env["JOB_NAME"] = self.job_name
        env["BUILD_NUMBER"] = str(self.number)
        env["WORKSPACE"] = str(self.workspace)
        for variables in self.env_contributors:
            env.update(variables)
        return env


class _SameBuildFilter(logging.Filter):
    """Keeps the records logged for one build."""

    def __init__(self, build_id):
        super().__init__()
        self.build_id = build_id

    def filter(self, record):
        return getattr(record, "build", None) == self.build_id


class BuildListener:
    """Build log. Everything goes to the build logger and to the build log file."""

    def __init__(self, build, log_file=None):
        build_id = f"{build.job_name}#{build.number}"
        self.logger = logging.LoggerAdapter(build_logger, {"build": build_id})
        self.handler = None
        if log_file is None:
            log_file = build.workspace / BUILD_LOG_NAME
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            self.handler = logging.FileHandler(log_file, encoding="utf-8")
            self.handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
            self.handler.addFilter(_SameBuildFilter(build_id))
            build_logger.addHandler(self.handler)

    def info(self, message):
        self.logger.info(message)

    def warning(self, message):
        self.logger.warning(message)

    def error(self, message):
        self.logger.error(message)

    def fatal_error(self, message):
        self.logger.critical(message, exc_info=sys.exc_info()[0] is not None)

    def close(self):
        if self.handler is not None:
            build_logger.removeHandler(self.handler)
            self.handler.close()
            self.handler = None


class Launcher:
    """Runs processes for build steps."""

    def launch(self, command, env, cwd, listener):
        listener.info(f"$ {command}")
        try:
            process = subprocess.run(
                command,
                shell=True,
                cwd=str(cwd),
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            listener.error(f"Failed to launch command: {e}")
            return -1
        for line in process.stdout.splitlines():
            listener.info(line)
        return process.returncode
