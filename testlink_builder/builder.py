"""
TestLink build step.

Creates a build in TestLink, runs the configured build steps once per
automated test case (in the TestLink execution order), then lets the
result seekers update TestLink with the status of each test case.
"""

import functools
import logging

from testlink.testlinkerrors import TestLinkError

from .config import BUILD_NOTES, get_installation
from .errors import AbortBuildError, InvalidInstallationError, InvalidURLError, ResultSeekerError
from .helper import build_test_case_env_vars, expand_variable, split_custom_fields
from .host import Result
from .models import ExecutionStatus, Report, TestCaseWrapper
from .site import TestLinkSite

logger = logging.getLogger(__name__)


def transform(site, test_cases, suite_names=None):
    """
    Wraps the automated test cases, filling the name and test suite that the
    execution call does not return.

    suite_names caches the suite name per suite id: one getTestSuiteByID call
    per distinct suite, whatever the number of test cases.
    """
    if not test_cases:
        return []
    if suite_names is None:
        suite_names = {}

    wrappers = []
    for test_case in test_cases:
        full_test_case = site.get_full_test_case(test_case.full_external_id, test_case.version)

        test_suite_id = int(full_test_case.get("testsuite_id", 0))
        if test_suite_id not in suite_names:
            suite_names[test_suite_id] = site.get_test_suite_name(test_suite_id)

        test_case.test_suite_id = test_suite_id
        test_case.name = full_test_case.get("name", test_case.name)
        if not test_case.author:
            test_case.author = full_test_case.get("author_login", "") or ""
        if not test_case.summary:
            test_case.summary = full_test_case.get("summary", "") or ""

        wrappers.append(TestCaseWrapper(test_case, suite_names[test_suite_id]))
    return wrappers


def compare_execution_order(a, b):
    return (a.execution_order > b.execution_order) - (a.execution_order < b.execution_order)


execution_order_key = functools.cmp_to_key(compare_execution_order)


class TestLinkBuilder:

    def __init__(self, testlink_name, test_project_name, test_plan_name, build_name,
                 custom_fields="", single_build_steps=None,
                 before_iterating_all_test_cases_build_steps=None,
                 iterative_build_steps=None,
                 after_iterating_all_test_cases_build_steps=None,
                 transactional=False, failed_tests_mark_build_as_failure=False,
                 fail_if_no_results=False, result_seekers=None, installations=None):
        self.testlink_name = testlink_name
        self.test_project_name = test_project_name
        self.test_plan_name = test_plan_name
        self.build_name = build_name
        self.custom_fields = custom_fields
        self.single_build_steps = single_build_steps or []
        self.before_iterating_all_test_cases_build_steps = before_iterating_all_test_cases_build_steps or []
        self.iterative_build_steps = iterative_build_steps or []
        self.after_iterating_all_test_cases_build_steps = after_iterating_all_test_cases_build_steps or []
        self.transactional = transactional
        self.failed_tests_mark_build_as_failure = failed_tests_mark_build_as_failure
        self.fail_if_no_results = fail_if_no_results
        self.result_seekers = result_seekers or []
        self.installations = installations
        self.failure = False

    def get_testlink_site(self, url, devkey, project_name, plan_name, build_name, build_notes):
        return TestLinkSite.connect(url, devkey, project_name, plan_name, build_name, build_notes)

    def perform(self, build, launcher, listener):
        logger.info("TestLink builder started")
        self.failure = False

        listener.info("Preparing TestLink client API.")
        try:
            installation = get_installation(self.testlink_name, self.installations)
        except InvalidInstallationError as e:
            listener.fatal_error(str(e))
            raise AbortBuildError("Invalid TestLink installation.") from e
        if installation is None:
            listener.fatal_error(f"TestLink installation not found: {self.testlink_name}")
            raise AbortBuildError("Invalid TestLink installation.")

        listener.info(f"Using TestLink URL: {installation.url}")

        try:
            env = build.get_environment()
            project_name = expand_variable(self.test_project_name, env)
            plan_name = expand_variable(self.test_plan_name, env)
            build_name = expand_variable(self.build_name, env)
            logger.debug(f"TestLink project name: [{project_name}]")
            logger.debug(f"TestLink plan name: [{plan_name}]")
            logger.debug(f"TestLink build name: [{build_name}]")

            site = self.get_testlink_site(installation.url, installation.devkey,
                                          project_name, plan_name, build_name, BUILD_NOTES)
            custom_field_names = split_custom_fields(self.custom_fields, env)
            test_cases = site.get_automated_test_cases(custom_field_names)
            automated_test_cases = transform(site, test_cases)

            listener.info(f"Found {len(automated_test_cases)} automated test case(s).")
            listener.info("Sorting automated test cases by execution order.")
            automated_test_cases = sorted(automated_test_cases, key=execution_order_key)
        except InvalidURLError as e:
            listener.fatal_error(str(e))
            raise AbortBuildError(f"Invalid TestLink URL: {installation.url}") from e
        except TestLinkError as e:
            listener.fatal_error(str(e))
            raise AbortBuildError("There was an error communicating with TestLink.") from e

        for test_case in automated_test_cases:
            logger.debug(f"TestLink automated test case ID [{test_case.id}], name [{test_case.name}]")

        listener.info("Executing single build steps.")
        self.execute_single_build_steps(build, launcher, listener)

        listener.info("Executing iterative build steps.")
        self.execute_iterative_build_steps(automated_test_cases, site, build, launcher, listener)

        try:
            listener.info("Looking for test results.")
            for result_seeker in self.result_seekers:
                logger.info(f"Seeking test results. Using: {result_seeker.display_name}")
                result_seeker.seek(automated_test_cases, build, launcher, listener, site)
        except ResultSeekerError as e:
            listener.fatal_error(str(e))
            raise AbortBuildError(f"Error looking for test results: {e}") from e
        except TestLinkError as e:
            listener.fatal_error(str(e))
            raise AbortBuildError(f"Failed to update TestLink test plan: {e}") from e

        report = Report.from_test_cases(site.test_project, site.test_plan, site.build,
                                        automated_test_cases)
        listener.info(f"Found {report.tests_total} test result(s).")
        build.add_action(report)

        self.set_build_result(build, report, listener)

        logger.info("TestLink builder finished")
        return True

    def _run_steps(self, steps, build, launcher, listener):
        for step in steps:
            if not step.perform(build, launcher, listener):
                self.failure = True

    def execute_single_build_steps(self, build, launcher, listener):
        self._run_steps(self.single_build_steps, build, launcher, listener)

    def execute_iterative_build_steps(self, automated_test_cases, site, build, launcher, listener):
        self._run_steps(self.before_iterating_all_test_cases_build_steps, build, launcher, listener)

        for test_case in automated_test_cases:
            if self.failure and self.transactional:
                test_case.execution_status = ExecutionStatus.BLOCKED
                listener.info(f"Test case {test_case.full_external_id} blocked by a previous failure.")
                continue
            if self.iterative_build_steps:
                env_vars = build_test_case_env_vars(test_case, site.test_project,
                                                    site.test_plan, site.build)
                build.add_environment_contributor(env_vars)
                self._run_steps(self.iterative_build_steps, build, launcher, listener)

        self._run_steps(self.after_iterating_all_test_cases_build_steps, build, launcher, listener)

    def set_build_result(self, build, report, listener):
        if report.tests_total <= 0 and self.fail_if_no_results:
            listener.info("No test results found. Setting the build result as FAILURE.")
            build.set_result(Result.FAILURE)
        elif report.failed > 0:
            if self.failed_tests_mark_build_as_failure:
                build.set_result(Result.FAILURE)
            else:
                build.set_result(Result.UNSTABLE)
