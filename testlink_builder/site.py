"""
TestLink site: the connected API client plus the project, plan and build of the run.
"""

import logging
from urllib.parse import urlparse

from testlink import TestlinkAPIClient

from .errors import InvalidURLError
from .models import (
    CustomField,
    ExecutionStatus,
    ExecutionType,
    TestCase,
    TestLinkBuild,
    TestPlan,
    TestProject,
)

logger = logging.getLogger(__name__)


def _first(response):
    # The XML-RPC API returns either a dict or a list holding one dict
    if isinstance(response, list):
        return response[0] if response else {}
    return response or {}


def validate_url(url):
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(url)
    return url


class TestLinkSite:

    def __init__(self, api, test_project, test_plan, build):
        self.api = api
        self.test_project = test_project
        self.test_plan = test_plan
        self.build = build

    @classmethod
    def connect(cls, url, devkey, project_name, plan_name, build_name, build_notes="",
                client_class=TestlinkAPIClient):
        """Connects to TestLink, fetches the project and the plan, then creates the build."""
        validate_url(url)
        api = client_class(url, devkey)

        project_info = _first(api.getTestProjectByName(project_name))
        test_project = TestProject(
            id=int(project_info["id"]),
            name=project_info.get("name", project_name),
            prefix=project_info.get("prefix", ""),
            notes=project_info.get("notes", "") or "",
        )
        logger.debug(f"TestLink project: {test_project}")

        plan_info = _first(api.getTestPlanByName(project_name, plan_name))
        test_plan = TestPlan(
            id=int(plan_info["id"]),
            name=plan_info.get("name", plan_name),
            project_name=project_name,
            notes=plan_info.get("notes", "") or "",
        )
        logger.debug(f"TestLink plan: {test_plan}")

        build_info = _first(api.createBuild(test_plan.id, build_name, buildnotes=build_notes))
        build = TestLinkBuild(id=int(build_info["id"]), name=build_name, notes=build_notes)
        logger.debug(f"TestLink build: {build}")

        return cls(api, test_project, test_plan, build)

    def get_automated_test_cases(self, custom_field_names=None):
        """Automated test cases of the plan, with the requested custom field values."""
        response = self.api.getTestCasesForTestPlan(
            self.test_plan.id,
            executiontype=ExecutionType.AUTOMATED.value,
            details="full",
        )
        test_cases = []
        for row in self._execution_rows(response):
            test_case = TestCase.from_execution(row)
            if not test_case.test_project_id:
                test_case.test_project_id = self.test_project.id
            for name in custom_field_names or []:
                value = self.api.getTestCaseCustomFieldDesignValue(
                    test_case.full_external_id,
                    test_case.version,
                    self.test_project.id,
                    name,
                    details="value",
                )
                test_case.custom_fields.append(CustomField(name, value if isinstance(value, str) else None))
            test_cases.append(test_case)
        return test_cases

    @staticmethod
    def _execution_rows(response):
        # {tcase_id: [row, ...]} without platforms, {tcase_id: {platform_id: row}} with them
        if not response or not isinstance(response, dict):
            return []
        rows = []
        for value in response.values():
            if isinstance(value, dict):
                rows.extend(value.values())
            elif isinstance(value, list):
                rows.extend(value)
        return rows

    def get_full_test_case(self, full_external_id, version):
        return _first(self.api.getTestCase(testcaseexternalid=full_external_id, version=version))

    def get_test_suite_name(self, test_suite_id):
        return _first(self.api.getTestSuiteByID(test_suite_id)).get("name", "")

    def update_test_case(self, wrapper):
        """Reports the wrapper status to TestLink and uploads its attachments."""
        if wrapper.execution_status == ExecutionStatus.NOT_RUN:
            return 0

        kwargs = {}
        if wrapper.test_case.platform_id:
            kwargs["platformid"] = wrapper.test_case.platform_id
        response = self.api.reportTCResult(
            testcaseid=wrapper.id,
            testplanid=self.test_plan.id,
            buildid=self.build.id,
            buildname=self.build.name,
            status=wrapper.execution_status.value,
            notes=wrapper.notes,
            **kwargs
        )
        execution_id = int(_first(response).get("id", 0))
        logger.info(f"Test case {wrapper.full_external_id} reported as "
                    f"{wrapper.execution_status.name} (execution {execution_id})")

        for attachment in wrapper.attachments:
            self.api.uploadExecutionAttachment(
                attachment.path,
                execution_id,
                title=attachment.title,
                description=attachment.description,
            )
        return execution_id
