"""
Data models for the TestLink build step.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ExecutionStatus(Enum):
    """Execution status of a test case, using the TestLink status codes."""
    NOT_RUN = "n"
    PASSED = "p"
    FAILED = "f"
    BLOCKED = "b"

    @classmethod
    def from_code(cls, code):
        for status in cls:
            if status.value == code:
                return status
        return cls.NOT_RUN


class ExecutionType(Enum):
    MANUAL = 1
    AUTOMATED = 2


@dataclass
class TestProject:
    id: int
    name: str
    prefix: str = ""
    notes: str = ""


@dataclass
class TestPlan:
    id: int
    name: str
    project_name: str = ""
    notes: str = ""


@dataclass
class TestLinkBuild:
    id: int
    name: str
    notes: str = ""


@dataclass
class CustomField:
    name: str
    value: Optional[str] = None


@dataclass
class Attachment:
    path: str
    title: str = ""
    description: str = ""


def _to_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class TestCase:
    """Automated test case, as returned for a test plan execution."""
    id: int
    name: str = ""
    full_external_id: str = ""
    version: int = 1
    version_id: int = 0
    test_suite_id: int = 0
    test_project_id: int = 0
    execution_order: int = 0
    platform_id: int = 0
    platform_name: str = ""
    author: str = ""
    summary: str = ""
    custom_fields: list = field(default_factory=list)
    execution_status: ExecutionStatus = ExecutionStatus.NOT_RUN

    @classmethod
    def from_execution(cls, row):
        """Builds a test case from a getTestCasesForTestPlan row.

        The execution rows do not carry the test suite nor always the name,
        those are filled later from the full test case.
        """
        full_external_id = row.get("full_external_id")
        if not full_external_id:
            prefix = row.get("prefix")
            external_id = row.get("external_id", "")
            full_external_id = f"{prefix}-{external_id}" if prefix else str(external_id)
        return cls(
            id=_to_int(row.get("tcase_id", row.get("tc_id"))),
            name=row.get("tcase_name", row.get("name", "")) or "",
            full_external_id=full_external_id,
            version=_to_int(row.get("version"), 1),
            version_id=_to_int(row.get("tcversion_id")),
            test_suite_id=_to_int(row.get("testsuite_id")),
            test_project_id=_to_int(row.get("testproject_id")),
            execution_order=_to_int(row.get("execution_order", row.get("exec_order"))),
            platform_id=_to_int(row.get("platform_id")),
            platform_name=row.get("platform_name") or "",
            author=row.get("author_login", "") or "",
            summary=row.get("summary", "") or "",
        )


class TestCaseWrapper:
    """
    Wraps a TestCase and adds what the execution call does not return:
    test suite name, platform, notes and attachments.
    """

    def __init__(self, test_case, test_suite_name=""):
        self.test_case = test_case
        self.test_suite_name = test_suite_name
        self.platform = test_case.platform_name
        self.notes = ""
        self.attachments = []

    @property
    def id(self):
        return self.test_case.id

    @property
    def name(self):
        return self.test_case.name

    @property
    def full_external_id(self):
        return self.test_case.full_external_id

    @property
    def version(self):
        return self.test_case.version

    @property
    def version_id(self):
        return self.test_case.version_id

    @property
    def test_suite_id(self):
        return self.test_case.test_suite_id

    @test_suite_id.setter
    def test_suite_id(self, value):
        self.test_case.test_suite_id = value

    @property
    def execution_order(self):
        return self.test_case.execution_order

    @property
    def custom_fields(self):
        return self.test_case.custom_fields

    @property
    def execution_status(self):
        return self.test_case.execution_status

    @execution_status.setter
    def execution_status(self, status):
        self.test_case.execution_status = status

    def get_key_custom_field_value(self, key_custom_field):
        for custom_field in self.test_case.custom_fields:
            if custom_field.name == key_custom_field:
                return custom_field.value
        return None

    def append_notes(self, notes):
        if not notes:
            return
        self.notes = f"{self.notes}\n{notes}" if self.notes else notes

    def add_attachment(self, attachment):
        self.attachments.append(attachment)

    def __repr__(self):
        return (f"TestCaseWrapper(id={self.id}, name={self.name!r}, "
                f"status={self.execution_status.name})")


@dataclass
class Report:
    """Result of one TestLink build: status counters plus the evaluated test cases."""
    test_project: TestProject
    test_plan: TestPlan
    build_id: int
    build_name: Optional[str] = None
    passed: int = 0
    failed: int = 0
    blocked: int = 0
    not_run: int = 0
    test_cases: list = field(default_factory=list)

    @property
    def tests_total(self):
        return self.passed + self.failed + self.blocked + self.not_run

    def add_test_case(self, wrapper):
        self.test_cases.append(wrapper)
        status = wrapper.execution_status
        if status == ExecutionStatus.PASSED:
            self.passed += 1
        elif status == ExecutionStatus.FAILED:
            self.failed += 1
        elif status == ExecutionStatus.BLOCKED:
            self.blocked += 1
        else:
            self.not_run += 1

    @classmethod
    def from_test_cases(cls, test_project, test_plan, build, wrappers):
        report = cls(test_project, test_plan, build.id, build.name)
        for wrapper in wrappers:
            report.add_test_case(wrapper)
        return report
