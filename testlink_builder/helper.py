import re
from string import Template

TESTLINK_TESTCASE_PREFIX = "TESTLINK_TESTCASE_"
TESTLINK_TESTPROJECT_PREFIX = "TESTLINK_TESTPROJECT_"
TESTLINK_TESTPLAN_PREFIX = "TESTLINK_TESTPLAN_"
TESTLINK_BUILD_PREFIX = "TESTLINK_BUILD_"


def format_custom_field_env_var_name(name):
    # "Java Class" -> TESTLINK_TESTCASE_JAVA_CLASS
    return TESTLINK_TESTCASE_PREFIX + re.sub(r"[^A-Za-z0-9]", "_", name).upper()


def build_test_case_env_vars(wrapper, project, plan, build):
    """Environment variables exposed to the iterative build steps for one test case."""
    env = {
        TESTLINK_TESTCASE_PREFIX + "ID": str(wrapper.id),
        TESTLINK_TESTCASE_PREFIX + "NAME": wrapper.name or "",
        TESTLINK_TESTCASE_PREFIX + "EXTERNALID": wrapper.full_external_id or "",
        TESTLINK_TESTCASE_PREFIX + "VERSION": str(wrapper.version),
        TESTLINK_TESTCASE_PREFIX + "TESTPROJECTID": str(project.id),
        TESTLINK_TESTCASE_PREFIX + "AUTHOR": wrapper.test_case.author or "",
        TESTLINK_TESTCASE_PREFIX + "SUMMARY": wrapper.test_case.summary or "",
        TESTLINK_TESTCASE_PREFIX + "TESTSUITEID": str(wrapper.test_suite_id),
        TESTLINK_TESTCASE_PREFIX + "TESTSUITE_NAME": wrapper.test_suite_name or "",
        TESTLINK_TESTCASE_PREFIX + "EXECUTIONORDER": str(wrapper.execution_order),
        TESTLINK_TESTCASE_PREFIX + "PLATFORM": wrapper.platform or "",
    }
    for custom_field in wrapper.custom_fields:
        env[format_custom_field_env_var_name(custom_field.name)] = custom_field.value or ""

    env[TESTLINK_TESTPROJECT_PREFIX + "ID"] = str(project.id)
    env[TESTLINK_TESTPROJECT_PREFIX + "NAME"] = project.name or ""
    env[TESTLINK_TESTPLAN_PREFIX + "ID"] = str(plan.id)
    env[TESTLINK_TESTPLAN_PREFIX + "NAME"] = plan.name or ""
    env[TESTLINK_BUILD_PREFIX + "ID"] = str(build.id)
    env[TESTLINK_BUILD_PREFIX + "NAME"] = build.name or ""
    return env


def expand_variable(text, env):
    """Replaces $VAR and ${VAR} with values from env, unknown names are kept."""
    if not text:
        return text
    return Template(text).safe_substitute(env)


def split_custom_fields(text, env=None):
    if not text:
        return []
    expanded = expand_variable(text, env or {})
    return [name.strip() for name in expanded.split(",") if name.strip()]
