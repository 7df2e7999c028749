"""Command line entry point: run a TestLink job or serve the reports."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from . import config, store
from .builder import TestLinkBuilder
from .errors import AbortBuildError
from .host import Build, BuildListener, Launcher, Result
from .models import Report
from .seekers import result_seeker_from_dict
from .steps import build_step_from_dict

logger = logging.getLogger(__name__)


def load_job(path):
    """Builds a TestLinkBuilder from a JSON job definition."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    def steps(key):
        return [build_step_from_dict(item) for item in data.get(key, [])]

    builder = TestLinkBuilder(
        data.get("testlink_name", "default"),
        data["test_project_name"],
        data["test_plan_name"],
        data["build_name"],
        custom_fields=data.get("custom_fields", ""),
        single_build_steps=steps("single_build_steps"),
        before_iterating_all_test_cases_build_steps=steps("before_iterating_all_test_cases_build_steps"),
        iterative_build_steps=steps("iterative_build_steps"),
        after_iterating_all_test_cases_build_steps=steps("after_iterating_all_test_cases_build_steps"),
        transactional=data.get("transactional", False),
        failed_tests_mark_build_as_failure=data.get("failed_tests_mark_build_as_failure", False),
        fail_if_no_results=data.get("fail_if_no_results", False),
        result_seekers=[result_seeker_from_dict(item) for item in data.get("result_seekers", [])],
    )
    return data.get("job_name", Path(path).stem), builder


def run_job(args):
    job_name, builder = load_job(args.job_file)
    build = Build(job_name, args.build_number, args.workspace or os.getcwd())
    listener = BuildListener(build)
    try:
        builder.perform(build, Launcher(), listener)
    except AbortBuildError as e:
        listener.error(f"ERROR: {e}")
        build.set_result(Result.FAILURE)
    finally:
        listener.close()

    report = next((a for a in build.actions if isinstance(a, Report)), None)
    if report is not None and not args.no_store:
        store.save_report(job_name, build.number, report)

    print(f"Finished: {build.result.name}")
    return 0 if build.result in (Result.SUCCESS, Result.UNSTABLE) else 1


def serve(args):
    from .app import app
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='TestLink build step')
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('run', help='Run a TestLink job')
    p.add_argument('job_file', help='JSON job definition')
    p.add_argument('--workspace', '-w', help='Build workspace (default: current directory)')
    p.add_argument('--build-number', '-n', type=int, default=1)
    p.add_argument('--no-store', action='store_true', help='Do not save the report in the database')

    p = sub.add_parser('serve', help='Serve the TestLink reports')
    p.add_argument('--host', default='0.0.0.0')
    p.add_argument('--port', type=int, default=4000)
    p.add_argument('--debug', action='store_true')

    p = sub.add_parser('init-db', help='Create the report tables')

    args = parser.parse_args(argv)
    config.setup_logging("DEBUG" if args.verbose else None)

    if args.command == 'run':
        return run_job(args)
    if args.command == 'serve':
        return serve(args)
    if args.command == 'init-db':
        store.init_db()
        return 0

    parser.print_help()
    return 2


if __name__ == '__main__':
    sys.exit(main())
