"""
Historique des rapports TestLink dans PostgreSQL.
Le rapport précédent d'un job sert au calcul des écarts du résumé.
"""

import logging

import psycopg2

from .config import DB_CONFIG
from .models import (
    ExecutionStatus,
    Report,
    TestCase,
    TestCaseWrapper,
    TestPlan,
    TestProject,
)

logger = logging.getLogger(__name__)


def get_connection():
    return psycopg2.connect(**DB_CONFIG)


def init_db():
    """Crée les tables si elles n'existent pas"""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS testlink_reports (
                id SERIAL PRIMARY KEY,
                job_name TEXT NOT NULL,
                build_number INTEGER NOT NULL,
                project_id INTEGER,
                project_name TEXT,
                plan_id INTEGER,
                plan_name TEXT,
                testlink_build_id INTEGER,
                testlink_build_name TEXT,
                passed INTEGER NOT NULL DEFAULT 0,
                failed INTEGER NOT NULL DEFAULT 0,
                blocked INTEGER NOT NULL DEFAULT 0,
                not_run INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT NOW(),
                CONSTRAINT unique_job_build UNIQUE (job_name, build_number)
            );
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS testlink_report_testcases (
                report_id INTEGER REFERENCES testlink_reports(id) ON DELETE CASCADE,
                position INTEGER NOT NULL,
                testcase_id INTEGER NOT NULL,
                full_external_id TEXT,
                version INTEGER,
                name TEXT,
                suite_id INTEGER,
                suite_name TEXT,
                execution_order INTEGER,
                status CHAR(1) NOT NULL
            );
        """)
        conn.commit()
        logger.info("Tables testlink_reports / testlink_report_testcases prêtes")
    finally:
        conn.close()


def save_report(job_name, build_number, report):
    """Enregistre le rapport d'un build. Retourne False en cas d'erreur."""
    conn = None
    try:
        conn = get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            INSERT INTO testlink_reports
            (job_name, build_number, project_id, project_name, plan_id, plan_name,
             testlink_build_id, testlink_build_name, passed, failed, blocked, not_run)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (job_name, build_number) DO NOTHING
            RETURNING id
            """,
            (job_name, build_number, report.test_project.id, report.test_project.name,
             report.test_plan.id, report.test_plan.name, report.build_id, report.build_name,
             report.passed, report.failed, report.blocked, report.not_run)
        )
        row = cursor.fetchone()
        if row is None:
            logger.warning(f"Rapport déjà enregistré pour {job_name} #{build_number}")
            return False

        report_id = row[0]
        for position, tc in enumerate(report.test_cases):
            cursor.execute("""
                INSERT INTO testlink_report_testcases
                (report_id, position, testcase_id, full_external_id, version, name,
                 suite_id, suite_name, execution_order, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (report_id, position, tc.id, tc.full_external_id, tc.version, tc.name,
                 tc.test_suite_id, tc.test_suite_name, tc.execution_order,
                 tc.execution_status.value)
            )

        conn.commit()
        return True
    except psycopg2.Error as e:
        logger.error(f"Erreur DB: {str(e)}")
        return False
    finally:
        if conn is not None:
            conn.close()


REPORT_COLUMNS = """
    id, project_id, project_name, plan_id, plan_name, testlink_build_id,
    testlink_build_name, passed, failed, blocked, not_run
"""


def _row_to_report(cursor, row):
    (report_id, project_id, project_name, plan_id, plan_name, build_id,
     build_name, passed, failed, blocked, not_run) = row
    report = Report(
        TestProject(project_id, project_name),
        TestPlan(plan_id, plan_name),
        build_id,
        build_name,
        passed=passed,
        failed=failed,
        blocked=blocked,
        not_run=not_run,
    )
    cursor.execute("""
        SELECT testcase_id, full_external_id, version, name, suite_id, suite_name,
               execution_order, status
        FROM testlink_report_testcases
        WHERE report_id = %s
        ORDER BY position
    """, (report_id,))
    for tc_id, external_id, version, name, suite_id, suite_name, order, status in cursor.fetchall():
        test_case = TestCase(
            id=tc_id,
            name=name,
            full_external_id=external_id,
            version=version,
            test_suite_id=suite_id,
            execution_order=order,
            execution_status=ExecutionStatus.from_code(status),
        )
        # les compteurs viennent de la ligne enregistrée, pas des cas de test
        report.test_cases.append(TestCaseWrapper(test_case, suite_name))
    return report


def _fetch_report(query, params):
    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute(query, params)
        row = cursor.fetchone()
        if row is None:
            return None
        report = _row_to_report(cursor, row)
        cursor.close()
        return report
    finally:
        conn.close()


def get_report(job_name, build_number):
    return _fetch_report(
        f"SELECT {REPORT_COLUMNS} FROM testlink_reports WHERE job_name = %s AND build_number = %s",
        (job_name, build_number),
    )


def get_previous_report(job_name, build_number):
    """Dernier rapport du job avant ce build"""
    return _fetch_report(
        f"""
        SELECT {REPORT_COLUMNS} FROM testlink_reports
        WHERE job_name = %s AND build_number < %s
        ORDER BY build_number DESC
        LIMIT 1
        """,
        (job_name, build_number),
    )


def list_reports(job_name):
    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT build_number, testlink_build_id, testlink_build_name,
                   passed, failed, blocked, not_run, created_at
            FROM testlink_reports
            WHERE job_name = %s
            ORDER BY build_number DESC
        """, (job_name,))
        rows = cursor.fetchall()
        cursor.close()
    finally:
        conn.close()

    return [{
        "build_number": row[0],
        "testlink_build_id": row[1],
        "testlink_build_name": row[2],
        "passed": row[3],
        "failed": row[4],
        "blocked": row[5],
        "not_run": row[6],
        "total": row[3] + row[4] + row[5] + row[6],
        "created_at": row[7].isoformat() if row[7] else None,
    } for row in rows]
