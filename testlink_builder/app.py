import logging

import psycopg2
from flask import Flask, abort, jsonify
from flask_cors import CORS

from . import store
from .summary import create_report_summary, create_report_summary_details

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def _load_reports(job_name, build_number):
    report = store.get_report(job_name, build_number)
    if report is None:
        abort(404)
    previous = store.get_previous_report(job_name, build_number)
    return report, previous


@app.errorhandler(psycopg2.Error)
def handle_db_error(e):
    app.logger.error(f"Échec de connexion à la base de données: {str(e)}")
    return jsonify({"error": str(e)}), 500


@app.route("/")
def home():
    return "✅ Serveur Flask opérationnel"


@app.route("/jobs/<job_name>/builds/<int:build_number>/")
def report_summary(job_name, build_number):
    report, previous = _load_reports(job_name, build_number)
    return create_report_summary(report, previous)


@app.route("/jobs/<job_name>/builds/<int:build_number>/testLinkResult")
def report_details(job_name, build_number):
    report, previous = _load_reports(job_name, build_number)
    return create_report_summary_details(report, previous)


@app.route("/api/jobs/<job_name>/builds", methods=["GET"])
def api_builds(job_name):
    return jsonify(store.list_reports(job_name))
