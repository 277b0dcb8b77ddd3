"""Tests for the flock command line tools."""

import csv
import json

import pytest
from click.testing import CliRunner

from flock.cli import cli
from flock.db.models import Organization, Person
from flock.services.csv_import_service import SAMPLE_CSV


@pytest.fixture
def run(session_factory):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args), obj={"session_factory": session_factory})
    return _run


def test_create_org(run, db):
    result = run("create-org", "--name", "Grace Chapel", "--slug", "Grace")

    assert result.exit_code == 0, result.output
    assert "✓ Created organization: Grace Chapel" in result.output
    org = db.query(Organization).filter(Organization.slug == "grace").one()
    assert org.name == "Grace Chapel"


def test_create_org_rejects_duplicate_and_bad_slug(run, test_org):
    result = run("create-org", "--name", "Again", "--slug", test_org.slug)
    assert result.exit_code == 1
    assert "already exists" in result.output

    result = run("create-org", "--name", "Bad", "--slug", "has spaces")
    assert result.exit_code == 1


def test_import_people(run, db, test_org, tmp_path):
    path = tmp_path / "members.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")

    result = run("import-people", str(path), "--org-slug", test_org.slug)

    assert result.exit_code == 0, result.output
    assert "Import completed: 2 people imported, 0 errors" in result.output
    assert db.query(Person).filter(Person.organization_id == test_org.id).count() == 2


def test_import_people_with_explicit_mapping(run, test_org, tmp_path):
    path = tmp_path / "members.csv"
    path.write_text("Given,Family,State\nAda,Lovelace,visitor\n", encoding="utf-8")
    mapping = json.dumps({"Given": "first_name", "Family": "last_name", "State": "status"})

    result = run("import-people", str(path), "--org-slug", test_org.slug, "--mapping", mapping)

    assert result.exit_code == 0, result.output
    assert "State -> status" in result.output


def test_import_people_reports_validation_errors(run, test_org, tmp_path):
    path = tmp_path / "members.csv"
    path.write_text("First Name,Last Name,Status\nJohn,Doe,member\n", encoding="utf-8")

    result = run("import-people", str(path), "--org-slug", test_org.slug)

    assert result.exit_code == 1
    assert 'Row 1: Invalid status "member"' in result.output


def test_import_people_unknown_org(run, tmp_path):
    path = tmp_path / "members.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")

    result = run("import-people", str(path), "--org-slug", "nowhere")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_export_people(run, test_org, make_person, tmp_path):
    make_person("Ada", "Lovelace", email="ada@example.com")
    output = tmp_path / "export.csv"

    result = run(
        "export-people",
        "--org-slug", test_org.slug,
        "--columns", "first_name,email",
        "--output", str(output),
    )

    assert result.exit_code == 0, result.output
    with output.open(newline="", encoding="utf-8") as f:
        assert list(csv.reader(f)) == [["First Name", "Email"], ["Ada", "ada@example.com"]]


def test_export_people_unknown_column(run, test_org, tmp_path):
    result = run(
        "export-people",
        "--org-slug", test_org.slug,
        "--columns", "shoe_size",
        "--output", str(tmp_path / "x.csv"),
    )
    assert result.exit_code == 1
    assert "Unknown export column: shoe_size" in result.output


def test_create_org_rejects_malformed_id(run, db):
    result = run("create-org", "--name", "Grace", "--slug", "grace", "--id", "not-a-uuid")

    assert result.exit_code == 1
    assert "❌ Invalid organization id: not-a-uuid" in result.output
    assert db.query(Organization).filter(Organization.slug == "grace").count() == 0
