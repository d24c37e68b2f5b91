"""Tests for SBE Earthing CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from sbe_earthing.auth import JWTService
from sbe_earthing.cli.main import cli


VALID_CONTACT = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9876543210",
    "subject": "Earthing quote",
    "message": "Need a quote for 20 copper electrodes.",
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_backend_dir(monkeypatch):
    """Ensure CWD is the backend directory for metadata resolution."""
    backend_dir = Path(__file__).parent.parent
    monkeypatch.chdir(backend_dir)
    monkeypatch.delenv("SBE_METADATA_PATH", raising=False)


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload))
    return path


class TestMetadataValidate:
    def test_validate_succeeds(self, runner, in_backend_dir):
        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 0
        assert "All metadata is valid" in result.output

    def test_validate_lists_forms(self, runner, in_backend_dir):
        result = runner.invoke(cli, ["metadata", "validate"])
        assert "Loaded 5 forms" in result.output
        assert "contact (6 fields, -> contacts)" in result.output
        assert "admin-login (2 fields, -> validation only)" in result.output

    def test_validate_single_file(self, runner, in_backend_dir):
        result = runner.invoke(
            cli, ["metadata", "validate", "--path", "../metadata/forms/faq.yaml"]
        )
        assert result.exit_code == 0
        assert "Loaded" not in result.output

    def test_broken_form_fails(self, runner, tmp_path, monkeypatch):
        forms_dir = tmp_path / "forms"
        forms_dir.mkdir()
        (forms_dir / "bad.yaml").write_text("form:\n  slug: Bad Slug\n  name: Bad\n")
        monkeypatch.setenv("SBE_METADATA_PATH", str(tmp_path))

        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 1
        assert "schema error(s) found" in result.output
        assert "[ERROR] " in result.output

    def test_missing_forms_dir(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SBE_METADATA_PATH", str(tmp_path))
        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 1
        assert "Forms directory not found" in result.output


class TestForms:
    def test_list(self, runner, in_backend_dir):
        result = runner.invoke(cli, ["forms", "list"])
        assert result.exit_code == 0
        lines = result.output.strip().split("\n")
        assert len(lines) == 5
        contact = next(line for line in lines if line.startswith("contact "))
        assert "Contact Us" in contact
        assert "public" in contact
        assert contact.endswith("6 fields")

    def test_validate_valid_payload(self, runner, in_backend_dir, tmp_path):
        data = write_json(tmp_path / "contact.json", VALID_CONTACT)
        result = runner.invoke(cli, ["forms", "validate", "contact", "--data", str(data)])
        assert result.exit_code == 0
        assert "Submission is valid for form 'contact'" in result.output

    def test_validate_invalid_payload(self, runner, in_backend_dir, tmp_path):
        data = write_json(
            tmp_path / "contact.json", {**VALID_CONTACT, "email": "asha@", "subject": ""}
        )
        result = runner.invoke(cli, ["forms", "validate", "contact", "--data", str(data)])
        assert result.exit_code == 1
        assert "✗ email: Email must be a valid email address" in result.output
        assert "✗ subject: Subject is required" in result.output
        assert "2 field error(s)" in result.output

    def test_validate_unknown_form(self, runner, in_backend_dir, tmp_path):
        data = write_json(tmp_path / "x.json", {})
        result = runner.invoke(cli, ["forms", "validate", "newsletter", "--data", str(data)])
        assert result.exit_code == 1
        assert "Form 'newsletter' not found" in result.output

    def test_validate_rejects_non_object(self, runner, in_backend_dir, tmp_path):
        data = write_json(tmp_path / "x.json", [VALID_CONTACT])
        result = runner.invoke(cli, ["forms", "validate", "contact", "--data", str(data)])
        assert result.exit_code == 1
        assert "must be a JSON object" in result.output

    def test_validate_rejects_bad_json(self, runner, in_backend_dir, tmp_path):
        data = tmp_path / "x.json"
        data.write_text("{not json")
        result = runner.invoke(cli, ["forms", "validate", "contact", "--data", str(data)])
        assert result.exit_code == 1
        assert "is not valid JSON" in result.output


class TestExport:
    @pytest.fixture
    def contacts_file(self, tmp_path):
        return write_json(
            tmp_path / "contacts.json",
            [
                {**VALID_CONTACT, "status": "new", "createdAt": "2024-01-05T15:04:00Z"},
                {**VALID_CONTACT, "name": "Ravi", "status": "closed"},
            ],
        )

    def test_csv_to_stdout(self, runner, contacts_file):
        result = runner.invoke(
            cli, ["export", "contacts", "--input", str(contacts_file), "--output", "-"]
        )
        assert result.exit_code == 0
        lines = result.output.strip().split("\n")
        assert lines[0].startswith("Name,Email,Phone")
        assert len(lines) == 3

    def test_filter(self, runner, contacts_file):
        result = runner.invoke(
            cli,
            [
                "export", "contacts",
                "--input", str(contacts_file),
                "--output", "-",
                "--filter", "status=closed",
            ],
        )
        lines = result.output.strip().split("\n")
        assert len(lines) == 2
        assert lines[1].startswith("Ravi,")

    def test_bad_filter(self, runner, contacts_file):
        result = runner.invoke(
            cli, ["export", "contacts", "--input", str(contacts_file), "--filter", "status"]
        )
        assert result.exit_code == 2

    def test_json_to_file(self, runner, contacts_file, tmp_path):
        target = tmp_path / "out.json"
        result = runner.invoke(
            cli,
            [
                "export", "contacts",
                "--input", str(contacts_file),
                "--format", "json",
                "--output", str(target),
            ],
        )
        assert result.exit_code == 0
        assert "application/json" in result.output
        assert len(json.loads(target.read_text())) == 2

    def test_summary(self, runner, tmp_path):
        counts = write_json(tmp_path / "counts.json", {"contacts": 3, "products": 8, "faqs": 5})
        result = runner.invoke(
            cli, ["export", "summary", "--input", str(counts), "--output", "-"]
        )
        assert result.exit_code == 0
        lines = result.output.strip().split("\n")
        assert "Contacts,3" in lines
        assert "Products,8" in lines
        assert lines[-1] == "Date Range,All Time"

    def test_wrong_payload_shape(self, runner, contacts_file):
        result = runner.invoke(cli, ["export", "summary", "--input", str(contacts_file)])
        assert result.exit_code == 1
        assert "expected a JSON object" in result.output

    def test_half_open_date_range(self, runner, contacts_file):
        result = runner.invoke(
            cli, ["export", "contacts", "--input", str(contacts_file), "--start", "2024-01-01"]
        )
        assert result.exit_code == 1


class TestAuthToken:
    def test_token_decodes(self, runner, monkeypatch):
        monkeypatch.setenv("SBE_SECRET_KEY", "cli-secret-key-at-least-32-characters")
        result = runner.invoke(
            cli, ["auth", "token", "--subject", "ops@sbeearthing.com", "--ttl", "60"]
        )
        assert result.exit_code == 0

        token = result.output.strip().split("\n")[-1]
        claims = JWTService("cli-secret-key-at-least-32-characters").decode_token(token)
        assert claims.subject == "ops@sbeearthing.com"
        assert claims.role == "admin"
        assert claims.exp - claims.iat == 60

    def test_default_key_warning(self, runner, monkeypatch):
        monkeypatch.delenv("SBE_SECRET_KEY", raising=False)
        result = runner.invoke(cli, ["auth", "token", "--subject", "ops"])
        assert result.exit_code == 0
        assert "using the development key" in result.output

    def test_ttl_must_be_positive(self, runner):
        result = runner.invoke(cli, ["auth", "token", "--subject", "ops", "--ttl", "0"])
        assert result.exit_code == 2
