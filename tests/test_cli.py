"""Unit tests for the command line entry point."""

import os

import pytest
import yaml
from unittest.mock import Mock, patch

from src.cli import main, parse_arguments
from src.core.aws_client import AWSCredentialsError
from src.core.provider import Action, ChangeResult


STATE_MACHINE_ARN = "arn:aws:states:us-east-1:123456789012:stateMachine:nightly"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config_file(tmp_path):
    config = {
        "aws": {"region": "us-east-1"},
        "retry": {"timeout_seconds": 30},
        "state_file": str(tmp_path / "state.json"),
        "resources": [
            {
                "type": "aws_sfn_execution",
                "name": "nightly",
                "args": {"state_machine_arn": STATE_MACHINE_ARN, "name": "nightly-1"},
            }
        ],
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config))
    return str(path)


class TestParseArguments:

    def test_defaults(self):
        args = parse_arguments(["apply"])

        assert args.command == "apply"
        assert args.config_file is None
        assert args.profile is None
        assert args.verbose is False

    def test_all_options(self):
        args = parse_arguments([
            "destroy", "cfg.yaml", "--profile", "ops", "--region", "eu-west-1",
            "--state-file", "s.json", "-v",
        ])

        assert args.command == "destroy"
        assert args.config_file == "cfg.yaml"
        assert args.profile == "ops"
        assert args.region == "eu-west-1"
        assert args.state_file == "s.json"
        assert args.verbose is True

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            parse_arguments(["plan"])


class TestMain:

    def test_no_config_file(self, capsys):
        assert main(["apply"]) == 1
        assert "No configuration file found" in capsys.readouterr().out

    def test_configuration_error(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("resources: {}\n")

        assert main(["apply", str(path)]) == 1
        assert "Configuration error" in capsys.readouterr().out

    def test_validate_valid_configuration(self, config_file, capsys):
        assert main(["validate", config_file]) == 0
        assert "Configuration is valid (1 resources)" in capsys.readouterr().out

    def test_validate_invalid_resource(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "resources": [{"type": "aws_sfn_execution", "name": "x", "args": {"state_machine_arn": "nope"}}]
        }))

        assert main(["validate"]) == 1
        assert "Invalid resource declaration" in capsys.readouterr().out

    def test_validate_unknown_type(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"resources": [{"type": "aws_nope", "name": "x"}]}))

        assert main(["validate", str(path)]) == 1
        assert "Unknown resource type" in capsys.readouterr().out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_apply(self, mock_client_class, mock_provider_class, config_file, capsys, tmp_path):
        provider = Mock()
        provider.apply.return_value = [
            ChangeResult("aws_sfn_execution.nightly", Action.CREATE, "arn:exec"),
        ]
        mock_provider_class.return_value = provider

        assert main(["apply", config_file, "--profile", "ops"]) == 0

        mock_client_class.assert_called_once_with(profile_name="ops", region_name="us-east-1")
        assert mock_provider_class.call_args.kwargs["retry_timeout"] == 30
        provider.apply.assert_called_once_with([
            {
                "type": "aws_sfn_execution",
                "name": "nightly",
                "args": {"state_machine_arn": STATE_MACHINE_ARN, "name": "nightly-1"},
            }
        ])
        out = capsys.readouterr().out
        assert "aws_sfn_execution.nightly: create (arn:exec)" in out
        assert "Apply complete" in out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_refresh_reports_removed(self, mock_client_class, mock_provider_class, config_file, capsys):
        provider = Mock()
        provider.refresh.return_value = [
            ChangeResult("aws_sfn_execution.nightly", Action.READ, ""),
        ]
        mock_provider_class.return_value = provider

        assert main(["refresh", config_file]) == 0
        assert "not found, removed from state" in capsys.readouterr().out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_destroy_nothing_to_do(self, mock_client_class, mock_provider_class, config_file, capsys):
        provider = Mock()
        provider.destroy.return_value = []
        mock_provider_class.return_value = provider

        assert main(["destroy", config_file]) == 0
        assert "Nothing to do." in capsys.readouterr().out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_region_flag_overrides_configuration(self, mock_client_class, mock_provider_class, config_file, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "us-east-1")
        mock_provider_class.return_value.apply.return_value = []

        assert main(["apply", config_file, "--region", "eu-west-1"]) == 0

        assert mock_client_class.call_args.kwargs["region_name"] == "eu-west-1"
        assert os.environ["AWS_REGION"] == "us-east-1"

    @patch("src.cli.AWSClientManager")
    def test_client_initialization_failure(self, mock_client_class, config_file, capsys):
        mock_client_class.side_effect = Exception("no credentials")

        assert main(["apply", config_file]) == 1
        assert "AWS client initialization failed" in capsys.readouterr().out

    @patch("src.cli.AWSClientManager")
    def test_rejected_credentials(self, mock_client_class, config_file, capsys):
        mock_client_class.side_effect = AWSCredentialsError(
            "AWS credentials are invalid or expired. Please update your credentials."
        )

        assert main(["apply", config_file]) == 1
        assert "AWS credentials are invalid or expired" in capsys.readouterr().out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_apply_failure(self, mock_client_class, mock_provider_class, config_file, capsys):
        mock_provider_class.return_value.apply.side_effect = RuntimeError("boom")

        assert main(["apply", config_file]) == 1
        assert "Apply failed: boom" in capsys.readouterr().out

    @patch("src.cli.Provider")
    @patch("src.cli.AWSClientManager")
    def test_keyboard_interrupt(self, mock_client_class, mock_provider_class, config_file):
        mock_provider_class.return_value.apply.side_effect = KeyboardInterrupt()

        assert main(["apply", config_file]) == 130
