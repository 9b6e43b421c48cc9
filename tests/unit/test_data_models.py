"""
Unit tests for data models and configuration.
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path

from pr_review_relay.config import (
    AppConfig,
    ConfigError,
    DEFAULT_RULES,
    GitHubConfig,
    LoggingConfig,
    load_routing_rules,
    parse_repository_list,
)
from pr_review_relay.models import (
    DestinationBucket,
    EnrichedPullRequest,
    RawPullRequest,
    RepositoryRef,
    ReviewState,
    RoutingRule,
)


def make_raw(number=1, **overrides):
    data = dict(
        number=number,
        title="Add feature",
        html_url=f"https://github.com/org/api/pull/{number}",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        author="alice",
        labels=("backend",),
        draft=False,
        head_sha="abc123",
    )
    data.update(overrides)
    return RawPullRequest(**data)


def make_enriched(number=1, repository="org/api", **overrides):
    data = dict(
        pull_request=make_raw(number),
        additions=10,
        deletions=2,
        ci_status="success",
        review_state=ReviewState.PENDING,
        requested_reviewers=("bob",),
        repository=repository,
    )
    data.update(overrides)
    return EnrichedPullRequest(**data)


class TestPullRequestModels:
    """Unit tests for pull request data models."""

    def test_raw_pull_request_validation(self):
        with pytest.raises(ValueError):
            make_raw(number=0)

        with pytest.raises(ValueError):
            make_raw(created_at=datetime(2024, 1, 1))

    def test_enriched_pull_request_properties(self):
        pr = make_enriched(number=7)

        assert pr.number == 7
        assert pr.author == "alice"
        assert pr.size == "+10 / -2"
        assert pr.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_enriched_pull_request_validation(self):
        with pytest.raises(ValueError):
            make_enriched(additions=-1)

        with pytest.raises(ValueError):
            make_enriched(repository="no-slash")

    def test_bucket_ignores_duplicate_pull_request(self):
        bucket = DestinationBucket(rule=DEFAULT_RULES[0])

        assert bucket.add(make_enriched(1)) is True
        assert bucket.add(make_enriched(1)) is False
        assert bucket.add(make_enriched(1, repository="org/web")) is True
        assert len(bucket) == 2

    def test_review_state_is_string_enum(self):
        assert ReviewState.APPROVED == "APPROVED"
        assert ReviewState("CHANGES_REQUESTED") is ReviewState.CHANGES_REQUESTED


class TestRoutingModels:
    """Unit tests for routing rules and repository references."""

    def test_rule_requires_label(self):
        with pytest.raises(ValueError):
            RoutingRule(label="  ", destination_id="WEBHOOK_X")

    def test_rule_without_destination(self):
        rule = RoutingRule(label="docs", destination_id="")
        assert rule.has_destination is False

    def test_repository_full_name(self):
        repo = RepositoryRef(owner="org", name="api")
        assert repo.full_name == "org/api"
        assert str(repo) == "org/api"


class TestRepositoryListParsing:
    """Unit tests for parse_repository_list."""

    def test_parses_and_trims(self):
        repos = parse_repository_list(" org/api , ,org/web,  ")

        assert repos == [RepositoryRef("org", "api"), RepositoryRef("org", "web")]

    def test_preserves_duplicates_and_order(self):
        repos = parse_repository_list("b/two,a/one,b/two")

        assert [r.full_name for r in repos] == ["b/two", "a/one", "b/two"]

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_source_fails(self, value):
        with pytest.raises(ConfigError):
            parse_repository_list(value)

    def test_only_separators_fails(self):
        with pytest.raises(ConfigError):
            parse_repository_list(" , ,")

    @pytest.mark.parametrize("token", ["noslash", "a/b/c", "/repo", "owner/"])
    def test_malformed_token_fails(self, token):
        with pytest.raises(ConfigError):
            parse_repository_list(f"org/api,{token}")


class TestAppConfig:
    """Unit tests for AppConfig loading and validation."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "GITHUB_TOKEN", "GITHUB_REPOSITORIES", "GITHUB_REPOSITORY",
            "RELAY_RULES_FILE", "RELAY_CONFIG_FILE", "WEBHOOK_BACKEND", "WEBHOOK_FRONTEND",
            "LOG_LEVEL", "GITHUB_TIMEOUT", "DEBUG",
        ):
            monkeypatch.delenv(name, raising=False)
        # keep a developer's local .env out of the tests
        monkeypatch.setattr("pr_review_relay.config.load_dotenv", lambda: False)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        monkeypatch.setenv("GITHUB_REPOSITORIES", "org/api, org/web")
        monkeypatch.setenv("WEBHOOK_BACKEND", "https://hooks.example.com/backend")

        config = AppConfig.from_env()
        config.validate()

        assert config.github.token == "ghp_test"
        assert [r.full_name for r in config.repositories] == ["org/api", "org/web"]
        assert config.rules == list(DEFAULT_RULES)
        assert config.webhook_for("WEBHOOK_BACKEND") == "https://hooks.example.com/backend"
        assert config.webhook_for("WEBHOOK_FRONTEND") == ""

    def test_single_repository_fallback(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/api")

        config = AppConfig.from_env()

        assert config.repositories == [RepositoryRef("org", "api")]

    def test_missing_repository_fails(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")

        with pytest.raises(ConfigError):
            AppConfig.from_env()

    def test_missing_token_fails_validation(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/api")

        config = AppConfig.from_env()
        with pytest.raises(ConfigError, match="GITHUB_TOKEN"):
            config.validate()

    def test_invalid_log_level(self):
        config = AppConfig(
            github=GitHubConfig(token="t"),
            repositories=[RepositoryRef("org", "api")],
            logging=LoggingConfig(level="LOUD"),
        )
        with pytest.raises(ConfigError, match="log level"):
            config.validate()

    def test_rules_file(self, monkeypatch, tmp_path: Path):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text(
            "rules:\n"
            "  - label: 'team: data'\n"
            "    destination_id: WEBHOOK_DATA\n"
            "    display_name: Data Team\n"
            "  - label: docs\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/api")
        monkeypatch.setenv("RELAY_RULES_FILE", str(rules_file))
        monkeypatch.setenv("WEBHOOK_DATA", "https://hooks.example.com/data")

        config = AppConfig.from_env()

        assert config.rules == [
            RoutingRule("team: data", "WEBHOOK_DATA", "Data Team"),
            RoutingRule("docs", "", ""),
        ]
        assert config.webhooks == {"WEBHOOK_DATA": "https://hooks.example.com/data"}

    def test_invalid_rule_in_file(self, tmp_path: Path):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text("rules:\n  - destination_id: WEBHOOK_X\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_routing_rules(str(rules_file))

    def test_missing_rules_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_routing_rules(str(tmp_path / "missing.yaml"))

    def test_from_yaml(self, monkeypatch, tmp_path: Path):
        config_file = tmp_path / "relay.yaml"
        config_file.write_text(
            "github:\n"
            "  token: ghp_yaml\n"
            "  timeout_seconds: 5\n"
            "repositories:\n"
            "  - org/api\n"
            "  - org/web\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("WEBHOOK_FRONTEND", "https://hooks.example.com/fe")

        config = AppConfig.from_yaml(str(config_file))
        config.validate()

        assert config.github.timeout_seconds == 5
        assert [r.full_name for r in config.repositories] == ["org/api", "org/web"]
        assert config.webhook_for("WEBHOOK_FRONTEND") == "https://hooks.example.com/fe"
        assert config.logging.level == "DEBUG"

    def test_malformed_yaml_rules_file(self, tmp_path: Path):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text("rules: [label: backend\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_routing_rules(str(rules_file))

    @pytest.mark.parametrize("content", [
        "- label: backend\n",
        "just a string\n",
        "rules: backend\n",
        "rules:\n  - backend\n",
    ])
    def test_rules_file_with_wrong_shape(self, tmp_path: Path, content):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigError):
            load_routing_rules(str(rules_file))

    def test_empty_rules_file(self, tmp_path: Path):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text("", encoding="utf-8")

        assert load_routing_rules(str(rules_file)) == []

    def test_from_yaml_unknown_section_key(self, tmp_path: Path):
        config_file = tmp_path / "relay.yaml"
        config_file.write_text(
            "github:\n  retries: 3\nrepositories: [org/api]\n", encoding="utf-8"
        )

        with pytest.raises(ConfigError, match="Invalid section"):
            AppConfig.from_yaml(str(config_file))

    def test_load_prefers_config_file(self, monkeypatch, tmp_path: Path):
        config_file = tmp_path / "relay.yaml"
        config_file.write_text("repositories:\n  - org/web\n", encoding="utf-8")
        monkeypatch.setenv("RELAY_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/api")

        config = AppConfig.load()
        config.validate()

        # token falls back to the environment, repositories come from the file
        assert config.github.token == "ghp_env"
        assert config.repositories == [RepositoryRef("org", "web")]
        assert config.rules == list(DEFAULT_RULES)

    def test_load_without_config_file_reads_env(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("GITHUB_REPOSITORY", "org/api")

        config = AppConfig.load()

        assert config.repositories == [RepositoryRef("org", "api")]
