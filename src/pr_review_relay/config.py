"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv

from .models.routing import RoutingRule, RepositoryRef


class ConfigError(ValueError):
    """설정 누락 또는 형식 오류 (실행 전 치명적 오류)"""


DEFAULT_RULES = (
    RoutingRule(label="backend", destination_id="WEBHOOK_BACKEND", display_name="Backend Team"),
    RoutingRule(label="frontend", destination_id="WEBHOOK_FRONTEND", display_name="Frontend Team"),
)


def parse_repository_list(value: Optional[str]) -> List[RepositoryRef]:
    """
    Parse a comma separated ``owner/repo`` list.

    Whitespace around tokens is trimmed and empty tokens are dropped.
    Order and duplicates are preserved.

    Args:
        value: Raw configuration string (e.g. "org/api, org/web")

    Returns:
        Non-empty list of RepositoryRef

    Raises:
        ConfigError: If the value is unset/empty or a token is malformed
    """
    if not value or not value.strip():
        raise ConfigError("Repository list is empty or unset")

    repositories = []
    for token in value.split(','):
        token = token.strip()
        if not token:
            continue

        parts = token.split('/')
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ConfigError(f"Invalid repository '{token}', expected 'owner/repo'")

        repositories.append(RepositoryRef(owner=parts[0].strip(), name=parts[1].strip()))

    if not repositories:
        raise ConfigError("Repository list contains no repositories")

    return repositories


def _read_yaml_mapping(path: str, kind: str) -> Dict[str, Any]:
    """YAML 파일을 읽어 최상위 매핑 반환"""
    yaml_file = Path(path)
    if not yaml_file.exists():
        raise ConfigError(f"{kind} file not found: {path}")

    try:
        with open(yaml_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {kind.lower()} file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{kind} file {path} must contain a mapping at the top level")
    return data


def load_routing_rules(rules_path: str) -> List[RoutingRule]:
    """YAML 파일에서 라우팅 규칙 로드"""
    data = _read_yaml_mapping(rules_path, "Rules")
    return _build_rules(data.get('rules') or [])


def _build_rules(raw_rules: List[Dict[str, Any]]) -> List[RoutingRule]:
    if not isinstance(raw_rules, list):
        raise ConfigError("'rules' must be a list")

    rules = []
    for raw in raw_rules:
        try:
            rules.append(RoutingRule(
                label=str(raw['label']),
                destination_id=str(raw.get('destination_id') or ''),
                display_name=str(raw.get('display_name') or ''),
            ))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid routing rule {raw!r}: {e}") from e
    return rules


def _resolve_webhooks(rules: List[RoutingRule]) -> Dict[str, str]:
    """규칙의 destination_id 이름으로 환경 변수에서 webhook URL 조회"""
    webhooks = {}
    for rule in rules:
        if rule.has_destination and rule.destination_id not in webhooks:
            webhooks[rule.destination_id] = os.getenv(rule.destination_id, "")
    return webhooks


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30
    per_page: int = 100


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    github: GitHubConfig
    repositories: List[RepositoryRef]
    rules: List[RoutingRule] = field(default_factory=lambda: list(DEFAULT_RULES))
    webhooks: Dict[str, str] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드 (.env 파일이 있으면 먼저 읽는다)"""
        load_dotenv()

        repositories_value = os.getenv("GITHUB_REPOSITORIES") or os.getenv("GITHUB_REPOSITORY")
        rules_file = os.getenv("RELAY_RULES_FILE")
        rules = load_routing_rules(rules_file) if rules_file else list(DEFAULT_RULES)

        try:
            timeout_seconds = int(os.getenv("GITHUB_TIMEOUT", "30"))
            max_file_size = int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024)))
            backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            github=GitHubConfig(
                token=os.getenv("GITHUB_TOKEN"),
                api_base_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                timeout_seconds=timeout_seconds,
            ),
            repositories=parse_repository_list(repositories_value),
            rules=rules,
            webhooks=_resolve_webhooks(rules),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=max_file_size,
                backup_count=backup_count,
            ),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """
        YAML 파일에서 설정 로드

        토큰과 webhook URL은 비밀값이므로 파일에 없으면 환경 변수에서 읽는다.
        """
        config_data = _read_yaml_mapping(config_path, "Config")

        repositories = config_data.get('repositories', [])
        if isinstance(repositories, list):
            repositories = ','.join(str(r) for r in repositories)

        rules = _build_rules(config_data['rules']) if 'rules' in config_data else list(DEFAULT_RULES)

        try:
            github = GitHubConfig(**(config_data.get('github') or {}))
            logging_config = LoggingConfig(**(config_data.get('logging') or {}))
        except TypeError as e:
            raise ConfigError(f"Invalid section in {config_path}: {e}") from e

        if not github.token:
            github.token = os.getenv("GITHUB_TOKEN")

        return cls(
            github=github,
            repositories=parse_repository_list(repositories),
            rules=rules,
            webhooks=_resolve_webhooks(rules),
            logging=logging_config,
            debug=bool(config_data.get('debug', False)),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # GitHub 토큰 필수 확인
        if not self.github.token:
            errors.append("GITHUB_TOKEN is required")

        if not self.repositories:
            errors.append("At least one repository is required")

        if self.github.per_page <= 0 or self.github.per_page > 100:
            errors.append("per_page must be between 1 and 100")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

    def webhook_for(self, destination_id: str) -> str:
        """목적지의 webhook URL 반환 (설정되지 않았으면 빈 문자열)"""
        return self.webhooks.get(destination_id, "")

    @classmethod
    def load(cls) -> "AppConfig":
        """RELAY_CONFIG_FILE이 지정되면 YAML, 아니면 환경 변수에서 설정 로드"""
        load_dotenv()

        config_path = os.getenv("RELAY_CONFIG_FILE")
        if config_path:
            return cls.from_yaml(config_path)
        return cls.from_env()


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """로깅 설정"""
    level = logging.DEBUG if debug else getattr(logging, config.level.upper())
    logging.basicConfig(level=level, format=config.format)

    # 파일 로깅이 설정된 경우 로테이션 설정
    if config.file_path:
        handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
        handler.setFormatter(logging.Formatter(config.format))

        # 루트 로거에 핸들러 추가
        logging.getLogger().addHandler(handler)
