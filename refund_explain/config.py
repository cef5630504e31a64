"""Configuration management for the refund explanation client."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

API_URL_ENV = "REFUND_API_URL"


class Configuration:
    """Manages configuration and environment variables for the explain client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to load. Defaults to ``config.yaml`` next
                to this module.
        """
        self.load_env()  # Load .env for the API URL override
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary.
        """
        return self._config

    def get_explain_config(self) -> dict[str, Any]:
        """Get explain endpoint configuration from YAML.

        Returns:
            Explain configuration dictionary with validated values.

        Raises:
            ValueError: If required explain parameters are missing or invalid.
        """
        explain_config = self._config.get("explain", {})

        required_keys = [
            "api_base_url", "explain_path", "default_question",
            "use_backend", "require_event_stream",
        ]
        for key in required_keys:
            if key not in explain_config:
                raise ValueError(
                    f"explain.{key} must be explicitly configured in config.yaml"
                )

        api_base_url = os.getenv(API_URL_ENV) or explain_config["api_base_url"]
        if not isinstance(api_base_url, str) or not api_base_url.startswith(
            ("http://", "https://")
        ):
            raise ValueError(
                f"explain.api_base_url must be an http(s) URL, got {api_base_url!r}"
            )

        question = explain_config["default_question"]
        if not isinstance(question, str) or not question.strip():
            raise ValueError("explain.default_question must be a non-empty string")

        for flag in ("use_backend", "require_event_stream"):
            if not isinstance(explain_config[flag], bool):
                raise ValueError(f"explain.{flag} must be a boolean")

        return {
            "api_base_url": api_base_url,
            "explain_path": explain_config["explain_path"],
            "default_question": question,
            "use_backend": explain_config["use_backend"],
            "require_event_stream": explain_config["require_event_stream"],
        }

    @property
    def explain_url(self) -> str:
        """Full URL of the explain endpoint."""
        explain_config = self.get_explain_config()
        base_url = explain_config["api_base_url"].rstrip("/")
        path = explain_config["explain_path"].lstrip("/")
        return f"{base_url}/{path}"

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration from YAML.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self._config.get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout",
            "pool_timeout", "chunk_size",
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured in config.yaml"
                )

        # read_timeout may be null: wait indefinitely for the next chunk
        for key in ("connect_timeout", "write_timeout", "pool_timeout"):
            if http_config[key] <= 0:
                raise ValueError(f"http_client.{key} must be positive")
        read_timeout = http_config["read_timeout"]
        if read_timeout is not None and read_timeout <= 0:
            raise ValueError("http_client.read_timeout must be positive or null")
        chunk_size = http_config["chunk_size"]
        if chunk_size is not None and chunk_size < 1:
            raise ValueError("http_client.chunk_size must be at least 1 or null")

        return {key: http_config[key] for key in required_keys}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        logging_config = self._config.get("logging", {})
        return {"level": logging_config.get("level", "INFO")}
