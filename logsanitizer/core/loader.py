# logsanitizer/core/loader.py

"""Address pattern loader for the sanitizer engine."""

import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

from logsanitizer.core.definitions import EntityType
from logsanitizer.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_PATH = Path(__file__).parent / "patterns.yaml"


class PatternLoader:
    """Singleton loader for the address grammars.

    Loads patterns.yaml once and caches it for the process lifetime. The
    loaded definitions are never mutated afterwards, so the instance can be
    shared between threads.
    """

    _instance: Optional["PatternLoader"] = None
    _config: Dict[str, Any] = {}
    _loaded: bool = False

    def __new__(cls, config_path: Optional[Path] = None) -> "PatternLoader":
        if config_path is not None:
            # Explicit paths bypass the singleton (used for alternate grammars)
            return super().__new__(cls)
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is not None:
            self._config = self._load_config(config_path)
            self._loaded = True
        elif not PatternLoader._loaded:
            PatternLoader._config = self._load_config(DEFAULT_PATTERNS_PATH)
            PatternLoader._loaded = True

    def _load_config(self, config_path: Path) -> Dict[str, Any]:
        """Loads and validates a patterns file.

        Raises:
            ConfigurationError: If file is missing, invalid, or incomplete.
        """
        try:
            if not config_path.exists():
                error_msg = f"Configuration file not found: {config_path}"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)

            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)

            if not config or not isinstance(config, dict):
                raise ConfigurationError("Configuration file is empty or invalid")

            self._validate_config(config)

            logger.info(
                "Address patterns loaded successfully",
                extra={
                    "config_path": str(config_path),
                    "pattern_count": sum(
                        len(v) for v in config["patterns"].values()
                    ),
                },
            )
            return config

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to parse {config_path.name}: {e}") from e
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Configuration loading failed: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validates that every address family has at least one pattern.

        Raises:
            ConfigurationError: If required sections or keys are missing.
        """
        patterns = config.get("patterns")
        if not isinstance(patterns, dict):
            raise ConfigurationError("Missing required configuration section: patterns")

        missing = [e for e in EntityType.ALL if not patterns.get(e)]
        if missing:
            error_msg = f"Missing patterns for address families: {missing}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        for entity_type in EntityType.ALL:
            for definition in patterns[entity_type]:
                if not isinstance(definition, dict) or not definition.get("regex"):
                    raise ConfigurationError(
                        f"Pattern for {entity_type} has no 'regex' key: {definition}"
                    )

    @classmethod
    def get_instance(cls) -> "PatternLoader":
        """Returns the singleton instance of PatternLoader."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_patterns(self, entity_type: str) -> List[Dict[str, Any]]:
        """Returns regex patterns for a specific address family.

        Args:
            entity_type: Entity type constant (e.g., EntityType.IPV4)

        Returns:
            List of pattern dictionaries with 'name', 'regex', 'score' keys
        """
        patterns = self._config.get("patterns", {}).get(entity_type, [])
        return [
            {
                "name": p.get("name", f"{entity_type.lower()}_{i}"),
                "regex": p["regex"].strip(),
                "score": float(p.get("score", 0.95)),
            }
            for i, p in enumerate(patterns or [])
        ]
