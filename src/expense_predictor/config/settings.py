from pathlib import Path
import json
from typing import Dict, Any

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (in project root, gitignored)
PROJECT_ROOT = Path(__file__).parents[3]
USER_CONFIG_DIR = PROJECT_ROOT / "config"

DEFAULT_PREDICTOR_CONFIG: Dict[str, Any] = {
    "min_evidence": 4,
    "missing_diff_default": 3.0,
    "top_k": 3,
    "warmup": 211,
    "date_format": "%d.%m.%Y",
}


class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'parsers.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        for config_dir in (USER_CONFIG_DIR, PACKAGE_CONFIG_DIR):
            config_path = config_dir / config_name
            if config_path.exists():
                with open(config_path) as f:
                    return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {USER_CONFIG_DIR / config_name}\n"
            f" - {PACKAGE_CONFIG_DIR / config_name}"
        )

    @staticmethod
    def load_parsers_config() -> Dict[str, Any]:
        """Load parsers registry configuration"""
        return ConfigLoader.load_config('parsers.json')

    @staticmethod
    def load_predictor_config() -> Dict[str, Any]:
        """
        Load predictor tuning, filling any missing keys with built-in defaults.
        """
        config = dict(DEFAULT_PREDICTOR_CONFIG)
        config.update(ConfigLoader.load_config('predictor.json'))
        return config
