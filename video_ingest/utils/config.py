"""Configuration management"""

import os
from pathlib import Path
from typing import Optional
import yaml


class Config:
    """Application configuration"""
    
    def __init__(self, config_path: Optional[Path] = None):
        """Load configuration from YAML file and environment variables"""
        if config_path is None:
            # Default to config/config.yaml relative to project root
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "config.yaml"
        
        self.config_path = Path(config_path)
        self._config = self._load_yaml(self.config_path)
        self._apply_env_overrides()
    
    def _load_yaml(self, config_path: Path) -> dict:
        """Load YAML configuration file"""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    
    def _apply_env_overrides(self):
        """Apply environment variable overrides"""
        if db_url := os.getenv("DATABASE_URL"):
            self._config.setdefault("database", {})["url"] = db_url
        
        # Analysis service
        analysis = self._config.setdefault("analysis", {})
        if analysis_url := os.getenv("ANALYSIS_URL"):
            analysis["url"] = analysis_url
        if token := os.getenv("API_TOKEN"):
            analysis["token"] = token
        if workspace := os.getenv("ANALYSIS_WORKSPACE"):
            analysis["workspace"] = workspace
        
        # Gated source credentials are never kept in the YAML file
        if username := os.getenv("NATO_USERNAME"):
            self._config.setdefault("credentials", {}).setdefault("nato_multimedia", {})["username"] = username
        if password := os.getenv("NATO_PASSWORD"):
            self._config.setdefault("credentials", {}).setdefault("nato_multimedia", {})["password"] = password
        
        if headless := os.getenv("BROWSER_HEADLESS"):
            self._config.setdefault("browser", {})["headless"] = headless.lower() not in ("0", "false", "no")
        
        if redis_url := os.getenv("REDIS_URL"):
            celery = self._config.setdefault("celery", {})
            celery["broker_url"] = redis_url
            celery["result_backend"] = redis_url
    
    @property
    def database(self) -> dict:
        """Database configuration"""
        return self._config.get("database", {})
    
    @property
    def retry(self) -> dict:
        """Retry/backoff configuration"""
        return self._config.get("retry", {})
    
    @property
    def browser(self) -> dict:
        """Browser driver configuration"""
        return self._config.get("browser", {})
    
    @property
    def ingestion(self) -> dict:
        """Ingestion configuration"""
        return self._config.get("ingestion", {})
    
    @property
    def analysis(self) -> dict:
        """Analysis service configuration"""
        return self._config.get("analysis", {})
    
    @property
    def celery(self) -> dict:
        """Celery broker configuration"""
        return self._config.get("celery", {})
    
    def credentials_for(self, source: str) -> dict:
        """Credentials for a gated source (empty if none configured)"""
        return self._config.get("credentials", {}).get(source, {}) or {}
    
    def get(self, key: str, default=None):
        """Get configuration value by dot-separated key"""
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load and return configuration"""
    return Config(config_path)
