#!/usr/bin/env python3
"""
Centralized configuration for the autonomous task selection engine
Loads all settings from config.yaml - NO HARDCODING

The default config.yaml ships inside the ``config`` package; point the
TASK_SELECTOR_CONFIG environment variable at another file to override it.
"""

import os
import yaml
import logging
from typing import Dict, Any

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.yaml")
CONFIG_PATH = os.environ.get("TASK_SELECTOR_CONFIG", DEFAULT_CONFIG_PATH)


# Load configuration from config.yaml
def _load_config() -> Dict[str, Any]:
    """Load all configuration from config.yaml"""
    try:
        with open(CONFIG_PATH, 'r') as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logging.error(f"Failed to load {CONFIG_PATH}: {e}")
        raise RuntimeError(f"Cannot load configuration: {e}")

# Load the main configuration
_cfg = _load_config()


# === CONFIGURATION VALIDATION ===
def validate_config():
    """Validate that all required configuration sections are present"""
    required_sections = ["task_selector", "task_catalog"]

    missing_sections = []
    for section in required_sections:
        if section not in _cfg or not _cfg[section]:
            missing_sections.append(section)

    if missing_sections:
        raise RuntimeError(f"Missing required configuration sections: {missing_sections}")

    logging.info("✅ Configuration validation passed - all sections present")

# Validate configuration on import
validate_config()

# === PUBLIC API ===

def get_config() -> Dict[str, Any]:
    """Get the full configuration dictionary."""
    return _cfg

def reload_config() -> Dict[str, Any]:
    """Reload configuration from config.yaml and return the new config."""
    global _cfg
    _cfg = _load_config()
    validate_config()
    return _cfg

logging.info(f"✅ Configuration loaded from {CONFIG_PATH} - {len(_cfg)} sections")
logging.info(f"📋 Loaded {len(_cfg['task_catalog'])} catalog entries")
