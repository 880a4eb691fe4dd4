import os
import logging
import yaml
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
CONFIG_PATH = os.getenv("CONFIG_PATH", os.path.join(PROJECT_ROOT, "config", "config.yaml"))

# Environment variable -> (section, key) it overrides
ENV_OVERRIDES = {
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FILE": ("logging", "log_file"),
    "GEMINI_MODEL": ("gemini", "model"),
    "EXPLANATION_TIMEOUT_SECONDS": ("explanations", "timeout_seconds"),
    "RATE_LIMIT": ("rate_limit", "limit"),
}


def apply_env_overrides(cfg: dict) -> dict:
    """Let deployments override single settings without shipping another YAML file."""
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is None:
            continue
        cfg.setdefault(section, {})[key] = yaml.safe_load(value)
        logging.info(f"Config override from {env_var}: {section}.{key}")
    return cfg


def load_config(path: str = CONFIG_PATH) -> dict:
    """
    Read the YAML settings file and apply environment overrides.
    The service cannot start without it, so every failure ends in SystemExit.
    """
    try:
        with open(path, "r") as f:
            cfg = yaml.safe_load(f)
    except FileNotFoundError:
        logging.error(f"❌ Config not found at {path}")
        raise SystemExit(f"Config not found: {path}")
    except yaml.YAMLError as e:
        logging.error(f"❌ Error parsing {path}: {e}")
        raise SystemExit(f"Error parsing config: {e}")

    if not isinstance(cfg, dict):
        logging.error(f"❌ Config at {path} is empty or not a mapping")
        raise SystemExit(f"Config is empty or invalid: {path}")
    return apply_env_overrides(cfg)


config = load_config()
