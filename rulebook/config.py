import os

import yaml

CONFIG_ENV_VAR = "RULEBOOK_CONFIG"
DEBUG_ENV_VAR = "RULEBOOK_DEBUG"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONFIG_YAML = """
# RULEBOOK CONFIGURATION
# ----------------------
# stories_dir holds the *.yaml stories offered in the menu.
# save_dir is where 'save' writes one JSON file per story.

stories_dir: stories/yaml
save_dir: saves
debug_mode: false
"""

DEFAULTS = yaml.safe_load(DEFAULT_CONFIG_YAML)


def config_path():
    return os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config(path=None):
    """
    Loads config.yaml or creates the default one if missing.
    RULEBOOK_DEBUG in the environment forces debug mode on.
    """
    path = path or config_path()
    if not os.path.exists(path):
        with open(path, "w") as f:
            f.write(DEFAULT_CONFIG_YAML.strip() + "\n")

    with open(path, "r") as f:
        loaded = yaml.safe_load(f) or {}

    config = dict(DEFAULTS)
    config.update(loaded)
    if os.getenv(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes", "on"):
        config["debug_mode"] = True
    return config


def save_config(config, path=None):
    path = path or config_path()
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False)
