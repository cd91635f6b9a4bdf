"""IntelliQueue CLI main entrypoint."""

import logging

import click
import yaml

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("intelliqueue")


def load_config_file(config_path: str) -> dict:
    """Read an intelliqueue YAML file; an empty file means no overrides."""
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise click.ClickException(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Config file {config_path} must contain a mapping at the top level")
    return data


def resolve_setting(cli_value, config_data: dict, path: str, default=None):
    """
    Pick a setting: the CLI flag wins, then the config file, then the default.

    `path` walks nested sections with dots, so "worker.failure_rate" reads
    config_data["worker"]["failure_rate"]. A missing key or an explicit null
    in the file falls back to the default.
    """
    if cli_value is not None:
        return cli_value

    node = config_data
    for section in path.split("."):
        if not isinstance(node, dict):
            return default
        node = node.get(section)
    return default if node is None else node


@click.group()
@click.version_option(package_name="intelliqueue")
def main() -> None:
    """IntelliQueue: task scheduler with retries and a notification log."""
    pass


# Import commands to register them with the main group
from . import simulate_cli  # noqa: E402, F401
