"""
gl_config -- single public entrypoint for posting configuration.

Responsibility:
    Provides the ONLY way to obtain the posting policy at runtime through
    ``get_posting_config()``.  Returns a validated ``PostingConfig``; the
    bridges turn it into kernel settings and an authorization policy.

Architecture position:
    Configuration -- YAML-driven policy.  This package sits above
    ``gl_kernel``.  The kernel MUST NEVER import from ``gl_config``.

Failure modes:
    - ``FileNotFoundError`` -- the policy file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- validation failures.

Audit relevance:
    Every successful ``get_posting_config()`` call emits a
    ``POSTING_CONFIG_TRACE`` log entry containing the config_id, version,
    checksum and rule count.  This ties each validated journal back to the
    exact policy version that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gl_config.loader import load_yaml_file, parse_posting_config
from gl_config.schema import PostingConfig
from gl_config.validator import validate_posting_config

_logger = logging.getLogger("gl_kernel.config")

# Shipped default policy
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_posting_config(config_path: Path | None = None) -> PostingConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a policy YAML file.  Defaults to
            gl_config/sets/default.yaml.

    Returns:
        A validated PostingConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = parse_posting_config(load_yaml_file(path))

    validation = validate_posting_config(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("posting_config_warning", extra={"warning": warning})

    _logger.info(
        "POSTING_CONFIG_TRACE",
        extra={
            "trace_type": "POSTING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "base_currency": config.fx.base_currency,
            "sod_rule_count": len(config.sod_rules),
            "source": str(path),
        },
    )
    return config


__all__ = ["DEFAULT_CONFIG_PATH", "PostingConfig", "get_posting_config"]
