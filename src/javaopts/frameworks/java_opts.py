"""End-user JAVA_OPTS configuration, always applied last.

Configuration comes from ``JBP_CONFIG_JAVA_OPTS`` or, when that is unset,
``<app>/config/java_opts.yml``::

    from_environment: true            # append the launch-time $JAVA_OPTS
    java_opts: -Xss1m -Dgreeting='hello world'

``java_opts`` may be a YAML list or a single shell-quoted string. Each
option's value is escaped so the launcher's shell reproduces it literally.
When ``from_environment`` is set the configured options come first and
``$JAVA_OPTS`` follows, letting the environment override the file.

The file is looked up under the ``app_dir`` the caller passes (the CLI's
``--app-dir``) rather than under a buildpack installation root. Without
``app_dir`` only the environment variable is consulted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator

from javaopts.errors import ConfigurationError
from javaopts.fragment import Priority
from javaopts.shellwords import escape_options, tokenize
from javaopts.store import write_fragment

from .base import parse_jbp_config, validate_config

if TYPE_CHECKING:
    from collections.abc import Mapping

    from javaopts.fragment import Fragment
    from javaopts.store import FragmentStore

logger = logging.getLogger(__name__)

CONFIG_VAR = "JBP_CONFIG_JAVA_OPTS"
CONFIG_FILE = Path("config") / "java_opts.yml"
FRAGMENT_NAME = "user_java_opts"


class JavaOptsConfig(BaseModel):
    """User JAVA_OPTS settings."""

    from_environment: bool = True
    java_opts: list[str] = Field(default_factory=list)

    @field_validator("java_opts", mode="before")
    @classmethod
    def split_string_form(cls, v: Any) -> Any:
        """Accept the legacy space-separated string form."""
        if v is None:
            return []
        if isinstance(v, str):
            return tokenize(v)
        if isinstance(v, list):
            return [str(item) for item in v if item is not None]
        return v


def load_java_opts_config(
    environ: Mapping[str, str], app_dir: Path | None = None
) -> JavaOptsConfig:
    """Read the environment override, else the application's config file.

    Raises:
        ConfigurationError: On unparsable YAML or an invalid setting.
        UnterminatedQuoteError: If the string form has an open quote.
    """
    raw = environ.get(CONFIG_VAR)
    source = CONFIG_VAR
    if not raw and app_dir is not None:
        path = Path(app_dir) / CONFIG_FILE
        source = str(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raw = None
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e

    data = parse_jbp_config(raw, source=source)
    return validate_config(JavaOptsConfig, data, source=source)


def user_java_opts(config: JavaOptsConfig) -> str:
    """Render the fragment content for the user's settings."""
    configured = escape_options(config.java_opts)
    if not config.from_environment:
        return configured
    return f"{configured} $JAVA_OPTS" if configured else "$JAVA_OPTS"


def contribute_java_opts(
    store: FragmentStore,
    environ: Mapping[str, str],
    app_dir: Path | None = None,
) -> Fragment | None:
    """Write the user's options at the maximum priority."""
    config = load_java_opts_config(environ, app_dir)
    content = user_java_opts(config)
    if not content:
        return None
    if config.java_opts:
        logger.info("Adding configured JAVA_OPTS: %s", " ".join(config.java_opts))
    return write_fragment(store, Priority.USER, FRAGMENT_NAME, content)
