"""Built-in JAVA_OPTS producers and the staging loop."""

from .base import Producer, parse_jbp_config
from .debug import contribute_debug
from .java_opts import contribute_java_opts
from .jmx import contribute_jmx
from .jre import contribute_jre
from .staging import DEFAULT_PRODUCERS, stage

__all__ = [
    "DEFAULT_PRODUCERS",
    "Producer",
    "contribute_debug",
    "contribute_java_opts",
    "contribute_jmx",
    "contribute_jre",
    "parse_jbp_config",
    "stage",
]
