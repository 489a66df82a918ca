"""User-data template loading."""
import logging
from pathlib import Path

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError

from metaserver.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# user-data is YAML or a shell script, never HTML
_environment = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def compile_userdata_template(source: str) -> Template:
    """Compile user-data template text; surrounding whitespace is dropped.

    Raises:
        ConfigurationError: the template does not parse
    """
    try:
        return _environment.from_string(source.strip())
    except TemplateSyntaxError as e:
        raise ConfigurationError(f"invalid user-data template (line {e.lineno}): {e.message}") from e


def load_userdata_template(path: str | Path) -> Template:
    """Read and compile the user-data template file once at startup.

    Raises:
        ConfigurationError: the file cannot be read or does not parse
    """
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"failed to read userdata template file {path}: {e}") from e

    template = compile_userdata_template(source)
    logger.info("Loaded user-data template from %s", path)
    return template
