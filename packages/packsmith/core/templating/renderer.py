"""Template evaluation with Jinja2."""

from __future__ import annotations

import logging

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, UndefinedError

from packsmith.core.errors import TemplateError
from packsmith.core.templating.helpers import TemplateScope

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Evaluates source, header and config templates.

    Features:
    - Jinja2 strict mode (StrictUndefined)
    - Fail-fast on missing variables
    - Trailing newlines preserved so concatenated sources keep their layout
    """

    def __init__(self) -> None:
        self.env = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.evaluations = 0

    def evaluate(self, source: str, scope: TemplateScope, *, origin: str = "<template>") -> str:
        """Render ``source`` against ``scope``.

        Args:
            source: Template text
            scope: Helper scope for this evaluation
            origin: Label used in error messages (buildable name or file path)

        Returns:
            Rendered text

        Raises:
            TemplateError: If rendering fails (missing variables, syntax errors, etc.)
        """
        self.evaluations += 1
        try:
            template = self.env.from_string(source)
            return template.render(**scope.variables())

        except UndefinedError as e:
            raise TemplateError(f"Missing variable in {origin}: {e}") from e

        except TemplateSyntaxError as e:
            raise TemplateError(
                f"Invalid template syntax in {origin} (line {e.lineno}): {e}"
            ) from e

        except TemplateError:
            raise

        except Exception as e:
            raise TemplateError(f"Template rendering failed in {origin}: {e}") from e
