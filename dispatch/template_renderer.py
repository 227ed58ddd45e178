from jinja2 import Environment, BaseLoader, StrictUndefined, Template, meta
from typing import Dict, Any, List, Tuple
import logging

logger = logging.getLogger("launch_notifier")

class TemplateRenderer:
    def __init__(self):
        # StrictUndefined raises an error if a variable is missing
        self.text_env = Environment(loader=BaseLoader(), undefined=StrictUndefined)
        self.html_env = Environment(loader=BaseLoader(), undefined=StrictUndefined, autoescape=True)
        self._template_cache: Dict[Tuple[str, bool], Template] = {}

    def _get_template(self, template_str: str, html: bool) -> Template:
        key = (template_str, html)
        if key not in self._template_cache:
            env = self.html_env if html else self.text_env
            self._template_cache[key] = env.from_string(template_str)
        return self._template_cache[key]

    def missing_variables(self, template_str: str, context: Dict[str, Any]) -> List[str]:
        """
        Returns the variables the template references that `context` lacks.
        A template that cannot be parsed reports its syntax error instead.
        """
        try:
            ast = self.text_env.parse(template_str)
        except Exception as e:
            logger.error(f"Template validation failed: {e}")
            return [f"Template Syntax Error: {e}"]
        required_vars = meta.find_undeclared_variables(ast)
        return sorted(var for var in required_vars if var not in context)

    def render(self, template_str: str, context: Dict[str, Any], html: bool = False) -> str:
        """Renders a string template; user-supplied values are escaped when `html` is set."""
        if not template_str:
            return ""
        try:
            return self._get_template(template_str, html).render(**context)
        except Exception as e:
            logger.error(f"Error rendering template: {e}")
            raise ValueError(f"Template rendering failed: {e}")
