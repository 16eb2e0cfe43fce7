import datetime
import os
from jinja2 import Environment, BaseLoader, TemplateError


class FilenameTemplater:
    """
    Handles generation of filenames using Jinja2 templates.
    """

    def __init__(self) -> None:
        # Minimal environment, no filesystem access
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, pattern: str, context: dict) -> str:
        """
        Renders the filename pattern with the provided context.
        Falls back to "<original>_sorted" if rendering fails.
        """
        original = context.get("original_name", "output")
        try:
            template = self.env.from_string(pattern)
            render_context = {"date": datetime.date.today().isoformat(), **context}
            rendered = template.render(render_context).strip()
        except TemplateError:
            return f"{original}_sorted"
        if not rendered:
            return f"{original}_sorted"
        return rendered


def render_export_filename(file_path: str, pattern: str, **extra: str) -> str:
    """
    Output stem for a source file, without extension.
    """
    original_name = os.path.splitext(os.path.basename(file_path))[0]
    return FilenameTemplater().render(pattern, {"original_name": original_name, **extra})
