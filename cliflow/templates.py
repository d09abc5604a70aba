"""Help, documentation and completion templates, and the renderer that fills them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined

APP_HELP_TEMPLATE = """NAME:
   {{ name }}{% if usage %} - {{ usage }}{% endif %}

USAGE:
   {% if usage_text %}{{ usage_text }}{% else %}{{ help_name }} {% if visible_flags() %}[global options]{% endif %}{% if commands %} command [command options]{% endif %} {% if args_usage %}{{ args_usage }}{% else %}[arguments...]{% endif %}{% endif %}{% if version %}{% if not hide_version %}

VERSION:
   {{ version }}{% endif %}{% endif %}{% if description %}

DESCRIPTION:
   {{ description }}{% endif %}{% if authors|length %}

AUTHOR{% if authors|length != 1 %}S{% endif %}:
   {% for author in authors %}{% if not loop.first %}
   {% endif %}{{ author }}{% endfor %}{% endif %}{% if visible_commands() %}

COMMANDS:{% for category in visible_categories() %}{% if category.name %}

   {{ category.name }}:{% for command in category.visible_commands() %}
     {{ command.names()|join(", ") }}\t{{ command.usage }}{% endfor %}{% else %}{% for command in category.visible_commands() %}
   {{ command.names()|join(", ") }}\t{{ command.usage }}{% endfor %}{% endif %}{% endfor %}{% endif %}{% if visible_flags() %}

GLOBAL OPTIONS:
   {% for option in visible_flags() %}{% if not loop.first %}
   {% endif %}{{ option }}{% endfor %}{% endif %}{% if copyright %}

COPYRIGHT:
   {{ copyright }}{% endif %}
"""

COMMAND_HELP_TEMPLATE = """NAME:
   {{ help_name }} - {{ usage }}

USAGE:
   {% if usage_text %}{{ usage_text }}{% else %}{{ help_name }}{% if visible_flags() %} [command options]{% endif %} {% if args_usage %}{{ args_usage }}{% else %}[arguments...]{% endif %}{% endif %}{% if category %}

CATEGORY:
   {{ category }}{% endif %}{% if description %}

DESCRIPTION:
   {{ description }}{% endif %}{% if visible_flags() %}

OPTIONS:
   {% for flag in visible_flags() %}{{ flag }}
   {% endfor %}{% endif %}
"""

SUBCOMMAND_HELP_TEMPLATE = """NAME:
   {{ help_name }} - {% if description %}{{ description }}{% else %}{{ usage }}{% endif %}

USAGE:
   {% if usage_text %}{{ usage_text }}{% else %}{{ help_name }} command{% if visible_flags() %} [command options]{% endif %} {% if args_usage %}{{ args_usage }}{% else %}[arguments...]{% endif %}{% endif %}

COMMANDS:{% for category in visible_categories() %}{% if category.name %}

   {{ category.name }}:{% for command in category.visible_commands() %}
     {{ command.names()|join(", ") }}\t{{ command.usage }}{% endfor %}{% else %}{% for command in category.visible_commands() %}
   {{ command.names()|join(", ") }}\t{{ command.usage }}{% endfor %}{% endif %}{% endfor %}{% if visible_flags() %}

OPTIONS:
   {% for flag in visible_flags() %}{{ flag }}
   {% endfor %}{% endif %}
"""

MARKDOWN_DOC_TEMPLATE = """% {{ app.name }}(8) {{ app.description }}

% {{ app.author }}

# NAME

{{ app.name }}{% if app.usage %} - {{ app.usage }}{% endif %}

# SYNOPSIS

{{ app.name }}
{% if synopsis_args %}
```
{% for v in synopsis_args %}{{ v }}{% endfor %}```
{% endif %}{% if app.usage_text %}
# DESCRIPTION

{{ app.usage_text }}
{% endif %}
**Usage**:

```
{{ app.name }} [GLOBAL OPTIONS] command [COMMAND OPTIONS] [ARGUMENTS...]
```
{% if global_args %}
# GLOBAL OPTIONS
{% for v in global_args %}
{{ v }}{% endfor %}
{% endif %}{% if commands %}
# COMMANDS
{% for v in commands %}
{{ v }}{% endfor %}{% endif %}"""

FISH_COMPLETION_TEMPLATE = """# {{ app.name }} fish shell completion

function __fish_{{ app.name }}_no_subcommand --description 'Test if there has been any subcommand yet'
    for i in (commandline -opc)
        if contains -- $i{% for v in all_commands %} {{ v }}{% endfor %}
            return 1
        end
    end
    return 0
end

{% for v in completions %}{{ v }}
{% endfor %}"""

_ENVIRONMENT = Environment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def _join(items: Iterable[Any], separator: str) -> str:
    return separator.join(str(item) for item in items)


def _namespace(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    return {
        attr: getattr(data, attr)
        for attr in dir(data)
        if not attr.startswith("_")
    }


def render(template: str, data: Any, extra: Mapping[str, Any] | None = None) -> str:
    """Fill ``template`` with the attributes (or keys) of ``data``.

    ``join(items, sep)`` is always available, the whole object is ``data``
    unless it defines that name itself, and ``extra`` adds or overrides names.
    Referring to a name that does not exist raises ``jinja2.UndefinedError``.
    """
    context: dict[str, Any] = {"join": _join}
    context.update(_namespace(data))
    context.setdefault("data", data)
    if extra:
        context.update(extra)
    return _ENVIRONMENT.from_string(template).render(context)


def align_columns(text: str) -> str:
    """Align tab-separated cells into space-padded columns.

    Consecutive lines sharing a column form a block; each column is as wide
    as its widest cell plus two spaces. The last cell of a line is not padded.
    """
    lines = [line.split("\t") for line in text.split("\n")]
    output: list[str] = []
    widths: list[int] = []

    def write_lines(start: int, end: int) -> None:
        for cells in lines[start:end]:
            parts = []
            for index, cell in enumerate(cells):
                parts.append(cell)
                if index < len(widths):
                    parts.append(" " * (widths[index] - len(cell)))
            output.append("".join(parts))

    def format_block(line0: int, line1: int) -> None:
        column = len(widths)
        current = line0
        while current < line1:
            if column >= len(lines[current]) - 1:
                current += 1
                continue
            write_lines(line0, current)
            line0 = current
            width = 1
            while current < line1 and column < len(lines[current]) - 1:
                width = max(width, len(lines[current][column]) + 2)
                current += 1
            widths.append(width)
            format_block(line0, current)
            widths.pop()
            line0 = current
        write_lines(line0, line1)

    format_block(0, len(lines))
    return "\n".join(output)