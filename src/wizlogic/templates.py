"""
Step content templates.

    {{field}}         replaced with the field's current value
    {{field:table}}   the field's value looked up in a schema table

A plain placeholder whose field has no value renders as an empty
string; a path segment it leaves empty is removed, so
"{{framework}}/{{frameworkVariant}}/{{library}}" with no variant
renders as "remix/supabasejs". A table lookup with no matching
entry raises KeyError; the step resolver turns that into a
StepRenderError for the one step.
"""

import re
from typing import Any, Iterator, Mapping, Optional, Tuple

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)(?::([A-Za-z_][A-Za-z0-9_]*))?\s*\}\}")

_DROPPED = "\x00"


def placeholders(template: Optional[str]) -> Iterator[Tuple[str, Optional[str]]]:
    """Yield (field_id, table_name_or_None) for each placeholder."""
    if not template:
        return
    for m in PLACEHOLDER_RE.finditer(template):
        yield m.group(1), m.group(2)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_template(template: Optional[str], values: Mapping[str, Any],
                    tables: Optional[Mapping[str, Mapping[str, str]]] = None) -> str:
    """
    Substitute placeholders in `template`.

    Raises:
        KeyError: unknown table, or a table with no entry for the value
    """
    if not template:
        return ""
    tables = tables or {}

    def _sub(m: re.Match) -> str:
        field_id, table_name = m.group(1), m.group(2)
        value = values.get(field_id)
        if table_name is not None:
            table = tables[table_name]
            return table[_format_value(value)]
        if value is None:
            return _DROPPED
        return _format_value(value)

    rendered = PLACEHOLDER_RE.sub(_sub, template)
    if _DROPPED not in rendered:
        return rendered
    # Only segments emptied by a missing value are removed
    segments = [seg for seg in rendered.split("/") if not seg or seg.strip(_DROPPED)]
    return "/".join(segments).replace(_DROPPED, "")
