from __future__ import annotations

import os
from functools import partial
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader

from proto2slate.models import Field, Message, ProtoSchema

DEFAULT_TITLE = "API Reference"
TEMPLATE_NAME = "slate.md.j2"


class UnresolvedReferenceError(KeyError):
    """Raised when an rpc call names a request/response message that was never declared."""


def camel_case(name: str) -> str:
    """Convert a proto field name to the camelCase used in code samples.

    ``user_id`` -> ``userId``. Letters after the first one in each segment keep
    their case.
    """
    parts = name.split("_")
    return parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def proto_stem(proto_file_name: str) -> str:
    """File name up to its first dot (``api.v1.proto`` -> ``api``)."""
    return os.path.basename(proto_file_name).split(".", 1)[0]


def _type_link(schema: ProtoSchema, type_name: str) -> str:
    if schema.is_known_type(type_name):
        return f"[{type_name}](#{type_name.lower()})"
    return type_name


def _doc_type(schema: ProtoSchema, field: Field) -> str:
    """Type column of a field table."""
    if field.is_map:
        return f"map&lt;{field.map_key}, {_type_link(schema, field.type_name)}&gt;"
    type_str = _type_link(schema, field.type_name)
    return f"{type_str} array" if field.is_repeated else type_str


def _code_type(schema: ProtoSchema, field: Field) -> str:
    """Placeholder value for a field inside a code sample."""
    type_str = _type_link(schema, field.type_name)
    if field.is_map:
        return f"{{<{field.map_key}>: <{type_str}>}}"
    return f"<{type_str}[]>" if field.is_repeated else f"<{type_str}>"


def _resolve_message(schema: ProtoSchema, type_name: str) -> Message:
    try:
        return schema.messages[type_name]
    except KeyError:
        raise UnresolvedReferenceError(
            f"Message '{type_name}' is referenced by an rpc call but never declared"
        ) from None


def _get_template_env(schema: ProtoSchema) -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["camel"] = camel_case
    env.filters["lower_first"] = lower_first
    env.filters["doc_type"] = partial(_doc_type, schema)
    env.filters["code_type"] = partial(_code_type, schema)
    env.globals["resolve_message"] = partial(_resolve_message, schema)
    return env


def _template_context(schema: ProtoSchema, proto_file_name: str, title: str) -> Dict:
    return {
        "title": title,
        "proto_basename": os.path.basename(proto_file_name),
        "proto_stem": proto_stem(proto_file_name),
        "services": schema.services,
        "messages": list(schema.messages.values()),
        "enums": list(schema.enums.values()),
    }


def generate_slate(
    schema: ProtoSchema,
    proto_file_name: str,
    title: str = DEFAULT_TITLE,
) -> str:
    """Render the Slate markdown document for a parsed proto file."""
    template = _get_template_env(schema).get_template(TEMPLATE_NAME)
    return template.render(_template_context(schema, proto_file_name, title))


def write_slate(
    schema: ProtoSchema,
    proto_file_name: str,
    output_path: str,
    title: str = DEFAULT_TITLE,
) -> str:
    """Stream the rendered document into ``output_path``.

    Chunks are written as the template produces them, so a rendering error
    leaves the document written up to that point.

    Returns the output path.
    """
    template = _get_template_env(schema).get_template(TEMPLATE_NAME)
    stream = template.stream(_template_context(schema, proto_file_name, title))
    with open(output_path, "w", encoding="utf-8", newline="\n") as out:
        stream.dump(out)
    return output_path
