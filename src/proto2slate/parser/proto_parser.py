from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from proto2slate.models import EnumDef, Field, Message, ProtoSchema, RpcCall, Service
from proto2slate.parser.line_scanner import (
    LINE_COMMENTS,
    collect_comment,
    scan_lines,
    strip_comment,
)

SHELL_TAG = "shell: "
STREAM_PREFIX = "stream "


class _BodyState(Enum):
    SCANNING_FIELDS = auto()
    INSIDE_NESTED_BLOCK = auto()


@dataclass
class _ExtractionContext:
    """State carried through the forward scan."""

    schema: ProtoSchema
    current_service: Optional[Service] = None


def parse_proto_file(file_path: str) -> ProtoSchema:
    """Parse a .proto file into services, messages and enums."""
    text = Path(file_path).read_text(encoding="utf-8")
    return parse_proto_text(text)


def parse_proto_text(text: str) -> ProtoSchema:
    """Extract declarations from proto source with a single forward scan.

    Declarations are recognised by line prefix only. The cursor moves one
    line at a time, so declarations inside message bodies are seen too.
    """
    lines = scan_lines(text)
    ctx = _ExtractionContext(schema=ProtoSchema())

    i = 0
    while i < len(lines):
        line = lines[i].lstrip()

        if line.startswith("service "):
            service = _parse_service(lines, i, line)
            ctx.schema.services.append(service)
            ctx.current_service = service
        elif line.startswith("rpc "):
            # rpc outside any service has no owner to attach to
            if ctx.current_service is not None:
                ctx.current_service.calls.append(_parse_rpc(lines, i, line))
        elif line.startswith("message "):
            message = _parse_message(lines, i, line)
            ctx.schema.messages[message.name] = message
        elif line.startswith("enum "):
            enum_def = _parse_enum(lines, i, line)
            ctx.schema.enums[enum_def.name] = enum_def

        i += 1

    return ctx.schema


def _declared_name(line: str, keyword: str) -> str:
    """Text between the keyword and the opening brace."""
    rest = line[len(keyword):]
    return rest.split("{", 1)[0].strip()


def _parse_service(lines: Sequence[str], index: int, line: str) -> Service:
    return Service(
        name=_declared_name(line, "service "),
        comment=" ".join(collect_comment(lines, index)),
    )


def _parse_rpc(lines: Sequence[str], index: int, line: str) -> RpcCall:
    name = line[len("rpc "):line.find("(")].strip()
    request_type = line[line.find("(") + 1:line.find(")")].strip()
    response_def = line[line.rfind("(") + 1:line.rfind(")")].strip()

    stream = response_def.startswith(STREAM_PREFIX)
    response_type = response_def[len(STREAM_PREFIX):].strip() if stream else response_def

    comment_pieces: List[str] = []
    shell_pieces: List[str] = []
    for piece in collect_comment(lines, index):
        if piece.startswith(SHELL_TAG):
            shell_pieces.append(piece[len(SHELL_TAG):])
        else:
            comment_pieces.append(piece)

    return RpcCall(
        name=name,
        request_type=request_type,
        response_type=response_type,
        comment=" ".join(comment_pieces),
        stream=stream,
        shell="\n".join(shell_pieces) if shell_pieces else None,
    )


def _parse_message(lines: Sequence[str], index: int, line: str) -> Message:
    name = line[len("message "):].replace("{", "").replace("}", "").replace(" ", "")
    message = Message(name=name)
    if "}" in line:
        return message

    state = _BodyState.SCANNING_FIELDS
    depth = 0
    comment = ""
    i = index + 1
    while i < len(lines):
        body_line = lines[i].strip()
        i += 1

        if state is _BodyState.INSIDE_NESTED_BLOCK:
            depth += body_line.count("{") - body_line.count("}")
            if depth <= 0:
                state = _BodyState.SCANNING_FIELDS
                depth = 0
            continue

        if body_line.startswith(("/", "*")):
            text = strip_comment(body_line)
            if text:
                comment = f"{comment} {text}" if comment else text
        elif "{" in body_line:
            # a pending comment belongs to the nested declaration
            comment = ""
            depth = body_line.count("{") - body_line.count("}")
            if depth > 0:
                state = _BodyState.INSIDE_NESTED_BLOCK
        elif "}" in body_line:
            break
        elif body_line.startswith("map<"):
            message.fields.append(_parse_map_field(body_line, comment))
            comment = ""
        elif _looks_like_field(body_line):
            message.fields.append(_parse_field(body_line, comment))
            comment = ""

    return message


def _looks_like_field(line: str) -> bool:
    if not line or line.startswith(("enum ", "oneof ", "message ")):
        return False
    return len(line.split()) > 3


def _parse_field(line: str, comment: str) -> Field:
    tokens = line.split()
    repeated = tokens[0] == "repeated"
    offset = 1 if repeated else 0
    return Field(
        name=tokens[offset + 1],
        type_name=tokens[offset],
        comment=comment,
        is_repeated=repeated,
    )


def _parse_map_field(line: str, comment: str) -> Field:
    key_type, _, value_type = line[len("map<"):line.find(">")].partition(",")
    name = line[line.find(">") + 1:line.find("=")].strip()
    return Field(
        name=name,
        type_name=value_type.strip(),
        comment=comment,
        map_key=key_type.strip(),
    )


def _parse_enum(lines: Sequence[str], index: int, line: str) -> EnumDef:
    enum_def = EnumDef(
        name=_declared_name(line, "enum "),
        comment=" ".join(collect_comment(lines, index, LINE_COMMENTS)),
    )

    if "{" in line:
        inline_body, closed = _enum_segment(line.split("{", 1)[1])
        enum_def.values.extend(_enum_values(inline_body))
        if closed:
            return enum_def

    i = index + 1
    while i < len(lines):
        body, closed = _enum_segment(lines[i].strip())
        enum_def.values.extend(_enum_values(body))
        if closed:
            break
        i += 1

    return enum_def


def _enum_segment(text: str) -> Tuple[str, bool]:
    """Cut ``text`` at the closing brace, reporting whether one was found."""
    if "}" in text:
        return text.split("}", 1)[0], True
    return text, False


def _enum_values(body: str) -> List[str]:
    """Identifiers left of `=` in a chunk of enum body; numbers are ignored."""
    values: List[str] = []
    body = body.split("//", 1)[0]
    if body.lstrip().startswith(("/*", "*")):
        return values
    for entry in body.split(";"):
        name, sep, _ = entry.partition("=")
        name = name.strip()
        if sep and name and not name.startswith(("option ", "reserved ")):
            values.append(name)
    return values
