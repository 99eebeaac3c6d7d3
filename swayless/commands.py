from typing import NotRequired, TypedDict

import orjson

INIT = "init"
FOCUS_TAG = "focus-tag"
FOCUS_TAG_ALL_OUTPUTS = "focus-tag-all-outputs"
MOVE_CONTAINER_TO_TAG = "move-container-to-tag"
MOVE_CONTAINER_TO_NEXT_OUTPUT = "move-container-to-next-output"
MOVE_CONTAINER_TO_PREVIOUS_OUTPUT = "move-container-to-previous-output"
BRING_TAG_HERE = "bring-tag-here"
ALT_TAB = "alt-tab"

# verb -> whether it carries a tag
VERBS: dict[str, bool] = {
    INIT: False,
    FOCUS_TAG: True,
    FOCUS_TAG_ALL_OUTPUTS: True,
    MOVE_CONTAINER_TO_TAG: True,
    MOVE_CONTAINER_TO_NEXT_OUTPUT: False,
    MOVE_CONTAINER_TO_PREVIOUS_OUTPUT: False,
    BRING_TAG_HERE: True,
    ALT_TAB: False,
}


class Command(TypedDict):
    command: str
    tag: NotRequired[str]


class CommandDecodeError(ValueError):
    pass


def make_command(verb: str, tag: str | None = None) -> Command:
    if verb not in VERBS:
        raise ValueError(f"Unknown command: {verb}")
    if not VERBS[verb]:
        return {"command": verb}
    if not tag:
        raise ValueError(f"{verb} needs a non-empty tag")
    return {"command": verb, "tag": tag}


def encode_command(command: Command) -> bytes:
    return orjson.dumps(command)


def decode_command(raw: bytes) -> Command:
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise CommandDecodeError(f"Payload is not JSON: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("command"), str):
        raise CommandDecodeError(f"Payload is not a command: {payload!r}")

    tag = payload.get("tag")
    if tag is not None and not isinstance(tag, str):
        raise CommandDecodeError(f"Tag must be a string: {tag!r}")

    try:
        return make_command(payload["command"], tag)
    except ValueError as e:
        raise CommandDecodeError(str(e)) from e
