"""Trigger event detection from the CI environment."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from tika_ci.core.config import DEFAULT_TIKA_VERSION
from tika_ci.core.result import Err, Ok, Result
from tika_ci.core.structured import StrDict, as_str_dict, get_bool, get_str, get_table
from tika_ci.pipeline.errors import ConfigurationError
from tika_ci.pipeline.model import (
    TAG_REF_PREFIX,
    ManualDispatch,
    OtherEvent,
    Release,
    TagCreate,
    TagPush,
    TriggerEvent,
)

# workflow_dispatch input names
INPUT_TIKA_VERSION = "TIKA_VERSION"
INPUT_PUSH_IMAGE = "PUSH_IMAGE"


def classify_event(
    name: str,
    ref: str,
    inputs: Mapping[str, object] | None = None,
    *,
    default_version: str = DEFAULT_TIKA_VERSION,
) -> TriggerEvent:
    """Map a raw event name and ref onto a TriggerEvent variant."""
    is_tag_ref = ref.startswith(TAG_REF_PREFIX)
    match name:
        case "workflow_dispatch":
            data = inputs or {}
            version = get_str(data, INPUT_TIKA_VERSION) or default_version
            return ManualDispatch(version=version, push=_push_input(data))
        case "push" if is_tag_ref:
            return TagPush(ref=ref)
        case "create" if is_tag_ref:
            return TagCreate(ref=ref)
        case "release":
            return Release(ref=ref)
        case _:
            return OtherEvent(name=name, ref=ref)


def _push_input(inputs: Mapping[str, object]) -> bool:
    # GitHub fills in the declared default (true) when the input is absent;
    # a value that is present but not a boolean never publishes
    if INPUT_PUSH_IMAGE not in inputs:
        return True
    return get_bool(inputs, INPUT_PUSH_IMAGE) is True


def _check_inputs(inputs: Mapping[str, object]) -> Result[None, ConfigurationError]:
    if INPUT_PUSH_IMAGE in inputs and get_bool(inputs, INPUT_PUSH_IMAGE) is None:
        return Err(
            ConfigurationError(
                kind="invalid_event",
                message=f"invalid {INPUT_PUSH_IMAGE} input: {inputs[INPUT_PUSH_IMAGE]!r}",
                hint="expected true or false",
            )
        )
    return Ok(None)


def _read_inputs(event_path: Path) -> Result[StrDict, ConfigurationError]:
    try:
        payload: object = json.loads(event_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(
            ConfigurationError(
                kind="invalid_event",
                message=f"event payload not found: {event_path}",
            )
        )
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(
            ConfigurationError(
                kind="invalid_event",
                message=f"unreadable event payload: {e}",
                hint=str(event_path),
            )
        )

    data = as_str_dict(payload)
    if data is None:
        return Err(
            ConfigurationError(
                kind="invalid_event",
                message="event payload must be a JSON object",
                hint=str(event_path),
            )
        )
    return Ok(get_table(data, "inputs") or {})


def event_from_environment(
    env: Mapping[str, str],
    *,
    default_version: str = DEFAULT_TIKA_VERSION,
) -> Result[TriggerEvent, ConfigurationError]:
    """Build the TriggerEvent from GitHub Actions variables.

    Reads GITHUB_EVENT_NAME and GITHUB_REF; for manual runs the inputs come
    from the JSON payload at GITHUB_EVENT_PATH.
    """
    name = env.get("GITHUB_EVENT_NAME", "").strip()
    if not name:
        return Err(
            ConfigurationError(
                kind="invalid_event",
                message="GITHUB_EVENT_NAME is not set",
                hint="pass --event/--ref explicitly when running outside GitHub Actions",
            )
        )
    ref = env.get("GITHUB_REF", "").strip()

    inputs: StrDict = {}
    event_path = env.get("GITHUB_EVENT_PATH", "").strip()
    if name == "workflow_dispatch" and event_path:
        read = _read_inputs(Path(event_path))
        if isinstance(read, Err):
            return read
        inputs = read.value
        checked = _check_inputs(inputs)
        if isinstance(checked, Err):
            return checked

    return Ok(classify_event(name, ref, inputs, default_version=default_version))
