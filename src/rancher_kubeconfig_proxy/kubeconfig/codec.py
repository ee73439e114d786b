"""Kubeconfig YAML codec.

Converts between the kubeconfig wire format (YAML with list-of-named-items
sections) and the AccessDocument model.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from rancher_kubeconfig_proxy.kubeconfig.models import (
    AccessDocument,
    ClusterEntry,
    ContextEntry,
    CredentialEntry,
    DocumentMetadata,
)
from rancher_kubeconfig_proxy.utils.errors import EncodingError, ParseError

logger = logging.getLogger(__name__)

CURRENT_CONTEXT_KEY = "current-context"


def _decode_section(
    data: dict[str, Any], section: str, body_key: str, model: type[BaseModel]
) -> dict[str, Any]:
    items = data.pop(section, None)
    if items is None:
        return {}
    if not isinstance(items, list):
        raise ParseError(f"'{section}' must be a list, got {type(items).__name__}")

    entries: dict[str, Any] = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ParseError(f"{section}[{index}] must be a mapping")
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise ParseError(f"{section}[{index}] has no name")
        if name in entries:
            raise ParseError(f"duplicate name '{name}' in {section}")

        body = item.get(body_key)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ParseError(f"{section} entry '{name}' has a malformed '{body_key}' field")

        try:
            entries[name] = model.model_validate(body)
        except ValidationError as e:
            raise ParseError(f"{section} entry '{name}' is invalid: {e}") from e

    return entries


def decode(text: str | bytes) -> AccessDocument:
    """Parse kubeconfig text into an AccessDocument.

    Args:
        text: Kubeconfig YAML (or JSON, which is valid YAML).

    Returns:
        A freshly built AccessDocument.

    Raises:
        ParseError: If the text is not a well-formed kubeconfig or a context
            references an entry that does not exist.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"invalid YAML: {e}") from e

    if data is None:
        raise ParseError("document is empty")
    if not isinstance(data, dict):
        raise ParseError(f"document must be a mapping, got {type(data).__name__}")

    clusters = _decode_section(data, "clusters", "cluster", ClusterEntry)
    credentials = _decode_section(data, "users", "user", CredentialEntry)
    contexts = _decode_section(data, "contexts", "context", ContextEntry)

    active_context = data.pop(CURRENT_CONTEXT_KEY, None) or ""
    if not isinstance(active_context, str):
        raise ParseError(f"'{CURRENT_CONTEXT_KEY}' must be a string")

    # tolerate an explicit "preferences: null"
    if data.get("preferences", {}) is None:
        del data["preferences"]

    try:
        metadata = DocumentMetadata.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"invalid document fields: {e}") from e

    document = AccessDocument(
        clusters=clusters,
        credentials=credentials,
        contexts=contexts,
        active_context=active_context,
        metadata=metadata,
    )

    problems = document.dangling_references()
    if problems:
        raise ParseError("; ".join(problems))

    logger.debug(
        f"Decoded kubeconfig with {len(clusters)} clusters, "
        f"{len(credentials)} users, {len(contexts)} contexts"
    )
    return document


def _encode_section(entries: dict[str, Any], body_key: str) -> list[dict[str, Any]]:
    return [
        {
            "name": name,
            body_key: entries[name].model_dump(by_alias=True, exclude_unset=True),
        }
        for name in sorted(entries)
    ]


def to_dict(document: AccessDocument) -> dict[str, Any]:
    """Convert an AccessDocument into its kubeconfig wire structure."""
    metadata = document.metadata
    data = metadata.model_dump(by_alias=True)
    if metadata.extensions is None and "extensions" not in metadata.model_fields_set:
        del data["extensions"]
    data["clusters"] = _encode_section(document.clusters, "cluster")
    data["users"] = _encode_section(document.credentials, "user")
    data["contexts"] = _encode_section(document.contexts, "context")
    data[CURRENT_CONTEXT_KEY] = document.active_context
    return data


def encode(document: AccessDocument) -> str:
    """Serialize an AccessDocument to kubeconfig YAML.

    Entries are sorted by name and mapping keys are sorted, so encoding the
    same document always yields the same text.

    Raises:
        EncodingError: If the document holds values YAML cannot represent.
    """
    try:
        return yaml.safe_dump(
            to_dict(document),
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise EncodingError(f"Failed to serialize kubeconfig: {e}") from e
