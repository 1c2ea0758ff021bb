"""Stable migration identities.

An identity names a logical migrated unit (for example a code review) so a
destination can recognise it again on the next run. Identities must only
depend on their inputs: the same reference, workflow name, config path and
owner produce byte-identical output on every machine.
"""

import hashlib
import json
from typing import Callable, List, Optional

from ..models.token import Token, TokenType

CHANGE_IDENTITY_TAG = 'ChangeIdentity'
CUSTOM_IDENTITY_TAG = 'custom_identity'


class MissingLabelError(LookupError):
    """A custom identity template references a label the change doesn't have."""

    def __init__(self, label: str):
        super().__init__(label)
        self.label = label


def hash_identity(*fields: Optional[str]) -> str:
    """Hash an ordered tuple of identity fields.

    Fields are encoded as a compact JSON array, so field boundaries and missing
    values (null) can't be confused with field contents.

    Args:
        *fields: Identity fields, None for a missing value

    Returns:
        Hex encoded SHA-256 digest
    """
    payload = json.dumps(list(fields), ensure_ascii=False, separators=(',', ':'))
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()


def compute_identity(
    tag: str,
    reference: str,
    workflow_name: str,
    config_path: str,
    identity_user: Optional[str],
) -> str:
    """Default identity for a reference of a workflow defined in a config file."""
    return hash_identity(
        tag, 'workflow', config_path, workflow_name, reference, identity_user
    )


def render_template(
    tokens: List[Token],
    reference: str,
    workflow_name: str,
    config_path: str,
    get_label: Callable[[str], Optional[str]],
) -> str:
    """Substitute identity template tokens.

    Raises:
        MissingLabelError: If a label token can't be resolved
    """
    parts = []
    for token in tokens:
        if token.type == TokenType.LITERAL:
            parts.append(token.value or '')
        elif token.type == TokenType.CONFIG_PATH:
            parts.append(config_path)
        elif token.type == TokenType.WORKFLOW_NAME:
            parts.append(workflow_name)
        elif token.type == TokenType.REFERENCE:
            parts.append(reference)
        elif token.type == TokenType.LABEL:
            value = get_label(token.value)
            if value is None:
                raise MissingLabelError(token.value)
            parts.append(value)
    return ''.join(parts)


def compute_custom_identity(text: str, identity_user: Optional[str]) -> str:
    return hash_identity(CUSTOM_IDENTITY_TAG, text, identity_user)
