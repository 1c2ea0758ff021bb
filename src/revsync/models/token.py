"""Identity template tokens."""

import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..exceptions import ValidationError

CONFIG_PATH_VAR = 'config_path'
WORKFLOW_NAME_VAR = 'workflow_name'
REFERENCE_VAR = 'reference'
LABEL_VAR_PREFIX = 'label:'

_VARIABLE_RE = re.compile(r'\$\{([^}]*)\}')


class TokenType(str, Enum):
    """Kind of identity template token."""

    LITERAL = 'literal'
    CONFIG_PATH = 'config_path'
    WORKFLOW_NAME = 'workflow_name'
    REFERENCE = 'reference'
    LABEL = 'label'


class Token(BaseModel):
    """One element of a custom identity template."""

    type: TokenType = Field(..., description='Token type')
    value: Optional[str] = Field(
        default=None, description='Literal text or label name'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def literal(cls, text: str) -> 'Token':
        return cls(type=TokenType.LITERAL, value=text)

    @classmethod
    def config_path(cls) -> 'Token':
        return cls(type=TokenType.CONFIG_PATH)

    @classmethod
    def workflow_name(cls) -> 'Token':
        return cls(type=TokenType.WORKFLOW_NAME)

    @classmethod
    def reference(cls) -> 'Token':
        return cls(type=TokenType.REFERENCE)

    @classmethod
    def label(cls, name: str) -> 'Token':
        return cls(type=TokenType.LABEL, value=name)

    def __str__(self) -> str:
        if self.type == TokenType.LITERAL:
            return self.value or ''
        if self.type == TokenType.LABEL:
            return '${%s%s}' % (LABEL_VAR_PREFIX, self.value)
        return '${%s}' % self.type.value


def parse_identity_template(template: str) -> List[Token]:
    """Parse a '${var}' identity template into tokens.

    Supported variables are config_path, workflow_name, reference and
    label:<name>.

    Args:
        template: Template text

    Returns:
        Ordered list of tokens

    Raises:
        ValidationError: If the template uses an unknown or empty variable
    """
    tokens: List[Token] = []
    position = 0
    for match in _VARIABLE_RE.finditer(template):
        if match.start() > position:
            tokens.append(Token.literal(template[position : match.start()]))
        name = match.group(1).strip()
        if name == CONFIG_PATH_VAR:
            tokens.append(Token.config_path())
        elif name == WORKFLOW_NAME_VAR:
            tokens.append(Token.workflow_name())
        elif name == REFERENCE_VAR:
            tokens.append(Token.reference())
        elif name.startswith(LABEL_VAR_PREFIX) and len(name) > len(LABEL_VAR_PREFIX):
            tokens.append(Token.label(name[len(LABEL_VAR_PREFIX) :]))
        else:
            raise ValidationError(
                f"Unknown variable '{name}' in identity template '{template}'"
            )
        position = match.end()
    if position < len(template):
        tokens.append(Token.literal(template[position:]))
    return tokens
