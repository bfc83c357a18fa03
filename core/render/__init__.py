"""Configuration rendering helpers."""

from .blocks import Configuration, Expr, IamGroup, IamPolicy, IamRole, IamUser, PolicyAttachment
from .fixtures import basic_attachment_config, paginated_attachment_config, updated_attachment_config

__all__ = [
    "Configuration",
    "Expr",
    "IamGroup",
    "IamPolicy",
    "IamRole",
    "IamUser",
    "PolicyAttachment",
    "basic_attachment_config",
    "paginated_attachment_config",
    "updated_attachment_config",
]
