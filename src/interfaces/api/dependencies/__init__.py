"""DI helpers."""

from .container import get_container  # noqa: F401
from .repositories import (  # noqa: F401
    get_campaign_contact_repository,
    get_campaign_repository,
    get_flow_repository,
    get_template_repository,
    get_transaction_manager,
)
