"""API Container (composition root state holder).

This module only defines types/structure for objects created in the real
composition root (`src/interfaces/api/main.py`). Repositories are built per
request from the request-scoped session; everything here is process-wide.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.config import settings
from src.domain.ports.message_sender import MessageSender
from src.domain.services.flow_execution_engine import FlowExecutionEngine
from src.domain.services.flow_test_runner import FlowTestRunner
from src.domain.services.flow_validator import FlowValidator
from src.domain.services.node_type_registry import NodeTypeRegistry
from src.domain.services.template_contract import TemplateSpecCache
from src.infrastructure.executors import create_node_type_registry
from src.infrastructure.whatsapp import WhatsAppCloudClient


@dataclass(frozen=True, slots=True)
class ApiContainer:
    """Typed container attached to `app.state.container`."""

    sender: MessageSender
    registry: NodeTypeRegistry
    validator: FlowValidator
    engine: FlowExecutionEngine
    test_runner: FlowTestRunner
    spec_cache: TemplateSpecCache


def build_container(sender: MessageSender | None = None) -> ApiContainer:
    """组装进程级对象（sender 为空时按 settings 创建 WhatsAppCloudClient）"""
    if sender is None:
        sender = WhatsAppCloudClient(
            phone_number_id=settings.whatsapp_phone_number_id,
            access_token=settings.whatsapp_access_token,
            api_version=settings.whatsapp_api_version,
            timeout=settings.whatsapp_request_timeout,
        )

    registry = create_node_type_registry(sender)
    engine = FlowExecutionEngine(registry, max_steps=settings.flow_max_steps)
    return ApiContainer(
        sender=sender,
        registry=registry,
        validator=FlowValidator(registry),
        engine=engine,
        test_runner=FlowTestRunner(engine),
        spec_cache=TemplateSpecCache(),
    )
