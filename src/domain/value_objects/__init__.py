"""Domain 值对象

导出常用的领域值对象，方便其他模块导入
"""

from src.domain.value_objects.campaign_status import CampaignStatus
from src.domain.value_objects.contact import Contact
from src.domain.value_objects.contact_status import ContactStatus
from src.domain.value_objects.flow_status import FlowStatus
from src.domain.value_objects.node_type import FlowNodeType
from src.domain.value_objects.position import Position
from src.domain.value_objects.skip_code import SkipCode
from src.domain.value_objects.template_spec import TemplateSpec

__all__ = [
    "CampaignStatus",
    "Contact",
    "ContactStatus",
    "FlowStatus",
    "FlowNodeType",
    "Position",
    "SkipCode",
    "TemplateSpec",
]
