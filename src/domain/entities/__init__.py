"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from src.domain.entities.campaign import Campaign
from src.domain.entities.campaign_contact import CampaignContact
from src.domain.entities.flow import Flow
from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.entities.message_template import MessageTemplate

__all__ = ["Flow", "FlowNode", "FlowEdge", "Campaign", "CampaignContact", "MessageTemplate"]
