"""ORM 模型 - 数据库表映射

ORM 模型 vs 领域实体：
- ORM 模型：数据库表映射，关注持久化（Infrastructure 层）
- 领域实体：业务逻辑，关注不变式（Domain 层）
- 通过 Repository 中的 Assembler 方法转换：ORM ⇄ Entity

设计原则：
- 使用 SQLAlchemy 2.0 风格（Mapped、mapped_column）
- 外键使用级联删除（CASCADE）
- 为群发循环的热点查询添加索引（campaign_id + status）
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.base import Base


class FlowModel(Base):
    """Flow ORM 模型

    表名：flows

    关系：
    - nodes: 一对多（删除 Flow 时级联删除）
    - edges: 一对多（删除 Flow 时级联删除）
    """

    __tablename__ = "flows"

    # 主键
    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Flow ID（flow_ 前缀）")

    # 业务字段
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="流程名称")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", comment="流程状态"
    )

    # 时间戳
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now, comment="更新时间"
    )

    # 节点按 position_index 保持编辑器中的顺序
    nodes: Mapped[list["FlowNodeModel"]] = relationship(
        "FlowNodeModel",
        back_populates="flow",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="FlowNodeModel.position_index",
    )
    edges: Mapped[list["FlowEdgeModel"]] = relationship(
        "FlowEdgeModel",
        back_populates="flow",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="FlowEdgeModel.position_index",
    )

    __table_args__ = (
        Index("idx_flows_status", "status"),
        Index("idx_flows_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<FlowModel(id={self.id}, name={self.name}, status={self.status})>"


class FlowNodeModel(Base):
    """FlowNode ORM 模型

    表名：flow_nodes

    节点 ID 由编辑器生成，只在流程内唯一，所以主键是 (flow_id, id)。
    """

    __tablename__ = "flow_nodes"

    flow_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("flows.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Flow ID",
    )
    id: Mapped[str] = mapped_column(String(100), primary_key=True, comment="节点 ID")

    type: Mapped[str] = mapped_column(String(20), nullable=False, comment="节点类型")
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict, comment="节点配置（JSON）")
    position_x: Mapped[float] = mapped_column(nullable=False, default=0.0, comment="节点 X 坐标")
    position_y: Mapped[float] = mapped_column(nullable=False, default=0.0, comment="节点 Y 坐标")
    position_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="编辑器中的顺序"
    )

    flow: Mapped["FlowModel"] = relationship("FlowModel", back_populates="nodes")

    def __repr__(self) -> str:
        return f"<FlowNodeModel(id={self.id}, flow_id={self.flow_id}, type={self.type})>"


class FlowEdgeModel(Base):
    """FlowEdge ORM 模型

    表名：flow_edges
    """

    __tablename__ = "flow_edges"

    flow_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("flows.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Flow ID",
    )
    id: Mapped[str] = mapped_column(String(100), primary_key=True, comment="连线 ID")

    source: Mapped[str] = mapped_column(String(100), nullable=False, comment="源节点 ID")
    target: Mapped[str] = mapped_column(String(100), nullable=False, comment="目标节点 ID")
    source_handle: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="源节点出口标识"
    )
    position_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="编辑器中的顺序"
    )

    flow: Mapped["FlowModel"] = relationship("FlowModel", back_populates="edges")

    def __repr__(self) -> str:
        return f"<FlowEdgeModel(id={self.id}, source={self.source}, target={self.target})>"


class MessageTemplateModel(Base):
    """MessageTemplate ORM 模型

    表名：message_templates

    字段说明：
    - components: 承运方格式的组件列表（JSON）
    - spec_hash: 编译契约时使用的内容哈希
    """

    __tablename__ = "message_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="模板 ID（UUID）")
    name: Mapped[str] = mapped_column(String(512), nullable=False, unique=True, comment="模板名称")
    language: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pt_BR", comment="语言代码"
    )
    parameter_format: Mapped[str] = mapped_column(
        String(20), nullable=False, default="positional", comment="参数格式"
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="APPROVED", comment="审核状态"
    )
    components: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list, comment="组件列表（JSON）"
    )
    spec_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, comment="契约哈希")

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now, comment="更新时间"
    )

    def __repr__(self) -> str:
        return f"<MessageTemplateModel(name={self.name}, language={self.language})>"


class CampaignModel(Base):
    """Campaign ORM 模型

    表名：campaigns

    字段说明：
    - template_snapshot: 创建活动时的模板快照（JSON，可选）
    - template_variables: 操作员填写的变量（JSON）
    - recipients / sent / failed / skipped: 计数器（每批次结束后持久化）
    """

    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Campaign ID（UUID）")
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="活动名称")
    template_name: Mapped[str] = mapped_column(String(512), nullable=False, comment="模板名称")
    template_snapshot: Mapped[dict | None] = mapped_column(
        JSON, nullable=True, comment="模板快照（JSON）"
    )
    template_variables: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="模板变量（JSON）"
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", comment="活动状态"
    )

    # 计数器
    recipients: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="收件人数")
    sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="已发送数")
    failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="失败数")
    skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="跳过数")

    # 时间戳
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="开始时间")
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="结束时间"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now, comment="更新时间"
    )

    __table_args__ = (
        Index("idx_campaigns_status", "status"),
        Index("idx_campaigns_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CampaignModel(id={self.id}, name={self.name}, status={self.status})>"


class CampaignContactModel(Base):
    """CampaignContact ORM 模型

    表名：campaign_contacts

    约束：
    - (campaign_id, phone) 唯一
    - status 只通过条件更新推进（见 SQLAlchemyCampaignContactRepository）

    索引：
    - idx_campaign_contacts_campaign_status: 群发循环按状态读取/计数
    """

    __tablename__ = "campaign_contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="行 ID（UUID）")
    campaign_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        comment="Campaign ID",
    )
    # 插入顺序（群发按此顺序分批）
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="插入顺序")

    contact_id: Mapped[str | None] = mapped_column(String(36), nullable=True, comment="联系人 ID")
    phone: Mapped[str] = mapped_column(String(32), nullable=False, comment="电话号码")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="", comment="联系人名称")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, comment="邮箱")
    custom_fields: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="自定义字段（JSON）"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", comment="行状态"
    )
    message_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, comment="承运方消息 ID"
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True, comment="失败原因")
    skip_code: Mapped[str | None] = mapped_column(String(64), nullable=True, comment="跳过原因码")
    skip_reason: Mapped[str | None] = mapped_column(Text, nullable=True, comment="跳过原因")

    sending_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="认领时间")
    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="发送时间")
    failed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="失败时间")
    skipped_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="跳过时间")

    __table_args__ = (
        UniqueConstraint("campaign_id", "phone", name="uq_campaign_contacts_campaign_phone"),
        Index("idx_campaign_contacts_campaign_status", "campaign_id", "status"),
        Index("idx_campaign_contacts_campaign_seq", "campaign_id", "seq"),
    )

    def __repr__(self) -> str:
        return (
            f"<CampaignContactModel(campaign_id={self.campaign_id}, phone={self.phone}, "
            f"status={self.status})>"
        )
