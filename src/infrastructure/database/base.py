"""数据库 Base 模型

- 所有 ORM 模型都继承自 Base
- Base.metadata 包含所有表的元数据（用于 Alembic 迁移和 SQLite 建表）
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """ORM 模型基类

    所有 ORM 模型都继承自这个类：
    - class FlowModel(Base): ...
    - class CampaignModel(Base): ...
    """

    pass
