"""TransactionManager Port - 事务控制抽象

目标：
- UseCase 依赖抽象事务控制，避免直接耦合数据库实现（DIP）
- 群发用例在活动进入 sending 后以及每个批次结束后提交一次（检查点）
- 基础设施层提供 SQLAlchemy 实现（SQLAlchemyTransactionManager）
"""

from __future__ import annotations

from typing import Protocol


class TransactionManager(Protocol):
    def commit(self) -> None: ...

    def rollback(self) -> None: ...
