"""领域层异常定义

异常分层：
- DomainError：业务规则违反（API 层统一转换为 400）
- NotFoundError：实体不存在（API 层统一转换为 404）
- TemplateContractError：模板契约编译失败（群发开始前快速失败）
- FlowExecutionError：节点执行失败（由执行引擎转换为 error 进度事件）

设计原则：
- 继承自 Exception（Python 标准异常基类）
- 简单明了（不过度设计）
"""


class DomainError(Exception):
    """领域层异常基类

    用途：
    - 表示业务规则违反（如：name 不能为空）
    - 表示领域不变式违反（如：流程中存在重复的节点 ID）

    示例：
        if not name:
            raise DomainError("name 不能为空")
    """

    pass


class NotFoundError(DomainError):
    """实体不存在异常

    用途：
    - Repository 的 get_by_id() / get_by_name() 找不到实体时抛出
    - API 层统一捕获并返回 404

    参数：
        entity_type: 实体类型（如："Flow"、"Campaign"）
        entity_id: 实体 ID
    """

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


class TemplateContractError(DomainError):
    """模板契约违反异常

    用途：
    - 位置占位符不连续（如 {{1}}、{{3}}，缺少 {{2}}）
    - 命名占位符包含非法字符
    - 文本 HEADER 超过 1 个参数
    - 命名格式下使用动态 URL 按钮

    这些都是承运方协议约束，属于配置错误，必须在任何发送之前暴露给操作员。
    """

    pass


class FlowExecutionError(DomainError):
    """节点执行异常

    参数：
        node_id: 出错的节点 ID
        message: 错误信息
    """

    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        super().__init__(message)
