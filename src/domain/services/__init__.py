"""Domain Services 模块

领域服务：
- FlowValidator: 流程校验引擎
- FlowExecutionEngine: 流程执行引擎
- FlowTestRunner: 交互式测试运行
- NodeTypeRegistry: 节点类型注册中心
- template_contract: 模板契约编译、解析与请求体构造
"""

from src.domain.services.flow_execution_engine import FlowExecutionEngine, FlowRunResult
from src.domain.services.flow_test_runner import FlowTestReport, FlowTestRunner
from src.domain.services.flow_validator import FlowValidator
from src.domain.services.node_type_registry import NodeTypeDefinition, NodeTypeRegistry
from src.domain.services.template_contract import TemplateSpecCache, compile_template_spec

__all__ = [
    "FlowExecutionEngine",
    "FlowRunResult",
    "FlowTestReport",
    "FlowTestRunner",
    "FlowValidator",
    "NodeTypeDefinition",
    "NodeTypeRegistry",
    "TemplateSpecCache",
    "compile_template_spec",
]
