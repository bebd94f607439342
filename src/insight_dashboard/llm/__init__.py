"""
LLM 模块
聊天助手使用的对话补全提供商
"""

from .llm_providers import (
    LLMProvider,
    AzureOpenAIProvider,
    SiliconFlowProvider,
    SelfHostedProvider,
    create_llm_provider,
    get_chat_provider,
    validate_messages
)

__all__ = [
    'LLMProvider', 'AzureOpenAIProvider', 'SiliconFlowProvider', 'SelfHostedProvider',
    'create_llm_provider', 'get_chat_provider', 'validate_messages'
]
