"""
LLM 提供商抽象层
聊天助手使用的对话补全接口，支持 Azure OpenAI、SiliconFlow 和自部署模型（OpenAI 兼容 API）
"""

import logging
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, List, Optional

import requests

from insight_dashboard.config import get_settings


ChatMessage = Dict[str, str]

VALID_ROLES = ("system", "user", "assistant")
REQUEST_TIMEOUT = 90


class LLMProvider(ABC):
    """LLM 提供商抽象基类"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model

    @abstractmethod
    def chat(self,
             messages: List[ChatMessage],
             temperature: Optional[float] = None,
             max_tokens: Optional[int] = None) -> str:
        """
        对话补全

        Args:
            messages: 对话消息列表 [{"role": ..., "content": ...}]
            temperature: 温度参数（None 使用模型默认值）
            max_tokens: 最大 token 数（None 使用模型默认值）

        Returns:
            助手回复文本（可能为空字符串）
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """获取提供商名称"""
        pass

    def _build_payload(self,
                       messages: List[ChatMessage],
                       temperature: Optional[float],
                       max_tokens: Optional[int]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"messages": messages, "stream": False}
        if self.model:
            payload["model"] = self.model
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    def _post_chat(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> str:
        """发送 OpenAI 兼容格式的请求并取出第一条回复"""
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout:
            raise TimeoutError(f"API 请求超时 ({REQUEST_TIMEOUT}秒)")
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"API 请求失败: {str(e)}")
        except ValueError as e:
            raise RuntimeError(f"API 返回的不是合法 JSON: {str(e)}")

        choices = result.get("choices") if isinstance(result, dict) else None
        if not choices:
            raise RuntimeError(f"API 返回格式错误: {result}")

        content = (choices[0].get("message") or {}).get("content")
        return content.strip() if isinstance(content, str) else ""


# ================= Azure OpenAI 实现 =================

class AzureOpenAIProvider(LLMProvider):
    """Azure OpenAI 提供商（按 deployment 调用）"""

    DEFAULT_ENDPOINT = None
    DEFAULT_DEPLOYMENT = "gpt-5-mini"
    DEFAULT_API_VERSION = "2024-12-01-preview"

    def __init__(self, api_key: Optional[str] = None,
                 endpoint: Optional[str] = None,
                 deployment: Optional[str] = None,
                 api_version: Optional[str] = None):
        """
        初始化 Azure OpenAI 提供商

        Args:
            api_key: API 密钥
                    优先级：参数 > 环境变量 AZURE_OPENAI_API_KEY > 环境变量 subscription_key
            endpoint: 资源地址（默认环境变量 AZURE_OPENAI_ENDPOINT）
            deployment: 部署名称（默认 AZURE_OPENAI_DEPLOYMENT 或 gpt-5-mini）
            api_version: API 版本
        """
        final_api_key = api_key or os.getenv("AZURE_OPENAI_API_KEY") or os.getenv("subscription_key")
        deployment = deployment or os.getenv("AZURE_OPENAI_DEPLOYMENT") or self.DEFAULT_DEPLOYMENT

        super().__init__(final_api_key, deployment)
        self.endpoint = (endpoint or os.getenv("AZURE_OPENAI_ENDPOINT") or self.DEFAULT_ENDPOINT or "").rstrip("/")
        self.api_version = api_version or os.getenv("AZURE_OPENAI_API_VERSION") or self.DEFAULT_API_VERSION

        if not self.api_key:
            raise ValueError(
                "Azure OpenAI API Key 未设置！\n"
                "请通过以下任一方式提供：\n"
                "1. 参数: AzureOpenAIProvider(api_key='your_key')\n"
                "2. 环境变量: export AZURE_OPENAI_API_KEY='your_key'\n"
                "3. 环境变量: export subscription_key='your_key'"
            )

        if not self.endpoint:
            raise ValueError(
                "Azure OpenAI 资源地址未设置！\n"
                "请通过以下任一方式提供：\n"
                "1. 参数: AzureOpenAIProvider(endpoint='https://<resource>.openai.azure.com')\n"
                "2. 环境变量: export AZURE_OPENAI_ENDPOINT='https://<resource>.openai.azure.com'"
            )

    @property
    def api_url(self) -> str:
        return (
            f"{self.endpoint}/openai/deployments/{self.model}/chat/completions"
            f"?api-version={self.api_version}"
        )

    def chat(self,
             messages: List[ChatMessage],
             temperature: Optional[float] = None,
             max_tokens: Optional[int] = None) -> str:
        """使用 Azure OpenAI 生成回复"""
        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json"
        }
        # deployment 已在 URL 中指定，payload 不需要 model
        payload = self._build_payload(messages, temperature, max_tokens)
        payload.pop("model", None)
        return self._post_chat(self.api_url, headers, payload)

    def get_provider_name(self) -> str:
        return f"Azure OpenAI ({self.model})"


# ================= SiliconFlow 实现 =================

class SiliconFlowProvider(LLMProvider):
    """SiliconFlow API 提供商"""

    DEFAULT_API_URL = "https://api.siliconflow.cn/v1/chat/completions"
    DEFAULT_MODEL = "Qwen/Qwen2.5-7B-Instruct"

    def __init__(self, api_key: Optional[str] = None,
                 model: Optional[str] = None,
                 api_url: Optional[str] = None):
        """
        初始化 SiliconFlow 提供商

        Args:
            api_key: API 密钥（优先级：参数 > 环境变量 SILICONFLOW_API_KEY）
            model: 模型名称（默认 Qwen/Qwen2.5-7B-Instruct）
            api_url: API URL（默认 SiliconFlow 官方地址）
        """
        super().__init__(api_key or os.getenv("SILICONFLOW_API_KEY"), model or self.DEFAULT_MODEL)
        self.api_url = api_url or self.DEFAULT_API_URL

        if not self.api_key:
            raise ValueError(
                "SiliconFlow API Key 未设置！\n"
                "请通过以下任一方式提供：\n"
                "1. 参数: SiliconFlowProvider(api_key='your_key')\n"
                "2. 环境变量: export SILICONFLOW_API_KEY='your_key'"
            )

    def chat(self,
             messages: List[ChatMessage],
             temperature: Optional[float] = None,
             max_tokens: Optional[int] = None) -> str:
        """使用 SiliconFlow API 生成回复"""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        return self._post_chat(self.api_url, headers, self._build_payload(messages, temperature, max_tokens))

    def get_provider_name(self) -> str:
        return "SiliconFlow"


# ================= 自部署模型实现 =================

class SelfHostedProvider(LLMProvider):
    """自部署模型提供商（OpenAI 兼容 API）"""

    def __init__(self, api_url: Optional[str] = None,
                 api_key: Optional[str] = None,
                 model: Optional[str] = None):
        """
        初始化自部署模型提供商

        Args:
            api_url: 自部署模型的 API 地址（默认环境变量 SELFHOSTED_LLM_URL）
            api_key: API 密钥（可选，默认环境变量 SELFHOSTED_LLM_KEY）
            model: 模型名称（默认环境变量 SELFHOSTED_LLM_MODEL 或 "default"）
        """
        super().__init__(
            api_key or os.getenv("SELFHOSTED_LLM_KEY"),
            model or os.getenv("SELFHOSTED_LLM_MODEL") or "default"
        )
        self.api_url = api_url or os.getenv("SELFHOSTED_LLM_URL")

        if not self.api_url:
            raise ValueError("自部署模型的 API URL 未设置！")

    def chat(self,
             messages: List[ChatMessage],
             temperature: Optional[float] = None,
             max_tokens: Optional[int] = None) -> str:
        """使用自部署模型生成回复（OpenAI 兼容格式）"""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return self._post_chat(self.api_url, headers, self._build_payload(messages, temperature, max_tokens))

    def get_provider_name(self) -> str:
        return f"SelfHosted ({self.api_url})"


# ================= 工厂方法 =================

def create_llm_provider(provider_type: str = "azure", **kwargs) -> LLMProvider:
    """
    创建 LLM 提供商实例

    Args:
        provider_type: 提供商类型 ("azure", "siliconflow", "selfhosted")
        **kwargs: 提供商特定参数

    Returns:
        LLM 提供商实例
    """
    provider_type = provider_type.lower()

    if provider_type == "azure":
        return AzureOpenAIProvider(**kwargs)
    elif provider_type == "siliconflow":
        return SiliconFlowProvider(**kwargs)
    elif provider_type == "selfhosted":
        return SelfHostedProvider(**kwargs)
    else:
        raise ValueError(f"不支持的提供商类型: {provider_type}。"
                         f"支持: azure, siliconflow, selfhosted")


@lru_cache(maxsize=1)
def get_chat_provider() -> LLMProvider:
    """
    获取聊天使用的 LLM 提供商（进程内单例，首次调用时创建）

    Raises:
        ValueError: 凭据未配置或提供商类型不支持（不会被缓存，下次调用重新尝试）
    """
    provider = create_llm_provider(get_settings().llm_provider)
    logging.info(f"✅ 聊天提供商初始化成功: {provider.get_provider_name()}")
    return provider


def validate_messages(messages: Any) -> Optional[str]:
    """
    校验对话消息

    Returns:
        错误信息，合法时返回 None
    """
    if not isinstance(messages, list) or not messages:
        return "messages must be a non-empty array."

    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            return f"messages[{index}] must be an object."
        if message.get("role") not in VALID_ROLES:
            return f"messages[{index}].role must be one of: {', '.join(VALID_ROLES)}."
        if not isinstance(message.get("content"), str):
            return f"messages[{index}].content must be a string."
    return None
