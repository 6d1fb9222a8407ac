import logging

import requests
from requests.exceptions import Timeout, ConnectionError, RequestException

from ..config.app_config import AppInfo
from ..core.exceptions import NetworkError, ResponseParseError


class BaseApiClient:
    """
    JSON 接口客户端的公共部分。
    封装了会话管理、代理设置、请求发送和底层错误处理。
    """
    BASE_HEADER = {
        'User-Agent': f'{AppInfo.NAME_EN}/{AppInfo.VERSION}',
        'Accept': 'application/json'
    }

    def __init__(self, use_system_proxy: bool = True, timeout: float = 10):
        self.use_system_proxy = use_system_proxy
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """创建一个配置好 Headers 的 requests.Session 对象"""
        session = requests.Session()
        session.headers.update(self.BASE_HEADER)

        if not self.use_system_proxy:
            self.logger.info("用户已关闭系统代理选项，将强制直连。")
            session.trust_env = False
            session.proxies = {"http": None, "https": None}
        return session

    def close(self):
        """关闭会话"""
        if self.session:
            self.logger.debug(f"Closing {self.__class__.__name__} session.")
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _check_payload(self, url: str, payload: dict):
        """子类按各自接口约定检查业务错误码，失败时抛出 NetworkError"""

    def _request(self, method: str, url: str, **kwargs) -> dict:
        """
        通用的JSON API请求方法。
        成功时返回解码后的 JSON 对象，失败时抛出 NetworkError / ResponseParseError。
        """
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()  # 对 4xx/5xx 状态码抛出异常
        except (Timeout, ConnectionError) as e:
            self.logger.debug(f"网络错误: {url}, Error: {e}")
            raise NetworkError(f"网络连接错误: {e}") from e
        except RequestException as e:
            self.logger.debug(f"请求异常: {url}, Error: {e}")
            raise NetworkError(f"请求发生异常: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            self.logger.debug(f"JSON解码失败: {url}, Response: {response.text[:100]}")
            raise ResponseParseError(f"无法解析服务器响应: {e}") from e

        if not isinstance(payload, dict):
            raise ResponseParseError(f"服务器响应不是 JSON 对象: {url}")

        self._check_payload(url, payload)
        return payload
