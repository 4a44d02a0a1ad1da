"""User-facing message catalogues."""

from __future__ import annotations

import re

_CATALOGUES: dict[str, dict[str, str]] = {
    "en": {
        "app.redirecting": "Redirecting to n8n...",
        "app.retry": "Retry",
        "status.checking": "Checking system environment...",
        "status.preparing_engine": "Preparing Node engine... {{progress}}%",
        "status.downloading_core": "Downloading n8n resources... {{progress}}%",
        "status.extracting": "Extracting resource package...",
        "status.starting": "Starting n8n service...",
        "status.ready": "n8n is ready at {{url}}",
        "status.error": "Startup failed: {{error}}",
        "status.loading": "Loading interface...",
        "errors.verification": "Package downloaded but not correctly installed (verification failed)",
        "errors.timeout": "n8n service startup timeout, please check if the port is occupied",
        "errors.startup_timeout": "Startup timeout, please check network connection or restart the application",
    },
    "zh": {
        "app.redirecting": "正在跳转到 n8n...",
        "app.retry": "重试",
        "status.checking": "正在检查系统环境...",
        "status.preparing_engine": "正在准备 Node 引擎... {{progress}}%",
        "status.downloading_core": "正在下载 n8n 资源... {{progress}}%",
        "status.extracting": "正在解压资源包...",
        "status.starting": "正在启动 n8n 服务...",
        "status.ready": "n8n 已就绪：{{url}}",
        "status.error": "启动失败：{{error}}",
        "status.loading": "正在加载界面...",
        "errors.verification": "资源包已下载，但未能正确安装（验证失败）",
        "errors.timeout": "n8n 服务启动超时，请检查端口是否被占用",
        "errors.startup_timeout": "启动超时，请检查网络连接或重启应用",
    },
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

LOCALES = tuple(_CATALOGUES)


def translate(key: str, locale: str = "en", **params: object) -> str:
    """Look up *key*, falling back to English and then to the key itself."""
    template = _CATALOGUES.get(locale, {}).get(key) or _CATALOGUES["en"].get(key) or key

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in params:
            return str(params[name])
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, template)
