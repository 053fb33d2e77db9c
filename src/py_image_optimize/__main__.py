"""Entry point for python -m py_image_optimize.

默认启动 HTTP 服务，--mcp 启动 MCP 服务器。
"""

import sys


def main() -> None:
    """主入口函数"""
    args = sys.argv[1:]

    # 检查版本信息
    if args and args[0] in ["--version", "-v"]:
        from . import __version__

        print(f"py-image-optimize {__version__}")
        return

    from .config import get_config
    from .utils.logging_helpers import configure_logging

    config = get_config()
    configure_logging(config.logging)

    if "--mcp" in args:
        from .mcp_server import main as mcp_main

        mcp_main()
        return

    # 启动 HTTP 服务
    import uvicorn

    from .server import create_app

    uvicorn.run(
        create_app(config),
        host=config.server.HOST,
        port=config.server.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
