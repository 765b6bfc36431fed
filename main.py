"""
User Directory Service - 启动入口

运行方式：
    - 直接执行：python main.py [--host 0.0.0.0] [--port 8000] [--reload]
    - 或者使用：uvicorn app.main:app --reload

服务启动后可以访问：
    - API 文档：http://localhost:8000/docs
    - 健康检查：http://localhost:8000/healthz
"""

import argparse

import uvicorn


def main() -> None:
    """启动 FastAPI 服务器"""
    parser = argparse.ArgumentParser(description="Run the user directory service.")
    parser.add_argument("--host", default="0.0.0.0", help="监听地址")
    parser.add_argument("--port", type=int, default=8000, help="服务端口")
    parser.add_argument("--reload", action="store_true", help="开发模式：代码修改后自动重启")
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",  # 指向 app/main.py 中的 app 实例
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
