#!/usr/bin/env python3
"""
Web server for the documentation chat API and MCP endpoint.

Usage:
    python server.py              # start on $PORT (default 3000)
    python server.py --port 8000  # custom port
"""

import argparse

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from src.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser()
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--host", default="0.0.0.0")
    args = parser.parse_args()

    print(f"MCP server running on http://localhost:{args.port}")
    print(f"POST MCP requests to http://localhost:{args.port}/")
    print(f"Chat API available at http://localhost:{args.port}/api/chat")

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
