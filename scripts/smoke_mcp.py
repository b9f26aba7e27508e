"""
Smoke script for the knowledge-graph MCP server against a live memory API.

It performs:
 1) spawns the server via stdio (python -m kg_memory_mcp.server)
 2) lists tools
 3) calls check_health, then search_nodes with --query (default: empty string)

Requires MEMORY_API_KEY (and MEMORY_API_URL if the API is not on localhost:3000).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

_REPO_ROOT = Path(__file__).resolve().parents[1]


def _pretty(text: str) -> str:
    s = text.strip()
    if s.startswith("{") or s.startswith("["):
        try:
            return json.dumps(json.loads(s), indent=2, ensure_ascii=False)
        except ValueError:
            return text
    return text


def _unwrap_tool_result(res: Any) -> tuple[str, bool]:
    content = getattr(res, "content", None) or []
    text = getattr(content[0], "text", "") if content else ""
    return text, bool(getattr(res, "isError", False))


async def smoke(query: str) -> bool:
    # Lazy import so --help works without MCP installed
    from mcp import ClientSession
    from mcp.client.stdio import StdioServerParameters, stdio_client

    python_cmd = os.getenv("MCP_PYTHON") or sys.executable
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_REPO_ROOT / "src"), env.get("PYTHONPATH")) if p)

    print(f"[smoke] Repo root: {_REPO_ROOT}")
    print(f"[smoke] Memory API: {env.get('MEMORY_API_URL', 'http://localhost:3000')}")

    server = StdioServerParameters(command=python_cmd, args=["-m", "kg_memory_mcp.server"], env=env)

    ok = True
    async with stdio_client(server) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            tools = await session.list_tools()
            print(f"[smoke] Tools ({len(tools.tools)}): {', '.join(t.name for t in tools.tools)}")

            for name, args in (("check_health", {}), ("search_nodes", {"query": query})):
                text, is_error = _unwrap_tool_result(await session.call_tool(name, args))
                status = "FAILED" if is_error else "ok"
                print(f"[smoke] {name}: {status}\n{_pretty(text)}")
                ok = ok and not is_error

    return ok


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--query", default="", help="search_nodes query to run after the health check")
    args = parser.parse_args()

    if not os.getenv("MEMORY_API_KEY"):
        print("[smoke] MEMORY_API_KEY is not set", file=sys.stderr)
        return 2

    return 0 if asyncio.run(smoke(args.query)) else 1


if __name__ == "__main__":
    raise SystemExit(main())
