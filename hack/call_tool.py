"""MCP ツール呼び出しスクリプト。

HTTP POST で /mcp に JSON-RPC リクエストを送信する開発・テスト用スクリプト。
ツール名を省略すると tools/list を送信する。
"""

import argparse
import http.client
import json
import sys


def create_parser() -> argparse.ArgumentParser:
    """コマンドライン引数パーサーを作成する。"""
    parser = argparse.ArgumentParser(
        description="MCP ツールをサーバー経由で呼び出す",
    )
    parser.add_argument(
        "tool",
        nargs="?",
        default=None,
        help="ツール名 (例: mattermost_get_me)。省略時は tools/list",
    )
    parser.add_argument(
        "-a",
        "--arguments",
        default="{}",
        help='ツール引数の JSON (例: \'{"term": "town"}\')',
    )
    parser.add_argument(
        "-H",
        "--host",
        default="localhost",
        help="サーバーホスト (デフォルト: localhost)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=3002,
        help="サーバーポート (デフォルト: 3002)",
    )
    parser.add_argument(
        "-t",
        "--token",
        default=None,
        help="Bearer トークン (MCP_AUTH_TOKENS 設定時に必要)",
    )
    return parser


def build_request(tool: str | None, arguments: dict) -> dict:
    """JSON-RPC リクエストを組み立てる。

    Args:
        tool: ツール名。None の場合は tools/list
        arguments: ツール引数

    Returns:
        JSON-RPC リクエスト
    """
    if tool is None:
        return {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/call",
        "params": {"name": tool, "arguments": arguments},
    }


def send_request(
    host: str, port: int, request: dict, token: str | None
) -> tuple[bool, str]:
    """JSON-RPC リクエストを送信する。

    Args:
        host: サーバーホスト
        port: サーバーポート
        request: JSON-RPC リクエスト
        token: Bearer トークン

    Returns:
        (成功フラグ, レスポンス本文またはエラーメッセージ) のタプル
    """
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        conn = http.client.HTTPConnection(host, port, timeout=60)
        try:
            conn.request("POST", "/mcp", body=json.dumps(request), headers=headers)
            response = conn.getresponse()
            body = response.read().decode("utf-8")

            if response.status != 200:
                return False, f"{response.status} {response.reason}: {body}"
            return True, body
        finally:
            conn.close()
    except ConnectionRefusedError:
        return False, "Connection refused"
    except TimeoutError:
        return False, "Connection timeout"
    except OSError as e:
        return False, str(e)


def main() -> int:
    """メインエントリーポイント。"""
    parser = create_parser()
    args = parser.parse_args()

    try:
        arguments = json.loads(args.arguments)
    except json.JSONDecodeError as e:
        print(f"Error: invalid --arguments JSON: {e}")
        return 1

    request = build_request(args.tool, arguments)
    print(f"Sending {request['method']} to http://{args.host}:{args.port}/mcp...")

    success, body = send_request(args.host, args.port, request, args.token)
    if not success:
        print(f"Error: {body}")
        return 1

    data = json.loads(body)
    if "error" in data:
        print(f"JSON-RPC error {data['error']['code']}: {data['error']['message']}")
        return 1

    result = data["result"]
    if args.tool is None:
        for tool in result["tools"]:
            print(f"{tool['name']}: {tool['description']}")
        return 0

    for content in result["content"]:
        text = content.get("text", "")
        try:
            print(json.dumps(json.loads(text), indent=2, ensure_ascii=False))
        except json.JSONDecodeError:
            print(text)
    return 1 if result.get("isError") else 0


if __name__ == "__main__":
    sys.exit(main())
