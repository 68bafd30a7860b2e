#!/usr/bin/env python3
"""
Talk about a chart image from the terminal.

Loads an image into a conversation session and sends each line typed as a
question to a running ChartChat server. Commands:

    /reset          drop the image and conversation
    /load PATH      start a new conversation about another image
    /quit           exit

Usage:
    python scripts/chart_chat.py path/to/chart.png --base-url http://localhost:8000
"""

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.client import ChartTransport, ConversationSession, SessionState
from app.models.request import ChartImage

logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def load_chart(path: str) -> ChartImage:
    """Read an image file into a ChartImage."""
    media_type, _ = mimetypes.guess_type(path)
    return ChartImage(data=Path(path).read_bytes(), media_type=media_type or "image/png")


def format_reply(content: str) -> str:
    """Pretty-print structured replies; leave prose untouched."""
    try:
        return json.dumps(json.loads(content), indent=2)
    except ValueError:
        return content


async def chat(image_path: Optional[str], base_url: Optional[str]) -> None:
    transport = ChartTransport(base_url=base_url)
    session = ConversationSession(transport)

    if image_path:
        session.load_image(load_chart(image_path))
        print(f"Loaded {image_path}. Ask a question about the chart.")

    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break

            line = line.strip()
            if not line:
                continue
            if line == "/quit":
                break
            if line == "/reset":
                session.reset()
                print("Conversation cleared. Use /load PATH to start again.")
                continue
            if line.startswith("/load "):
                path = line[len("/load "):].strip()
                try:
                    session.load_image(load_chart(path))
                except OSError as e:
                    print(f"Could not read {path}: {e}")
                    continue
                print(f"Loaded {path}.")
                continue

            if session.state == SessionState.EMPTY:
                print("No chart loaded. Use /load PATH first.")
                continue

            reply = await session.submit(line)
            if reply is not None:
                print(format_reply(reply.content))
    finally:
        await transport.aclose()


def main():
    parser = argparse.ArgumentParser(
        description="Chat about a chart image with a running ChartChat server"
    )
    parser.add_argument(
        "image",
        nargs="?",
        help="Path to the chart image to start with"
    )
    parser.add_argument(
        "--base-url",
        help="Server root URL (defaults to API_BASE_URL env var)"
    )
    args = parser.parse_args()

    asyncio.run(chat(args.image, args.base_url))


if __name__ == "__main__":
    main()
