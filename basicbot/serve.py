"""Launch the bot under Uvicorn."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    port = int(os.environ.get("PORT", "3978"))
    uvicorn.run("basicbot.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
