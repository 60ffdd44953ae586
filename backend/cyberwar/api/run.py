"""Launch script for the Cyber Wargame Engine API server."""

import argparse
from typing import List, Optional

import uvicorn


def main(argv: Optional[List[str]] = None):
    """Start the API server."""
    parser = argparse.ArgumentParser(prog="cyberwar-api", description="Serve the game API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    print("=" * 70)
    print("Cyber Wargame Engine API")
    print("=" * 70)
    print(f"\nDocs at http://{args.host}:{args.port}/api/docs")
    print("\nPress Ctrl+C to stop the server")
    print("=" * 70 + "\n")

    uvicorn.run(
        "cyberwar.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


if __name__ == "__main__":
    main()
