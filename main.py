"""
Lead Intent Scoring Engine - Main Entry Point
=============================================
Run this file to start the FastAPI server.

Usage:
    python main.py                    # Start server on port 8000
    python main.py --port 8080        # Start server on custom port
    python main.py --reload           # Start with auto-reload (dev mode)

API Documentation:
    http://localhost:8000/docs        # Swagger UI
    http://localhost:8000/redoc       # ReDoc
"""

import argparse
import logging
import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables FIRST
load_dotenv()

from intent_engine.config.settings import LLM_CONFIG, LOG_LEVEL


def main():
    parser = argparse.ArgumentParser(description="Lead Intent Scoring API Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind the server to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    llm_status = "Configured" if LLM_CONFIG["api_key"] else "MISSING - scoring will fail"

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║                LEAD INTENT SCORING ENGINE                    ║
║                      Version 1.0.0                           ║
╠══════════════════════════════════════════════════════════════╣
║  Server:    http://{args.host}:{args.port}                            ║
║  Docs:      http://localhost:{args.port}/docs                       ║
║  Health:    http://localhost:{args.port}/api/health                 ║
║  LLM key:   {llm_status:<43}║
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "intent_engine.api.endpoints:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
