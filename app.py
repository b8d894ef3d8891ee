import argparse
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse

from agent_tools.mcp_server import create_mcp_server
from common.enums import ImageCategory
from common.models import ToolRequest
from core.app_config import Settings, load_settings
from core.logger_config import logger, setup_logger
from core.supervisor import install_loop_hook, install_process_hooks
from handlers.image_tools import ImageTools
from handlers.replicate_client import ReplicateClient
from handlers.tool_dispatcher import ToolDispatcher

UNKNOWN_TOOL = "Unknown tool requested."
INVALID_BODY = "Invalid request body."

def create_app(settings: Settings, client: Optional[ReplicateClient] = None) -> FastAPI:
    client = client or ReplicateClient(settings)
    dispatcher = ToolDispatcher(ImageTools(settings, client))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- 1. Startup Logic ---
        install_loop_hook()
        settings.ensure_directories()
        logger.info('Image directories ensured')

        yield

        # --- 2. Shutdown Logic ---
        logger.info("Application Shutdown: Cleaning up...")
        await client.aclose()

    app = FastAPI(title="Replicate Image Relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = dispatcher

    # --- TOOL ENDPOINT ---
    @app.post("/mcp")
    async def mcp_endpoint(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"error": INVALID_BODY})
        if not isinstance(body, dict):
            return JSONResponse(status_code=400, content={"error": INVALID_BODY})

        tool_request = ToolRequest.model_validate(body)
        logger.info(f"Received request: {tool_request.name} {tool_request.arguments}")

        # Failures stay inside this request; the server keeps serving others
        try:
            result = await request.app.state.dispatcher.dispatch(tool_request)
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            return JSONResponse(status_code=500, content={"error": str(e) or "Internal Server Error"})

        if result is None:
            logger.warning(f"Unknown tool requested: {tool_request.name}")
            return JSONResponse(status_code=400, content={"error": UNKNOWN_TOOL})

        logger.info(f"Response generated: {result.to_response()}")
        return result.to_response()

    @app.get("/health")
    async def health_check(request: Request):
        return {
            "status": "ok",
            "tools": request.app.state.dispatcher.tool_names,
            "directories": {
                "input": str(settings.input_dir),
                "modified": str(settings.modified_dir),
                "generated": str(settings.generated_dir),
            }
        }

    @app.get("/images/{category}/{filename}")
    async def serve_image_endpoint(category: str, filename: str):
        """API endpoint to serve a downloaded image by folder and filename"""
        folders = {
            ImageCategory.GENERATED.value: settings.generated_dir,
            ImageCategory.MODIFIED.value: settings.modified_dir,
        }
        folder = folders.get(category)
        if folder is None:
            return JSONResponse(status_code=404, content={"error": f"Unknown image category: {category}"})

        path = folder.absolute() / filename
        try:
            found = path.parent == folder.absolute() and path.is_file()
        except (OSError, ValueError):
            found = False
        if not found:
            return JSONResponse(status_code=404, content={"error": f"Image {filename} not found"})
        return FileResponse(path)

    return app

def run_stdio(settings: Settings) -> None:
    settings.ensure_directories()
    client = ReplicateClient(settings)
    # The server's lifespan closes the client on the loop that used it
    mcp_server = create_mcp_server(ImageTools(settings, client), owns_client=True)
    mcp_server.run()

def main():
    parser = argparse.ArgumentParser(description="Relay image generation requests to Replicate")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve the tools as a native MCP server over stdio instead of HTTP"
    )
    args = parser.parse_args()

    settings = load_settings()
    # stdout carries the protocol in stdio mode
    setup_logger(settings.log_level, sink=sys.stderr if args.stdio else sys.stdout)
    install_process_hooks()
    logger.info("Starting MCP Server...")

    if args.stdio:
        run_stdio(settings)
        return

    app = create_app(settings)
    logger.info(f"MCP server running at http://127.0.0.1:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)

# To run this file: python app.py
if __name__ == '__main__':
    main()
