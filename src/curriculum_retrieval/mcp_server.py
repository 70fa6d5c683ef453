"""MCP server for curriculum-retrieval."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from . import core
from .config import Config, get_config
from .db import init_db
from .errors import RetrievalError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("curriculum-retrieval-mcp")

# Create MCP server
server = Server("curriculum-retrieval")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="retrieve_content",
            description="Retrieve the most relevant textbook chunks for a board, grade and subject. Full-text search runs first; a substring match is used only if it finds nothing.",
            inputSchema={
                "type": "object",
                "properties": {
                    "board": {
                        "type": "string",
                        "description": "Curriculum board name (e.g. 'CBSE'), case-insensitive",
                    },
                    "grade": {
                        "type": "string",
                        "description": "Grade of the book (e.g. '5')",
                    },
                    "subject": {
                        "type": "string",
                        "description": "Subject of the book (e.g. 'Math')",
                    },
                    "seed_keywords": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Keywords; a chunk matching any of them qualifies",
                    },
                    "chapter_id": {
                        "type": "string",
                        "description": "Restrict results to one chapter",
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum chunks to return (1-20)",
                        "default": 5,
                    },
                },
                "required": ["board", "grade", "subject", "seed_keywords"],
            },
        ),
        Tool(
            name="get_chunk",
            description="Get a content chunk by ID, with its book, board and chapter.",
            inputSchema={
                "type": "object",
                "properties": {
                    "chunk_id": {
                        "type": "string",
                        "description": "The chunk ID",
                    },
                },
                "required": ["chunk_id"],
            },
        ),
        Tool(
            name="list_book_chunks",
            description="List a book's chunks in chapter order, one page at a time.",
            inputSchema={
                "type": "object",
                "properties": {
                    "book_id": {
                        "type": "string",
                        "description": "The book ID",
                    },
                    "page": {
                        "type": "integer",
                        "description": "Page number (starting at 1)",
                        "default": 1,
                    },
                    "per_page": {
                        "type": "integer",
                        "description": "Chunks per page",
                        "default": 50,
                    },
                },
                "required": ["book_id"],
            },
        ),
        Tool(
            name="content_stats",
            description="Count active boards and books, chapters and chunks in the corpus.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


def handle_tool(name: str, arguments: dict[str, Any], config: Optional[Config] = None) -> str:
    """Run a tool and return its text result.

    Retrieval errors are returned as a JSON ``error`` object rather than
    raised, so the client can tell a bad request from a store failure.
    """
    if config is None:
        config = get_config()

    try:
        if name == "retrieve_content":
            response = core.retrieve_content(
                board=arguments.get("board"),
                grade=arguments.get("grade"),
                subject=arguments.get("subject"),
                seed_keywords=arguments.get("seed_keywords"),
                chapter_id=arguments.get("chapter_id"),
                limit=arguments.get("limit"),
                config=config,
            )
            return json.dumps(response.to_dict(), indent=2)

        elif name == "get_chunk":
            chunk = core.get_chunk(arguments["chunk_id"], config=config)
            if chunk is None:
                return "Content chunk not found."
            return json.dumps(chunk.to_dict(), indent=2)

        elif name == "list_book_chunks":
            page = core.list_chunks_by_book(
                arguments["book_id"],
                page=arguments.get("page", 1),
                per_page=arguments.get("per_page", 50),
                config=config,
            )
            return json.dumps(page.to_dict(), indent=2)

        elif name == "content_stats":
            return json.dumps(core.get_content_stats(config=config).to_dict(), indent=2)

        else:
            return f"Unknown tool: {name}"

    except RetrievalError as e:
        logger.info(f"Tool {name} rejected: {e}")
        return json.dumps({"error": e.to_dict()}, indent=2)


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        return [TextContent(type="text", text=handle_tool(name, arguments))]
    except Exception as e:
        logger.exception(f"Error in tool {name}")
        return [TextContent(type="text", text=f"Error: {str(e)}")]


async def main():
    """Run the MCP server."""
    config = get_config()
    init_db(config)
    logger.info(f"Curriculum Retrieval MCP server started (db: {config.db_path})")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def run():
    """Entry point for the MCP server."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
