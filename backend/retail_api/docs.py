"""
Online Retail API - OpenAPI Schema Export
==========================================

What:  Derives the OpenAPI document from the route definitions and writes it
       to a static JSON file.
Why:   The schema served at /api-docs/openapi.json is generated in-process;
       exporting it lets clients and reviewers use it without a running server.
How:   Builds the application (no lifespan, no database connection) and calls
       FastAPI's generator.

Usage:
    python -m retail_api.docs               # writes ./openapi.json
    python -m retail_api.docs docs/api.json
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "openapi.json"


def build_openapi_schema(app: Optional[FastAPI] = None) -> Dict[str, Any]:
    """Returns the OpenAPI document for `app` (the default application if None)."""
    if app is None:
        from retail_api.main import create_app

        app = create_app()
    return app.openapi()


def export_openapi_schema(path: str = DEFAULT_OUTPUT, app: Optional[FastAPI] = None) -> Path:
    """Writes the OpenAPI document as indented JSON and returns the file path."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    schema = build_openapi_schema(app)
    output.write_text(json.dumps(schema, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("OpenAPI schema written to %s (%d paths)", output, len(schema.get("paths", {})))
    return output


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1:
        print("usage: python -m retail_api.docs [OUTPUT]", file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    output = export_openapi_schema(args[0] if args else DEFAULT_OUTPUT)
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
